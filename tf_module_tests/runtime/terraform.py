"""Terraform execution and output retrieval."""

import json
import logging
import os
import subprocess
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from tf_module_tests.logging import Logger, NullLogger
from tf_module_tests.runtime.options import ModuleOptions

logger = logging.getLogger(__name__)


class TerraformCommandError(RuntimeError):
    """A terraform command exited non-zero or could not be run."""

    def __init__(self, command: List[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        detail = (stderr or stdout).strip().splitlines()
        tail = "\n".join(detail[-20:])
        super().__init__(f"'{' '.join(command)}' failed with exit code {returncode}:\n{tail}")


class TerraformOutputError(RuntimeError):
    """An output is missing, empty or not of the requested shape."""


@dataclass
class CommandResult:
    """Result of a terraform subprocess."""
    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float

    @property
    def success(self) -> bool:
        return self.returncode == 0


class TerraformRuntime:
    """Runs init/apply/destroy/output for one ModuleOptions."""

    def __init__(
        self,
        options: ModuleOptions,
        timeout: int = 1800,
        event_logger: Optional[Logger] = None,
    ):
        """
        Initialize Terraform runtime.

        Args:
            options: Module directory, variables and environment
            timeout: Per-command timeout in seconds
            event_logger: Optional structured event logger
        """
        self.options = options
        self.working_dir = Path(options.terraform_dir)
        self.timeout = timeout
        self.events = event_logger or NullLogger()
        self.var_file = self.working_dir / f"tf-module-tests-{uuid.uuid4().hex[:8]}.tfvars.json"

    def init(self) -> CommandResult:
        """Run terraform init."""
        return self._run_checked(['terraform', 'init', '-input=false', '-no-color'], 'terraform.init')

    def apply(self) -> CommandResult:
        """Run terraform apply with the option variables."""
        self._write_var_file()
        cmd = ['terraform', 'apply', '-auto-approve', '-input=false', '-no-color', f'-var-file={self.var_file.name}']
        return self._run_checked(cmd, 'terraform.apply')

    def init_and_apply(self) -> CommandResult:
        """Run terraform init followed by apply."""
        self.init()
        return self.apply()

    def destroy(self) -> CommandResult:
        """Run terraform destroy with the same variables apply used, then remove the var file."""
        self._write_var_file()
        cmd = ['terraform', 'destroy', '-auto-approve', '-input=false', '-no-color', f'-var-file={self.var_file.name}']
        result = self._run_checked(cmd, 'terraform.destroy')
        self.var_file.unlink(missing_ok=True)
        return result

    def output_all(self) -> Dict[str, Any]:
        """
        Get every output value.

        Returns:
            Dictionary mapping output names to their decoded values
        """
        result = self._run_checked(['terraform', 'output', '-json', '-no-color'], 'terraform.output')
        try:
            raw = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise TerraformOutputError(f"Could not parse terraform output: {e}") from e
        return {name: entry.get('value') for name, entry in raw.items()}

    def output(self, name: str) -> str:
        """
        Get a scalar output as a string.

        ``name`` may address one key of a map output with a dot,
        e.g. ``target_group_arns.app1``.
        """
        value = self._output_value(name)
        if isinstance(value, (list, dict)):
            raise TerraformOutputError(f"Output '{name}' is not a scalar: {type(value).__name__}")
        text = value if isinstance(value, str) else json.dumps(value)
        if not text:
            raise TerraformOutputError(f"Output '{name}' is empty")
        return text

    def output_list(self, name: str) -> List[str]:
        """Get a list output with every element as a string."""
        value = self._output_value(name)
        if not isinstance(value, list):
            raise TerraformOutputError(f"Output '{name}' is not a list: {type(value).__name__}")
        return [item if isinstance(item, str) else json.dumps(item) for item in value]

    def output_map(self, name: str) -> Dict[str, str]:
        """Get a map output with every value as a string."""
        value = self._output_value(name)
        if not isinstance(value, dict):
            raise TerraformOutputError(f"Output '{name}' is not a map: {type(value).__name__}")
        return {key: item if isinstance(item, str) else json.dumps(item) for key, item in value.items()}

    def _output_value(self, name: str) -> Any:
        base, _, key = name.partition('.')
        cmd = ['terraform', 'output', '-json', '-no-color', base]
        result = self._run_command(cmd)
        if not result.success:
            raise TerraformOutputError(f"Output '{base}' not found: {result.stderr.strip()}")
        try:
            value = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise TerraformOutputError(f"Could not parse output '{base}': {e}") from e

        if key:
            if not isinstance(value, dict) or key not in value:
                raise TerraformOutputError(f"Output '{base}' has no key '{key}'")
            value = value[key]
        if value is None:
            raise TerraformOutputError(f"Output '{name}' is null")
        return value

    def _write_var_file(self) -> None:
        self.working_dir.mkdir(parents=True, exist_ok=True)
        self.var_file.write_text(json.dumps(self.options.vars, indent=2))

    def _environment(self) -> Dict[str, str]:
        env = os.environ.copy()
        env['TF_IN_AUTOMATION'] = '1'
        env.update(self.options.env_vars)
        return env

    def _run_checked(self, cmd: List[str], event: str) -> CommandResult:
        """Run a command, emit an event, and raise TerraformCommandError on failure."""
        result = self._run_command(cmd)
        data = {
            "module": self.working_dir.name,
            "region": self.options.region,
            "duration_seconds": result.duration_seconds,
            "success": result.success,
        }
        if result.success:
            self.events.info(event, f"{' '.join(cmd[:2])} succeeded", data)
            return result

        self.events.error(event, f"{' '.join(cmd[:2])} failed", data)
        raise TerraformCommandError(cmd, result.returncode, result.stdout, result.stderr)

    def _run_command(self, cmd: List[str]) -> CommandResult:
        """
        Run a terraform command in the working directory.

        Args:
            cmd: Command and arguments

        Returns:
            CommandResult; a timeout or a missing binary yields returncode -1
        """
        logger.debug(f"Running {' '.join(cmd)} in {self.working_dir}")
        start = time.monotonic()
        try:
            result = subprocess.run(
                cmd,
                cwd=self.working_dir,
                env=self._environment(),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
            return CommandResult(
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                duration_seconds=time.monotonic() - start,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                returncode=-1,
                stdout='',
                stderr=f'Command timed out after {self.timeout} seconds',
                duration_seconds=time.monotonic() - start,
            )
        except FileNotFoundError:
            return CommandResult(
                returncode=-1,
                stdout='',
                stderr=f'Command not found: {cmd[0]}',
                duration_seconds=time.monotonic() - start,
            )
