"""Deploy one or more modules and guarantee they are destroyed in reverse order."""

import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from tf_module_tests.config import Settings
from tf_module_tests.logging import Logger, NullLogger
from tf_module_tests.runtime.options import TEST_DATA_DIR, ModuleOptions
from tf_module_tests.runtime.stages import should_skip, skip_env_var
from tf_module_tests.runtime.terraform import TerraformRuntime

logger = logging.getLogger(__name__)

RuntimeFactory = Callable[[ModuleOptions], TerraformRuntime]

SCENARIO_FILE = "Scenario.json"


class Scenario:
    """
    Context manager owning the lifecycle of every module deployed inside it.

    ``deploy`` registers the module's destroy before running init and apply,
    so a module whose apply fails half-way is still torn down. On exit, for
    any reason, registered modules are destroyed last-in first-out: in a
    VPC → ALB → compute chain, compute goes first and the VPC last.

    With ``teardown_stage`` set, teardown is itself a stage: when
    ``SKIP_<teardown_stage>`` is set the modules are left up, and ``save``
    and ``restore`` carry them over to a later invocation that validates
    and destroys them.
    """

    def __init__(
        self,
        name: str,
        settings: Optional[Settings] = None,
        event_logger: Optional[Logger] = None,
        runtime_factory: Optional[RuntimeFactory] = None,
        teardown_stage: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.name = name
        self.settings = settings or Settings.from_env()
        self.events = event_logger or NullLogger()
        self._runtime_factory = runtime_factory or self._default_runtime
        self.teardown_stage = teardown_stage
        self._environ = environ
        self._stack: List[Tuple[str, TerraformRuntime]] = []
        self.applied: List[str] = []
        self.destroyed: List[str] = []
        self._started = 0.0

    def _default_runtime(self, options: ModuleOptions) -> TerraformRuntime:
        return TerraformRuntime(options, timeout=self.settings.command_timeout, event_logger=self.events)

    def __enter__(self) -> "Scenario":
        self._started = time.monotonic()
        self.events.info("scenario.started", self.name, {"scenario": self.name})
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.teardown_stage and should_skip(self.teardown_stage, self._environ):
            logger.warning(
                f"[{self.name}] {skip_env_var(self.teardown_stage)} is set, "
                f"leaving {[label for label, _ in self._stack]} deployed"
            )
            errors: List[BaseException] = []
        else:
            errors = self.teardown()
        duration = time.monotonic() - self._started
        self.events.info(
            "scenario.completed",
            f"{self.name} finished",
            {"passed": exc_type is None and not errors, "duration_seconds": duration},
        )
        if errors and exc_type is None:
            raise errors[0]
        return False

    def deploy(self, options: ModuleOptions, name: Optional[str] = None) -> TerraformRuntime:
        """
        Init and apply a module, scheduling its destroy first.

        Args:
            options: Module options
            name: Label used in logs and teardown order (defaults to the directory name)

        Returns:
            The runtime, for reading outputs
        """
        label = name or Path(options.terraform_dir).name
        runtime = self._runtime_factory(options)
        self._stack.append((label, runtime))
        logger.info(f"[{self.name}] deploying {label}")
        runtime.init_and_apply()
        self.applied.append(label)
        return runtime

    def teardown(self) -> List[BaseException]:
        """
        Destroy every registered module in reverse order.

        A failing destroy does not stop the remaining ones.

        Returns:
            Errors raised by destroy, in the order they happened
        """
        errors: List[BaseException] = []
        while self._stack:
            label, runtime = self._stack.pop()
            logger.info(f"[{self.name}] destroying {label}")
            try:
                runtime.destroy()
            except Exception as e:
                logger.error(f"[{self.name}] destroy of {label} failed: {e}")
                self.events.error("cleanup.failed", f"destroy of {label} failed", {"module": label})
                errors.append(e)
            else:
                self.destroyed.append(label)
                self.events.info("cleanup.completed", f"{label} destroyed", {"module": label})
        return errors

    def save(self, working_dir: Union[str, Path]) -> Path:
        """
        Persist the deployed modules so a later invocation can ``restore`` them.

        Args:
            working_dir: Test working directory

        Returns:
            Path of the written JSON file
        """
        path = Path(working_dir) / TEST_DATA_DIR / SCENARIO_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        modules = [{"name": label, "options": runtime.options.to_dict()} for label, runtime in self._stack]
        path.write_text(json.dumps(modules, indent=2))
        logger.debug(f"[{self.name}] saved {len(modules)} modules to {path}")
        return path

    def restore(self, working_dir: Union[str, Path]) -> Dict[str, TerraformRuntime]:
        """
        Register modules deployed by an earlier invocation, without applying them.

        They are destroyed on exit like modules deployed by ``deploy``.

        Args:
            working_dir: Directory passed to ``save``

        Returns:
            Runtimes by module label, for reading outputs
        """
        path = Path(working_dir) / TEST_DATA_DIR / SCENARIO_FILE
        runtimes: Dict[str, TerraformRuntime] = {}
        for entry in json.loads(path.read_text()):
            runtime = self._runtime_factory(ModuleOptions.from_dict(entry["options"]))
            self._stack.append((entry["name"], runtime))
            runtimes[entry["name"]] = runtime
        logger.info(f"[{self.name}] restored {list(runtimes)} from {path}")
        return runtimes
