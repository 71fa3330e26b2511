"""Module options: the directory, variables and environment for one terraform run."""

import json
import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from tf_module_tests.runtime.stages import any_stage_skipped

logger = logging.getLogger(__name__)

TEST_DATA_DIR = ".test-data"
OPTIONS_FILE = "TerraformOptions.json"

# Never copied into a temp working dir; they hold state of another run.
_COPY_IGNORE = shutil.ignore_patterns(
    ".git", "__pycache__", ".terraform", "terraform.tfstate", "terraform.tfstate.backup", TEST_DATA_DIR, "*.tfvars.json",
)


@dataclass
class ModuleOptions:
    """Everything needed to run terraform against one module directory."""
    terraform_dir: str
    vars: Dict[str, Any] = field(default_factory=dict)
    env_vars: Dict[str, str] = field(default_factory=dict)

    @property
    def region(self) -> str:
        """Region the module is deployed to, taken from AWS_DEFAULT_REGION."""
        return self.env_vars.get("AWS_DEFAULT_REGION") or self.vars.get("region", "")

    def with_dir(self, terraform_dir: Union[str, Path]) -> "ModuleOptions":
        """Copy of these options pointing at another directory."""
        return ModuleOptions(
            terraform_dir=str(terraform_dir),
            vars=dict(self.vars),
            env_vars=dict(self.env_vars),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "terraform_dir": self.terraform_dir,
            "vars": self.vars,
            "env_vars": self.env_vars,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModuleOptions":
        """Create options from dictionary."""
        return cls(
            terraform_dir=data["terraform_dir"],
            vars=dict(data.get("vars", {})),
            env_vars=dict(data.get("env_vars", {})),
        )


def save_options(working_dir: Union[str, Path], options: ModuleOptions) -> Path:
    """
    Persist options so a later test stage can reload them.

    Args:
        working_dir: Test working directory
        options: Options to save

    Returns:
        Path of the written JSON file
    """
    path = Path(working_dir) / TEST_DATA_DIR / OPTIONS_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(options.to_dict(), indent=2))
    logger.debug(f"Saved terraform options to {path}")
    return path


def load_options(working_dir: Union[str, Path]) -> ModuleOptions:
    """Load options written by ``save_options``; raises FileNotFoundError if absent."""
    path = Path(working_dir) / TEST_DATA_DIR / OPTIONS_FILE
    return ModuleOptions.from_dict(json.loads(path.read_text()))


def copy_terraform_folder_to_temp(
    root_dir: Union[str, Path],
    relative_dir: str,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Copy a module folder into a fresh temp directory.

    Parallel cases each get their own copy so their ``.terraform`` directories
    and state files never collide. The copy keeps the folder's position
    relative to ``root_dir`` so relative ``source = "../..."`` references
    still resolve.

    When any ``SKIP_<stage>`` variable is set the module folder itself is
    returned, so state and saved options carry over between invocations
    that each run only some stages.

    Args:
        root_dir: Repository root containing the module
        relative_dir: Module path relative to root_dir, e.g. "modules/alb"
        environ: Mapping to read SKIP_ variables from (defaults to os.environ)

    Returns:
        Path of the copied module directory
    """
    root = Path(root_dir)
    source = root / relative_dir
    if not source.is_dir():
        raise FileNotFoundError(f"Terraform folder not found: {source}")

    if any_stage_skipped(environ):
        logger.info(f"A SKIP_ stage variable is set, using {source} in place of a temp copy")
        return source

    temp_root = Path(tempfile.mkdtemp(prefix="tf-module-tests-"))
    shutil.copytree(root, temp_root / root.name, ignore=_COPY_IGNORE, dirs_exist_ok=True)
    destination = temp_root / root.name / relative_dir
    logger.info(f"Copied {source} to {destination}")
    return destination
