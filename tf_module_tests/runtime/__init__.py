"""Runtime module for Terraform operations."""

from .options import ModuleOptions, save_options, load_options, copy_terraform_folder_to_temp
from .terraform import TerraformRuntime, TerraformCommandError, TerraformOutputError, CommandResult
from .scenario import Scenario
from .stages import run_test_stage

__all__ = [
    'ModuleOptions',
    'save_options',
    'load_options',
    'copy_terraform_folder_to_temp',
    'TerraformRuntime',
    'TerraformCommandError',
    'TerraformOutputError',
    'CommandResult',
    'Scenario',
    'run_test_stage',
]
