"""Settings for the module test suite, read from the environment."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional


DEFAULT_CERTIFICATE_ARN = (
    "arn:aws:acm:us-east-1:683721267198:certificate/aa67a8ae-f2fe-4cef-95e6-a676fd11f5be"
)
DEFAULT_DOMAIN = "merkata.cloudns.be"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Configuration shared by option builders, runtimes and validators."""
    root_dir: Path = field(default_factory=Path.cwd)
    certificate_arn: str = DEFAULT_CERTIFICATE_ARN
    domain: str = DEFAULT_DOMAIN
    convergence_wait_seconds: int = 120
    command_timeout: int = 1800
    run_integration: bool = False
    endpoint_url: Optional[str] = None  # LocalStack or other AWS-compatible endpoint

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings with every unset variable left at its default
        """
        env = os.environ if environ is None else environ
        settings = cls()

        if env.get("TF_MODULE_TESTS_ROOT"):
            settings.root_dir = Path(env["TF_MODULE_TESTS_ROOT"]).expanduser()
        if env.get("TF_MODULE_TESTS_CERTIFICATE_ARN"):
            settings.certificate_arn = env["TF_MODULE_TESTS_CERTIFICATE_ARN"]
        if env.get("TF_MODULE_TESTS_DOMAIN"):
            settings.domain = env["TF_MODULE_TESTS_DOMAIN"]
        if env.get("TF_MODULE_TESTS_CONVERGENCE_WAIT"):
            settings.convergence_wait_seconds = int(env["TF_MODULE_TESTS_CONVERGENCE_WAIT"])
        if env.get("TF_MODULE_TESTS_COMMAND_TIMEOUT"):
            settings.command_timeout = int(env["TF_MODULE_TESTS_COMMAND_TIMEOUT"])

        settings.run_integration = env.get("TF_MODULE_TESTS_INTEGRATION", "").lower() in _TRUTHY
        settings.endpoint_url = env.get("AWS_ENDPOINT_URL") or None
        return settings

    def module_dir(self, name: str) -> Path:
        """Directory of a module under ``<root>/modules``."""
        return self.root_dir / "modules" / name

    def example_dir(self, name: str) -> Path:
        """Directory of an example under ``<root>/examples``."""
        return self.root_dir / "examples" / name

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "root_dir": str(self.root_dir),
            "certificate_arn": self.certificate_arn,
            "domain": self.domain,
            "convergence_wait_seconds": self.convergence_wait_seconds,
            "command_timeout": self.command_timeout,
            "run_integration": self.run_integration,
            "endpoint_url": self.endpoint_url,
        }
