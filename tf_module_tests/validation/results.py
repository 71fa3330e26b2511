"""Result dataclasses for module validation."""

from typing import Dict, Any, List
from dataclasses import dataclass, field
from enum import Enum


class CheckStatus(str, Enum):
    """Status of a single validation check."""
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


@dataclass
class CheckResult:
    """Result of one check against deployed resources."""
    name: str
    status: CheckStatus
    message: str = ""
    duration_seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASSED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class ValidationReport:
    """All check results for one module."""
    module: str
    checks: List[CheckResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return bool(self.checks) and all(check.passed for check in self.checks)

    @property
    def errors(self) -> List[str]:
        """Messages of every check that did not pass."""
        return [f"{c.name}: {c.message}" for c in self.checks if not c.passed]

    def failed_checks(self) -> List[str]:
        return [c.name for c in self.checks if not c.passed]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "module": self.module,
            "passed": self.passed,
            "tests": {c.name: c.passed for c in self.checks},
            "checks": [c.to_dict() for c in self.checks],
            "errors": self.errors,
        }
