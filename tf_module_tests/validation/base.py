"""Base class for module validators."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from tf_module_tests.aws.clients import AwsClientFactory
from tf_module_tests.logging import Logger, LogLevel, NullLogger
from tf_module_tests.validation.results import CheckResult, CheckStatus, ValidationReport

logger = logging.getLogger(__name__)

Check = Tuple[str, Callable[[], None]]


def expect_single(items: Sequence[Dict[str, Any]], what: str) -> Dict[str, Any]:
    """Assert a describe call matched exactly one resource and return it."""
    assert len(items) == 1, f"Expected exactly one {what}, found {len(items)}"
    return items[0]


def assert_equal(what: str, expected: Any, actual: Any) -> None:
    """Assert equality with a message naming the field and both values."""
    assert expected == actual, f"{what}: expected {expected!r}, got {actual!r}"


class BaseModuleValidator(ABC):
    """
    Read-only checks of a deployed module.

    Every ``check_*`` method raises AssertionError naming the resource and
    field on a mismatch; describe errors from botocore propagate unchanged.
    Tests call the checks directly so the first mismatch fails the test;
    ``validate`` runs all of them and collects a report instead.
    """

    module: str = ""

    def __init__(self, clients: AwsClientFactory, event_logger: Optional[Logger] = None):
        """
        Initialize validator.

        Args:
            clients: Client factory for the region the module was deployed to
            event_logger: Optional structured event logger
        """
        self.clients = clients
        self.events = event_logger or NullLogger()

    @abstractmethod
    def checks(self) -> List[Check]:
        """Ordered (name, check) pairs run by ``validate``."""
        pass

    def validate(self) -> ValidationReport:
        """
        Run all checks.

        Returns:
            ValidationReport with one CheckResult per check
        """
        report = ValidationReport(module=self.module)
        for name, check in self.checks():
            result = self.run_check(name, check)
            report.checks.append(result)
            self.events.log(
                LogLevel.INFO if result.passed else LogLevel.ERROR,
                "validation.check",
                f"{self.module}.{name}: {result.status.value}",
                {"module": self.module, "passed": result.passed},
            )

        self.events.info(
            "validation.completed",
            f"{self.module} validation finished",
            {"module": self.module, "passed": report.passed, "failed": len(report.failed_checks())},
        )
        return report

    def run_check(self, name: str, check: Callable[[], None]) -> CheckResult:
        """
        Run a single check and capture its result.

        Args:
            name: Name of the check
            check: Callable raising AssertionError on mismatch

        Returns:
            CheckResult
        """
        start = time.monotonic()
        try:
            check()
            return CheckResult(name, CheckStatus.PASSED, duration_seconds=time.monotonic() - start)
        except AssertionError as e:
            logger.info(f"{self.module}.{name} failed: {e}")
            return CheckResult(name, CheckStatus.FAILED, str(e), time.monotonic() - start)
        except Exception as e:
            logger.warning(f"{self.module}.{name} raised: {e}")
            return CheckResult(name, CheckStatus.ERROR, f"Unexpected error: {e}", time.monotonic() - start)
