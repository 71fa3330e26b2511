"""Named test stages that can be skipped while iterating on a single stage."""

import logging
import os
from typing import Callable, Mapping, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def skip_env_var(stage: str) -> str:
    """Environment variable that skips a stage, e.g. SKIP_setup."""
    return f"SKIP_{stage}"


def any_stage_skipped(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True when any SKIP_<stage> variable is set, i.e. stages are being run across separate invocations."""
    env = os.environ if environ is None else environ
    return any(key.startswith("SKIP_") and value for key, value in env.items())


def should_skip(stage: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    return bool(env.get(skip_env_var(stage)))


def run_test_stage(
    stage: str,
    func: Callable[[], T],
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[T]:
    """
    Run a stage unless ``SKIP_<stage>`` is set in the environment.

    Args:
        stage: Stage name such as "setup" or "validate"
        func: Stage body
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        The stage's return value, or None when skipped
    """
    if should_skip(stage, environ):
        logger.info(f"Skipping stage '{stage}' because {skip_env_var(stage)} is set")
        return None

    logger.info(f"Running stage '{stage}'")
    return func()
