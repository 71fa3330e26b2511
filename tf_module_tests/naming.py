"""Randomized resource naming so parallel runs never collide."""

import random
import string

_BASE62 = string.digits + string.ascii_uppercase + string.ascii_lowercase


def unique_id(length: int = 6) -> str:
    """Return a short random base-62 identifier."""
    return "".join(random.choice(_BASE62) for _ in range(length))


def project_name(prefix: str = "", length: int = 6, lowercase: bool = True) -> str:
    """
    Build a project name with a random suffix.

    Args:
        prefix: Optional fixed prefix (e.g. "vpc-test-", "comp")
        length: Length of the random part
        lowercase: Lowercase the random part; the ALB and compute modules
            lowercase the project name, so lookups by name need the same

    Returns:
        Project name such as "vpc-test-a1b2c3"
    """
    suffix = unique_id(length)
    if lowercase:
        suffix = suffix.lower()
    return f"{prefix}{suffix}"
