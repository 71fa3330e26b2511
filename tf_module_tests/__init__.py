"""Integration tests for the VPC, ALB and compute Terraform modules."""

__version__ = "0.1.0"

from . import aws
from . import modules
from . import runtime
from . import validation

__all__ = [
    "aws",
    "modules",
    "runtime",
    "validation",
]
