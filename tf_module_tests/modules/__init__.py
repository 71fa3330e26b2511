"""Option builders and expected configuration of the modules under test."""

from tf_module_tests.modules.apps import AppConfig, AppSet, default_apps, duplicate_priorities
from tf_module_tests.modules.network import (
    DEFAULT_VPC_CIDR,
    DEFAULT_AZ_COUNT,
    expected_nat_gateway_count,
    expected_subnet_layout,
    is_subnet_of,
)
from tf_module_tests.modules.builders import (
    DEFAULT_INSTANCE_TYPE,
    DEFAULT_INSTANCE_COUNT,
    create_vpc_options,
    create_alb_options,
    create_compute_options,
    create_complete_options,
)

__all__ = [
    "AppConfig",
    "AppSet",
    "default_apps",
    "duplicate_priorities",
    "DEFAULT_VPC_CIDR",
    "DEFAULT_AZ_COUNT",
    "expected_nat_gateway_count",
    "expected_subnet_layout",
    "is_subnet_of",
    "DEFAULT_INSTANCE_TYPE",
    "DEFAULT_INSTANCE_COUNT",
    "create_vpc_options",
    "create_alb_options",
    "create_compute_options",
    "create_complete_options",
]
