"""Validators asserting deployed resources match module configuration."""

from tf_module_tests.validation.results import CheckStatus, CheckResult, ValidationReport
from tf_module_tests.validation.base import BaseModuleValidator, expect_single, assert_equal
from tf_module_tests.validation.vpc import VpcValidator
from tf_module_tests.validation.alb import AlbValidator, expected_alb_name, condition_values, forward_target_groups
from tf_module_tests.validation.compute import ComputeValidator, trusted_services
from tf_module_tests.validation.complete import CompleteExampleValidator

__all__ = [
    'CheckStatus',
    'CheckResult',
    'ValidationReport',
    'BaseModuleValidator',
    'expect_single',
    'assert_equal',
    'VpcValidator',
    'AlbValidator',
    'expected_alb_name',
    'condition_values',
    'forward_target_groups',
    'ComputeValidator',
    'trusted_services',
    'CompleteExampleValidator',
]
