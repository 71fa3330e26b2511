"""AWS client and tag helpers."""

from tf_module_tests.aws.clients import AwsClientFactory
from tf_module_tests.aws.tags import (
    tags_to_dict,
    missing_tags,
    has_required_tags,
    required_tags,
    describe_tag_mismatch,
)

__all__ = [
    'AwsClientFactory',
    'tags_to_dict',
    'missing_tags',
    'has_required_tags',
    'required_tags',
    'describe_tag_mismatch',
]
