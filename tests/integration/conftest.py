"""Fixtures for tests that deploy real infrastructure."""

import shutil

import pytest

from tf_module_tests.aws.clients import AwsClientFactory
from tf_module_tests.config import Settings
from tf_module_tests.logging import ConsoleLogger


@pytest.fixture(scope="session")
def integration_settings():
    settings = Settings.from_env()
    if shutil.which("terraform") is None:
        pytest.skip("terraform is not on PATH")
    return settings


@pytest.fixture
def require_module(integration_settings):
    """Skip unless the given directory exists under the repository root."""
    def require(relative: str):
        path = integration_settings.root_dir / relative
        if not path.is_dir():
            pytest.skip(f"{path} does not exist")
        return path
    return require


@pytest.fixture
def events():
    return ConsoleLogger(show_timestamp=True)


@pytest.fixture
def clients_for(integration_settings):
    def build(region: str) -> AwsClientFactory:
        return AwsClientFactory(region, endpoint_url=integration_settings.endpoint_url)
    return build
