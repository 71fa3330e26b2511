"""Shared fixtures for the unit tests."""

import os
from unittest.mock import MagicMock

import pytest

from tf_module_tests.config import Settings


class FakeClients:
    """Stands in for AwsClientFactory with one MagicMock per service."""

    def __init__(self, region: str = "us-east-1"):
        self.region = region
        self.ec2 = MagicMock(name="ec2")
        self.elbv2 = MagicMock(name="elbv2")
        self.autoscaling = MagicMock(name="autoscaling")
        self.iam = MagicMock(name="iam")
        self.sts = MagicMock(name="sts")


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def fake_clients():
    return FakeClients()


@pytest.fixture
def settings(tmp_path):
    """Settings rooted at an empty temp directory, independent of the caller's environment."""
    return Settings.from_env({"TF_MODULE_TESTS_ROOT": str(tmp_path)})


@pytest.fixture
def module_root(tmp_path):
    """A minimal repository layout with modules/ and examples/ directories."""
    root = tmp_path / "infra"
    for relative in ("modules/vpc", "modules/alb", "modules/compute", "examples/complete"):
        directory = root / relative
        directory.mkdir(parents=True)
        (directory / "main.tf").write_text("# placeholder\n")
    return root


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if os.environ.get("TF_MODULE_TESTS_INTEGRATION", "").lower() in {"1", "true", "yes", "on"}:
        return
    skip = pytest.mark.skip(reason="set TF_MODULE_TESTS_INTEGRATION=1 to deploy real infrastructure")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)
