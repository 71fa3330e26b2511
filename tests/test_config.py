"""Tests for environment-driven settings."""

from pathlib import Path

from tf_module_tests.config import DEFAULT_CERTIFICATE_ARN, DEFAULT_DOMAIN, Settings


def test_defaults_from_empty_environment():
    settings = Settings.from_env({})
    assert settings.certificate_arn == DEFAULT_CERTIFICATE_ARN
    assert settings.domain == DEFAULT_DOMAIN
    assert settings.convergence_wait_seconds == 120
    assert settings.command_timeout == 1800
    assert settings.run_integration is False
    assert settings.endpoint_url is None


def test_overrides():
    settings = Settings.from_env({
        "TF_MODULE_TESTS_ROOT": "/srv/infra",
        "TF_MODULE_TESTS_CERTIFICATE_ARN": "arn:aws:acm:eu-west-1:1:certificate/x",
        "TF_MODULE_TESTS_DOMAIN": "example.com",
        "TF_MODULE_TESTS_CONVERGENCE_WAIT": "5",
        "TF_MODULE_TESTS_COMMAND_TIMEOUT": "60",
        "TF_MODULE_TESTS_INTEGRATION": "true",
        "AWS_ENDPOINT_URL": "http://localhost:4566",
    })
    assert settings.root_dir == Path("/srv/infra")
    assert settings.certificate_arn.endswith("certificate/x")
    assert settings.domain == "example.com"
    assert settings.convergence_wait_seconds == 5
    assert settings.command_timeout == 60
    assert settings.run_integration is True
    assert settings.endpoint_url == "http://localhost:4566"


def test_directories():
    settings = Settings(root_dir=Path("/srv/infra"))
    assert settings.module_dir("alb") == Path("/srv/infra/modules/alb")
    assert settings.example_dir("complete") == Path("/srv/infra/examples/complete")
    assert settings.to_dict()["root_dir"] == "/srv/infra"


def test_cases_run_on_parallel_workers(pytestconfig):
    addopts = pytestconfig.getini("addopts")
    assert "-n" in addopts
    assert addopts[addopts.index("-n") + 1] == "auto"
