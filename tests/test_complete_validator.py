"""Tests for the complete-example validator."""

import pytest

from tf_module_tests.logging import MemoryLogger
from tf_module_tests.validation import CompleteExampleValidator


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def validator(fake_clients, sleeps):
    fake_clients.ec2.describe_vpcs.return_value = {"Vpcs": [{"VpcId": "vpc-1"}]}
    fake_clients.ec2.describe_launch_templates.return_value = {"LaunchTemplates": [{"LaunchTemplateId": "lt-1"}]}
    fake_clients.autoscaling.describe_auto_scaling_groups.return_value = {"AutoScalingGroups": [{}]}
    fake_clients.ec2.describe_instances.return_value = {"Reservations": [{"Instances": [{"InstanceId": "i-1"}]}]}
    return CompleteExampleValidator(
        fake_clients, "vpc-1", "lt-1", "e2e-test-asg",
        convergence_wait_seconds=120,
        sleep=sleeps.append,
        event_logger=MemoryLogger(),
    )


def test_passes_after_waiting(validator, fake_clients, sleeps):
    report = validator.validate()

    assert report.passed, report.errors
    assert sleeps == [120]
    filters = fake_clients.ec2.describe_instances.call_args.kwargs["Filters"]
    assert {"Name": "vpc-id", "Values": ["vpc-1"]} in filters
    assert {"Name": "instance-state-name", "Values": ["running"]} in filters
    assert "convergence.wait" in validator.events.names()


def test_waits_only_once(validator, sleeps):
    validator.check_instances_running()
    validator.check_instances_running()
    assert sleeps == [120]


def test_no_running_instances(validator, fake_clients):
    fake_clients.ec2.describe_instances.return_value = {"Reservations": []}
    with pytest.raises(AssertionError, match="No running instances in VPC vpc-1"):
        validator.check_instances_running()


def test_missing_auto_scaling_group(validator, fake_clients):
    fake_clients.autoscaling.describe_auto_scaling_groups.return_value = {"AutoScalingGroups": []}
    with pytest.raises(AssertionError, match="auto scaling group e2e-test-asg"):
        validator.check_autoscaling_group()
