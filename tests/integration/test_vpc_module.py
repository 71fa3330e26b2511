"""Deploy the VPC module and verify its network layout."""

import pytest

from tf_module_tests.naming import project_name
from tf_module_tests.runtime import Scenario
from tf_module_tests.scenarios import deploy_vpc
from tf_module_tests.validation import VpcValidator

pytestmark = pytest.mark.integration


@pytest.mark.parametrize("region,environment,vpc_cidr", [
    pytest.param("us-east-1", "staging", "10.0.0.0/16", id="us-east-1-staging"),
    pytest.param("eu-west-1", "staging", "10.1.0.0/16", id="eu-west-1-staging"),
])
def test_vpc_module(region, environment, vpc_cidr, integration_settings, require_module, events, clients_for):
    require_module("modules/vpc")
    project = project_name("vpc-test-", lowercase=False)

    with Scenario(f"vpc-{region}-{environment}", settings=integration_settings, event_logger=events) as scenario:
        vpc = deploy_vpc(scenario, region, environment, project, vpc_cidr=vpc_cidr)

        validator = VpcValidator.from_outputs(clients_for(region), vpc.runtime, vpc.options, events)
        validator.check_vpc()
        validator.check_subnet_counts()
        validator.check_private_subnets()
        validator.check_public_subnets()
        validator.check_nat_gateways()
        validator.check_dns_attributes()
        validator.check_flow_logs()
