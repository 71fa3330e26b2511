"""Validation of a deployed VPC module."""

from typing import Any, Dict, List, Optional

from tf_module_tests.aws.clients import AwsClientFactory
from tf_module_tests.aws.tags import describe_tag_mismatch, has_required_tags, required_tags
from tf_module_tests.logging import Logger
from tf_module_tests.modules.network import DEFAULT_AZ_COUNT, expected_nat_gateway_count, is_subnet_of
from tf_module_tests.runtime.options import ModuleOptions
from tf_module_tests.runtime.terraform import TerraformRuntime
from tf_module_tests.validation.base import BaseModuleValidator, Check, assert_equal, expect_single

_GONE_NAT_STATES = {"deleting", "deleted", "failed"}


class VpcValidator(BaseModuleValidator):
    """Checks VPC, subnets, NAT gateways, DNS attributes and flow logs."""

    module = "vpc"

    def __init__(
        self,
        clients: AwsClientFactory,
        vpc_id: str,
        private_subnet_ids: List[str],
        public_subnet_ids: List[str],
        vpc_cidr: str,
        environment: str,
        project_name: str,
        az_count: int = DEFAULT_AZ_COUNT,
        event_logger: Optional[Logger] = None,
    ):
        super().__init__(clients, event_logger)
        if not vpc_id:
            raise ValueError("VPC ID should not be empty")
        self.vpc_id = vpc_id
        self.private_subnet_ids = list(private_subnet_ids)
        self.public_subnet_ids = list(public_subnet_ids)
        self.vpc_cidr = vpc_cidr
        self.environment = environment
        self.project_name = project_name
        self.az_count = az_count

    @classmethod
    def from_outputs(
        cls,
        clients: AwsClientFactory,
        runtime: TerraformRuntime,
        options: ModuleOptions,
        event_logger: Optional[Logger] = None,
    ) -> "VpcValidator":
        """Build a validator from the VPC module's outputs and the options it was applied with."""
        return cls(
            clients,
            vpc_id=runtime.output("vpc_id"),
            private_subnet_ids=runtime.output_list("private_subnets"),
            public_subnet_ids=runtime.output_list("public_subnets"),
            vpc_cidr=options.vars["vpc_cidr"],
            environment=options.vars["environment"],
            project_name=options.vars["project_name"],
            az_count=options.vars.get("az_count", DEFAULT_AZ_COUNT),
            event_logger=event_logger,
        )

    @property
    def expected_tags(self) -> Dict[str, str]:
        return required_tags(self.environment, self.project_name)

    def checks(self) -> List[Check]:
        return [
            ("vpc_cidr", self.check_vpc),
            ("subnet_counts", self.check_subnet_counts),
            ("private_subnets", self.check_private_subnets),
            ("public_subnets", self.check_public_subnets),
            ("nat_gateways", self.check_nat_gateways),
            ("dns_attributes", self.check_dns_attributes),
            ("flow_logs", self.check_flow_logs),
        ]

    def check_vpc(self) -> None:
        """VPC exists and has the requested CIDR."""
        vpcs = self.clients.ec2.describe_vpcs(VpcIds=[self.vpc_id])['Vpcs']
        vpc = expect_single(vpcs, f"VPC {self.vpc_id}")
        assert_equal(f"VPC {self.vpc_id} CIDR", self.vpc_cidr, vpc['CidrBlock'])

    def check_subnet_counts(self) -> None:
        assert_equal("number of private subnets", self.az_count, len(self.private_subnet_ids))
        assert_equal("number of public subnets", self.az_count, len(self.public_subnet_ids))

    def check_private_subnets(self) -> None:
        """Private subnets are tagged, never map public IPs, and span distinct AZs."""
        self._check_subnets("private", self.private_subnet_ids, map_public_ip=False)

    def check_public_subnets(self) -> None:
        """Public subnets are tagged, map public IPs, and span distinct AZs."""
        self._check_subnets("public", self.public_subnet_ids, map_public_ip=True)

    def _check_subnets(self, kind: str, subnet_ids: List[str], map_public_ip: bool) -> None:
        assert subnet_ids, f"No {kind} subnets in outputs"
        subnets = self.clients.ec2.describe_subnets(SubnetIds=subnet_ids)['Subnets']
        assert_equal(f"number of {kind} subnets found", len(subnet_ids), len(subnets))

        zones = set()
        for subnet in subnets:
            label = f"{kind.capitalize()} subnet {subnet['SubnetId']}"
            tags = subnet.get('Tags', [])
            assert has_required_tags(tags, self.expected_tags), describe_tag_mismatch(label, tags, self.expected_tags)
            assert_equal(f"{label} MapPublicIpOnLaunch", map_public_ip, bool(subnet.get('MapPublicIpOnLaunch')))
            assert_equal(f"{label} VpcId", self.vpc_id, subnet['VpcId'])
            assert is_subnet_of(subnet['CidrBlock'], self.vpc_cidr), \
                f"{label} CIDR {subnet['CidrBlock']} is not a /24 inside {self.vpc_cidr}"
            zones.add(subnet['AvailabilityZone'])

        assert_equal(f"distinct availability zones of {kind} subnets", self.az_count, len(zones))

    def check_nat_gateways(self) -> None:
        """One NAT gateway per AZ in production, a single one otherwise."""
        gateways = self.clients.ec2.describe_nat_gateways(
            Filter=[{'Name': 'vpc-id', 'Values': [self.vpc_id]}]
        )['NatGateways']
        active = [g for g in gateways if g.get('State') not in _GONE_NAT_STATES]
        expected = expected_nat_gateway_count(self.environment, self.az_count)
        assert_equal(f"NAT gateways in {self.environment} VPC {self.vpc_id}", expected, len(active))

    def check_dns_attributes(self) -> None:
        ec2 = self.clients.ec2
        hostnames = ec2.describe_vpc_attribute(VpcId=self.vpc_id, Attribute='enableDnsHostnames')
        support = ec2.describe_vpc_attribute(VpcId=self.vpc_id, Attribute='enableDnsSupport')
        assert hostnames['EnableDnsHostnames']['Value'], f"VPC {self.vpc_id} should have DNS hostnames enabled"
        assert support['EnableDnsSupport']['Value'], f"VPC {self.vpc_id} should have DNS support enabled"

    def check_flow_logs(self) -> None:
        flow_logs: List[Dict[str, Any]] = self.clients.ec2.describe_flow_logs(
            Filter=[{'Name': 'resource-id', 'Values': [self.vpc_id]}]
        )['FlowLogs']
        assert flow_logs, f"VPC {self.vpc_id} should have flow logs enabled"
