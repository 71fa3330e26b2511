"""Validation of a deployed compute module."""

import json
from typing import Any, Dict, List, Optional, Set, Union
from urllib.parse import unquote

from tf_module_tests.aws.clients import AwsClientFactory
from tf_module_tests.aws.tags import describe_tag_mismatch, has_required_tags, required_tags
from tf_module_tests.logging import Logger
from tf_module_tests.modules.apps import AppSet
from tf_module_tests.runtime.options import ModuleOptions
from tf_module_tests.runtime.terraform import TerraformRuntime
from tf_module_tests.validation.base import BaseModuleValidator, Check, assert_equal, expect_single

ROOT_VOLUME_SIZE = 30
ROOT_VOLUME_TYPE = "gp3"
EC2_SERVICE_PRINCIPAL = "ec2.amazonaws.com"
S3_READ_ONLY_POLICY_ARN = "arn:aws:iam::aws:policy/AmazonS3ReadOnlyAccess"


def policy_document(document: Union[str, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Decode an IAM policy document.

    boto3 usually hands back a dict already; the raw API returns
    URL-encoded JSON.
    """
    if isinstance(document, dict):
        return document
    return json.loads(unquote(document))


def trusted_services(document: Union[str, Dict[str, Any]]) -> Set[str]:
    """Service principals allowed to assume a role."""
    statements = policy_document(document).get('Statement', [])
    if isinstance(statements, dict):
        statements = [statements]

    services: Set[str] = set()
    for statement in statements:
        if statement.get('Effect', 'Allow') != 'Allow':
            continue
        principal = statement.get('Principal') or {}
        if not isinstance(principal, dict):
            continue
        service = principal.get('Service', [])
        services.update([service] if isinstance(service, str) else service)
    return services


class ComputeValidator(BaseModuleValidator):
    """Checks launch template, auto scaling group, IAM role and instance security group."""

    module = "compute"

    def __init__(
        self,
        clients: AwsClientFactory,
        launch_template_id: str,
        autoscaling_group_name: str,
        iam_role_name: str,
        security_group_id: str,
        options: ModuleOptions,
        event_logger: Optional[Logger] = None,
    ):
        """
        Initialize validator.

        Args:
            clients: Client factory for the deployment region
            launch_template_id: ``launch_template_id`` output
            autoscaling_group_name: ``autoscaling_group_name`` output
            iam_role_name: ``iam_role_name`` output
            security_group_id: ``security_group_id`` output
            options: Options the compute module was applied with; expected
                values (instance type and count, subnets, target groups, apps) come from here
            event_logger: Optional structured event logger
        """
        super().__init__(clients, event_logger)
        self.launch_template_id = launch_template_id
        self.autoscaling_group_name = autoscaling_group_name
        self.iam_role_name = iam_role_name
        self.security_group_id = security_group_id
        self.options = options
        self.apps = AppSet.from_vars(options.vars["apps"])

    @classmethod
    def from_outputs(
        cls,
        clients: AwsClientFactory,
        runtime: TerraformRuntime,
        options: ModuleOptions,
        event_logger: Optional[Logger] = None,
    ) -> "ComputeValidator":
        return cls(
            clients,
            launch_template_id=runtime.output("launch_template_id"),
            autoscaling_group_name=runtime.output("autoscaling_group_name"),
            iam_role_name=runtime.output("iam_role_name"),
            security_group_id=runtime.output("security_group_id"),
            options=options,
            event_logger=event_logger,
        )

    @property
    def instance_count(self) -> int:
        return int(self.options.vars["instance_count"])

    def checks(self) -> List[Check]:
        return [
            ("launch_template", self.check_launch_template),
            ("autoscaling_group", self.check_autoscaling_group),
            ("iam_role", self.check_iam_role),
            ("security_group", self.check_security_group),
        ]

    def check_launch_template(self) -> None:
        """Latest version uses the requested instance type, one 30 GiB gp3 volume, and project tags."""
        ec2 = self.clients.ec2
        templates = ec2.describe_launch_templates(LaunchTemplateIds=[self.launch_template_id])['LaunchTemplates']
        expect_single(templates, f"launch template {self.launch_template_id}")

        versions = ec2.describe_launch_template_versions(
            LaunchTemplateId=self.launch_template_id,
            Versions=['$Latest'],
        )['LaunchTemplateVersions']
        data = expect_single(versions, f"latest version of launch template {self.launch_template_id}")['LaunchTemplateData']
        label = f"launch template {self.launch_template_id}"

        assert_equal(f"{label} instance type", self.options.vars["instance_type"], data.get('InstanceType'))

        mappings = data.get('BlockDeviceMappings', [])
        assert_equal(f"{label} block device mappings", 1, len(mappings))
        volume = mappings[0].get('Ebs', {})
        assert_equal(f"{label} volume size", ROOT_VOLUME_SIZE, volume.get('VolumeSize'))
        assert_equal(f"{label} volume type", ROOT_VOLUME_TYPE, volume.get('VolumeType'))

        specs = data.get('TagSpecifications', [])
        assert specs, f"{label} has no tag specifications"
        tags = specs[0].get('Tags', [])
        expected = required_tags(self.options.vars["environment"], self.options.vars["project_name"], managed_by=None)
        assert has_required_tags(tags, expected), describe_tag_mismatch(label, tags, expected)

    def check_autoscaling_group(self) -> None:
        """Capacity bounds follow instance_count; the group spans the private subnets and target groups."""
        groups = self.clients.autoscaling.describe_auto_scaling_groups(
            AutoScalingGroupNames=[self.autoscaling_group_name]
        )['AutoScalingGroups']
        group = expect_single(groups, f"auto scaling group {self.autoscaling_group_name}")
        label = f"auto scaling group {self.autoscaling_group_name}"

        assert_equal(f"{label} desired capacity", self.instance_count, group['DesiredCapacity'])
        assert_equal(f"{label} min size", self.instance_count, group['MinSize'])
        assert_equal(f"{label} max size", self.instance_count * 2, group['MaxSize'])

        subnets = [s.strip() for s in group.get('VPCZoneIdentifier', '').split(',') if s.strip()]
        assert_equal(f"{label} subnets", sorted(self.options.vars["private_subnets"]), sorted(subnets))
        assert_equal(
            f"{label} target groups",
            sorted(self.options.vars["target_group_arns"]),
            sorted(group.get('TargetGroupARNs', [])),
        )

    def check_iam_role(self) -> None:
        """Role is assumable by EC2 and has S3 read-only access attached."""
        iam = self.clients.iam
        role = iam.get_role(RoleName=self.iam_role_name)['Role']
        services = trusted_services(role['AssumeRolePolicyDocument'])
        assert EC2_SERVICE_PRINCIPAL in services, \
            f"Role {self.iam_role_name} trust policy should allow {EC2_SERVICE_PRINCIPAL}, allows {sorted(services)}"

        attached = iam.list_attached_role_policies(RoleName=self.iam_role_name)['AttachedPolicies']
        arns = [policy['PolicyArn'] for policy in attached]
        assert S3_READ_ONLY_POLICY_ARN in arns, \
            f"S3 read only policy should be attached to role {self.iam_role_name}, attached: {arns}"

    def check_security_group(self) -> None:
        """One ingress rule per app, each on an app port."""
        groups = self.clients.ec2.describe_security_groups(GroupIds=[self.security_group_id])['SecurityGroups']
        group = expect_single(groups, f"security group {self.security_group_id}")

        rules = group.get('IpPermissions', [])
        assert_equal(f"ingress rules of {self.security_group_id}", len(self.apps), len(rules))

        ports = set(self.apps.ports())
        for rule in rules:
            port = rule.get('FromPort')
            assert port in ports, f"Found unexpected port {port} in security group {self.security_group_id}"
