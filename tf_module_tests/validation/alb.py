"""Validation of a deployed ALB module."""

from typing import Any, Dict, List, Optional

from tf_module_tests.aws.clients import AwsClientFactory
from tf_module_tests.aws.tags import describe_tag_mismatch, has_required_tags, required_tags
from tf_module_tests.logging import Logger
from tf_module_tests.modules.apps import AppSet, duplicate_priorities
from tf_module_tests.runtime.options import ModuleOptions
from tf_module_tests.runtime.terraform import TerraformRuntime
from tf_module_tests.validation.base import BaseModuleValidator, Check, assert_equal, expect_single

HEALTHY_THRESHOLD = 3
UNHEALTHY_THRESHOLD = 3
ALB_SECURITY_GROUP_OUTPUT = "alb_security_group_id"


def expected_alb_name(project_name: str, environment: str) -> str:
    """Name the ALB module gives its load balancer."""
    return f"{project_name}-{environment}-alb"


def condition_values(rule: Dict[str, Any], field: str) -> List[str]:
    """
    Values of a rule condition, or an empty list when the rule has none.

    Reads the typed config block (``PathPatternConfig``, ``HostHeaderConfig``)
    and falls back to the legacy flat ``Values`` list.
    """
    config_key = {
        'path-pattern': 'PathPatternConfig',
        'host-header': 'HostHeaderConfig',
    }.get(field)

    for condition in rule.get('Conditions') or []:
        if condition.get('Field') != field:
            continue
        if config_key and condition.get(config_key, {}).get('Values'):
            return list(condition[config_key]['Values'])
        return list(condition.get('Values') or [])
    return []


def forward_target_groups(rule: Dict[str, Any]) -> List[str]:
    """
    Target group ARNs a rule forwards to.

    Covers the flat ``TargetGroupArn`` of a simple forward and the
    ``ForwardConfig.TargetGroups`` list of a weighted one.
    """
    arns: List[str] = []
    for action in rule.get('Actions') or []:
        if action.get('Type') != 'forward':
            continue
        if action.get('TargetGroupArn'):
            arns.append(action['TargetGroupArn'])
        for group in (action.get('ForwardConfig') or {}).get('TargetGroups') or []:
            if group.get('TargetGroupArn') and group['TargetGroupArn'] not in arns:
                arns.append(group['TargetGroupArn'])
    return arns


class AlbValidator(BaseModuleValidator):
    """Checks the load balancer, target groups, listener rules and security group."""

    module = "alb"

    def __init__(
        self,
        clients: AwsClientFactory,
        alb_name: str,
        alb_dns_name: str,
        target_group_arns: Dict[str, str],
        security_group_id: str,
        vpc_id: str,
        apps: AppSet,
        environment: str,
        project_name: str,
        event_logger: Optional[Logger] = None,
    ):
        super().__init__(clients, event_logger)
        self.alb_name = alb_name
        self.alb_dns_name = alb_dns_name
        self.target_group_arns = dict(target_group_arns)
        self.security_group_id = security_group_id
        self.vpc_id = vpc_id
        self.apps = apps
        self.environment = environment
        self.project_name = project_name
        self._load_balancer: Optional[Dict[str, Any]] = None

    @classmethod
    def from_outputs(
        cls,
        clients: AwsClientFactory,
        runtime: TerraformRuntime,
        options: ModuleOptions,
        event_logger: Optional[Logger] = None,
    ) -> "AlbValidator":
        """Build a validator from the ALB module's outputs and the options it was applied with."""
        return cls(
            clients,
            alb_name=runtime.output("alb_name"),
            alb_dns_name=runtime.output("alb_dns_name"),
            target_group_arns=runtime.output_map("target_group_arns"),
            security_group_id=runtime.output(ALB_SECURITY_GROUP_OUTPUT),
            vpc_id=options.vars["vpc_id"],
            apps=AppSet.from_vars(options.vars["apps"]),
            environment=options.vars["environment"],
            project_name=options.vars["project_name"],
            event_logger=event_logger,
        )

    def checks(self) -> List[Check]:
        return [
            ("load_balancer", self.check_load_balancer),
            ("target_groups", self.check_target_groups),
            ("listener_rules", self.check_listener_rules),
            ("security_group", self.check_security_group),
        ]

    def load_balancer(self) -> Dict[str, Any]:
        """The deployed load balancer, looked up once by name."""
        if self._load_balancer is None:
            balancers = self.clients.elbv2.describe_load_balancers(Names=[self.alb_name])['LoadBalancers']
            self._load_balancer = expect_single(balancers, f"load balancer named {self.alb_name}")
        return self._load_balancer

    def check_load_balancer(self) -> None:
        """Internet-facing application load balancer with the module's name, DNS name and tags."""
        assert_equal("ALB name", expected_alb_name(self.project_name, self.environment), self.alb_name)

        alb = self.load_balancer()
        assert_equal(f"ALB {self.alb_name} type", "application", alb['Type'])
        assert alb['Scheme'] != 'internal', f"ALB {self.alb_name} should be internet-facing, got {alb['Scheme']}"
        assert_equal(f"ALB {self.alb_name} DNS name", self.alb_dns_name, alb['DNSName'])

        descriptions = self.clients.elbv2.describe_tags(ResourceArns=[alb['LoadBalancerArn']])['TagDescriptions']
        tags = expect_single(descriptions, f"tag description for ALB {self.alb_name}").get('Tags', [])
        expected = required_tags(self.environment, self.project_name)
        assert has_required_tags(tags, expected), describe_tag_mismatch(f"ALB {self.alb_name}", tags, expected)

    def check_target_groups(self) -> None:
        """One HTTP target group per app on the app port with the app's health check."""
        assert_equal("apps with a target group", sorted(self.apps.names()), sorted(self.target_group_arns))

        for app_name, app in self.apps.items():
            arn = self.target_group_arns[app_name]
            groups = self.clients.elbv2.describe_target_groups(TargetGroupArns=[arn])['TargetGroups']
            group = expect_single(groups, f"target group for app {app_name}")
            label = f"target group for app {app_name}"

            assert_equal(f"{label} VpcId", self.vpc_id, group['VpcId'])
            assert_equal(f"{label} protocol", "HTTP", group['Protocol'])
            assert_equal(f"{label} port", app.port, group['Port'])
            assert_equal(f"{label} health check path", app.health_check_url, group['HealthCheckPath'])
            assert_equal(f"{label} healthy threshold", HEALTHY_THRESHOLD, group['HealthyThresholdCount'])
            assert_equal(f"{label} unhealthy threshold", UNHEALTHY_THRESHOLD, group['UnhealthyThresholdCount'])

    def https_listener(self) -> Dict[str, Any]:
        listeners = self.clients.elbv2.describe_listeners(
            LoadBalancerArn=self.load_balancer()['LoadBalancerArn']
        )['Listeners']
        for listener in listeners:
            if listener.get('Protocol') == 'HTTPS':
                return listener
        raise AssertionError(f"ALB {self.alb_name} has no HTTPS listener")

    def check_listener_rules(self) -> None:
        """Each app has an HTTPS listener rule with its path, host and priority, forwarding to its target group."""
        listener = self.https_listener()
        rules = self.clients.elbv2.describe_rules(ListenerArn=listener['ListenerArn'])['Rules']
        rules = [
            rule for rule in rules
            if rule and not rule.get('IsDefault') and rule.get('Priority') not in (None, 'default')
        ]

        duplicates = duplicate_priorities({rule['RuleArn']: int(rule['Priority']) for rule in rules})
        assert not duplicates, f"Listener rules share priorities: {sorted(duplicates)}"

        for app_name, app in self.apps.items():
            rule = next((r for r in rules if app.path in condition_values(r, 'path-pattern')), None)
            assert rule is not None, f"No rule found for app {app_name} (path pattern {app.path})"

            paths = condition_values(rule, 'path-pattern')
            assert_equal(f"path pattern for app {app_name}", app.path, paths[0])

            hosts = condition_values(rule, 'host-header')
            assert hosts, f"Host header condition not found for app {app_name}"
            assert_equal(f"host header for app {app_name}", app.domain[0], hosts[0])

            assert_equal(f"rule priority for app {app_name}", app.priority, int(rule['Priority']))

            expected_target = self.target_group_arns.get(app_name)
            targets = forward_target_groups(rule)
            assert targets == [expected_target], \
                f"Rule for app {app_name} should forward to {expected_target}, forwards to {targets}"

    def check_security_group(self) -> None:
        """HTTP and HTTPS open over TCP, and a single all-traffic egress rule."""
        groups = self.clients.ec2.describe_security_groups(GroupIds=[self.security_group_id])['SecurityGroups']
        group = expect_single(groups, f"security group {self.security_group_id}")

        found = set()
        for rule in group.get('IpPermissions', []):
            port = rule.get('FromPort')
            if port in (80, 443):
                found.add(port)
                assert_equal(f"ingress rule {port} ToPort", port, rule.get('ToPort'))
                assert_equal(f"ingress rule {port} protocol", "tcp", rule.get('IpProtocol'))

        assert 80 in found, "HTTP rule not found"
        assert 443 in found, "HTTPS rule not found"

        egress = group.get('IpPermissionsEgress', [])
        assert_equal(f"egress rules of {self.security_group_id}", 1, len(egress))
        assert_equal("egress protocol", "-1", egress[0].get('IpProtocol'))
