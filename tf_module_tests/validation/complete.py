"""Validation of the complete example: all modules composed, instances running."""

import logging
import time
from typing import Callable, List, Optional

from tf_module_tests.aws.clients import AwsClientFactory
from tf_module_tests.logging import Logger
from tf_module_tests.runtime.terraform import TerraformRuntime
from tf_module_tests.validation.base import BaseModuleValidator, Check, expect_single

logger = logging.getLogger(__name__)


class CompleteExampleValidator(BaseModuleValidator):
    """Checks the composed stack exists and its instances reach the running state."""

    module = "complete"

    def __init__(
        self,
        clients: AwsClientFactory,
        vpc_id: str,
        launch_template_id: str,
        autoscaling_group_name: str,
        convergence_wait_seconds: int = 120,
        sleep: Callable[[float], None] = time.sleep,
        event_logger: Optional[Logger] = None,
    ):
        super().__init__(clients, event_logger)
        self.vpc_id = vpc_id
        self.launch_template_id = launch_template_id
        self.autoscaling_group_name = autoscaling_group_name
        self.convergence_wait_seconds = convergence_wait_seconds
        self._sleep = sleep
        self._converged = False

    @classmethod
    def from_outputs(
        cls,
        clients: AwsClientFactory,
        runtime: TerraformRuntime,
        convergence_wait_seconds: int = 120,
        sleep: Callable[[float], None] = time.sleep,
        event_logger: Optional[Logger] = None,
    ) -> "CompleteExampleValidator":
        return cls(
            clients,
            vpc_id=runtime.output("vpc_id"),
            launch_template_id=runtime.output("launch_template_id"),
            autoscaling_group_name=runtime.output("autoscaling_group_name"),
            convergence_wait_seconds=convergence_wait_seconds,
            sleep=sleep,
            event_logger=event_logger,
        )

    def checks(self) -> List[Check]:
        return [
            ("vpc", self.check_vpc),
            ("launch_template", self.check_launch_template),
            ("autoscaling_group", self.check_autoscaling_group),
            ("instances_running", self.check_instances_running),
        ]

    def check_vpc(self) -> None:
        vpcs = self.clients.ec2.describe_vpcs(VpcIds=[self.vpc_id])['Vpcs']
        expect_single(vpcs, f"VPC {self.vpc_id}")

    def check_launch_template(self) -> None:
        templates = self.clients.ec2.describe_launch_templates(
            LaunchTemplateIds=[self.launch_template_id]
        )['LaunchTemplates']
        expect_single(templates, f"launch template {self.launch_template_id}")

    def check_autoscaling_group(self) -> None:
        groups = self.clients.autoscaling.describe_auto_scaling_groups(
            AutoScalingGroupNames=[self.autoscaling_group_name]
        )['AutoScalingGroups']
        expect_single(groups, f"auto scaling group {self.autoscaling_group_name}")

    def wait_for_convergence(self) -> None:
        """Fixed delay, once, for the auto scaling group to launch its instances."""
        if self._converged:
            return
        logger.info(f"Waiting {self.convergence_wait_seconds}s for instances in {self.vpc_id}")
        self.events.info(
            "convergence.wait",
            f"waiting {self.convergence_wait_seconds}s for instances",
            {"module": self.module},
        )
        self._sleep(self.convergence_wait_seconds)
        self._converged = True

    def check_instances_running(self) -> None:
        """After the convergence wait, at least one instance in the VPC is running."""
        self.wait_for_convergence()
        reservations = self.clients.ec2.describe_instances(
            Filters=[
                {'Name': 'vpc-id', 'Values': [self.vpc_id]},
                {'Name': 'instance-state-name', 'Values': ['running']},
            ]
        )['Reservations']
        assert reservations, f"No running instances in VPC {self.vpc_id} after {self.convergence_wait_seconds}s"
