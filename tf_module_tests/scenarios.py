"""Deployment chains shared by the integration tests and the CLI."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from tf_module_tests.aws.clients import AwsClientFactory
from tf_module_tests.config import Settings
from tf_module_tests.logging import Logger, NullLogger
from tf_module_tests.modules import (
    DEFAULT_INSTANCE_COUNT,
    DEFAULT_INSTANCE_TYPE,
    DEFAULT_VPC_CIDR,
    AppSet,
    create_alb_options,
    create_complete_options,
    create_compute_options,
    create_vpc_options,
)
from tf_module_tests.naming import project_name as random_project_name
from tf_module_tests.runtime import ModuleOptions, Scenario, TerraformRuntime, copy_terraform_folder_to_temp
from tf_module_tests.validation import (
    AlbValidator,
    CompleteExampleValidator,
    ComputeValidator,
    ValidationReport,
    VpcValidator,
)
from tf_module_tests.validation.alb import ALB_SECURITY_GROUP_OUTPUT

logger = logging.getLogger(__name__)

MODULES = ("vpc", "alb", "compute", "complete")


@dataclass
class Deployment:
    """A module applied inside a Scenario: the options used and the runtime to read outputs from."""
    options: ModuleOptions
    runtime: TerraformRuntime

    @property
    def region(self) -> str:
        return self.options.region


def _module_dir(settings: Settings, relative: str, copy: bool) -> str:
    if copy:
        return str(copy_terraform_folder_to_temp(settings.root_dir, relative))
    return str(settings.root_dir / relative)


def deploy_vpc(
    scenario: Scenario,
    region: str,
    environment: str,
    project_name: str,
    vpc_cidr: str = DEFAULT_VPC_CIDR,
    copy: bool = True,
) -> Deployment:
    """Apply the VPC module; its destroy runs when the scenario exits."""
    options = create_vpc_options(
        region, environment, project_name,
        vpc_cidr=vpc_cidr,
        terraform_dir=_module_dir(scenario.settings, "modules/vpc", copy),
        settings=scenario.settings,
    )
    return Deployment(options, scenario.deploy(options, name="vpc"))


def deploy_alb(
    scenario: Scenario,
    vpc: Deployment,
    apps: Optional[AppSet] = None,
    copy: bool = True,
) -> Deployment:
    """Apply the ALB module into the VPC's public subnets."""
    options = create_alb_options(
        vpc.region,
        vpc.options.vars["environment"],
        vpc.options.vars["project_name"],
        vpc_id=vpc.runtime.output("vpc_id"),
        public_subnets=vpc.runtime.output_list("public_subnets"),
        apps=apps,
        terraform_dir=_module_dir(scenario.settings, "modules/alb", copy),
        settings=scenario.settings,
    )
    return Deployment(options, scenario.deploy(options, name="alb"))


def deploy_compute(
    scenario: Scenario,
    vpc: Deployment,
    alb: Deployment,
    instance_type: str = DEFAULT_INSTANCE_TYPE,
    instance_count: int = DEFAULT_INSTANCE_COUNT,
    terraform_dir: Optional[str] = None,
) -> Deployment:
    """Apply the compute module into the VPC's private subnets, behind the ALB's target groups."""
    apps = alb.options.vars["apps"]
    target_groups = alb.runtime.output_map("target_group_arns")
    options = create_compute_options(
        vpc.region,
        vpc.options.vars["environment"],
        vpc.options.vars["project_name"],
        vpc_id=vpc.runtime.output("vpc_id"),
        private_subnets=vpc.runtime.output_list("private_subnets"),
        target_group_arns=[target_groups[name] for name in apps],
        alb_security_group_id=alb.runtime.output(ALB_SECURITY_GROUP_OUTPUT),
        apps=apps,
        instance_type=instance_type,
        instance_count=instance_count,
        terraform_dir=terraform_dir or _module_dir(scenario.settings, "modules/compute", True),
        settings=scenario.settings,
    )
    return Deployment(options, scenario.deploy(options, name="compute"))


def deploy_complete(
    scenario: Scenario,
    region: str,
    environment: str,
    project_name: str,
    copy: bool = True,
) -> Deployment:
    """Apply the complete example that composes every module."""
    options = create_complete_options(
        region, environment, project_name,
        terraform_dir=_module_dir(scenario.settings, "examples/complete", copy),
        settings=scenario.settings,
    )
    return Deployment(options, scenario.deploy(options, name="complete"))


def run_module_scenario(
    module: str,
    region: str,
    environment: str,
    project_name: Optional[str] = None,
    settings: Optional[Settings] = None,
    event_logger: Optional[Logger] = None,
    clients: Optional[AwsClientFactory] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> List[ValidationReport]:
    """
    Deploy a module with everything it depends on, validate each layer, and destroy.

    Unlike the pytest suite, every check runs and is reported; destroy still
    happens in reverse order whatever the outcome.

    Args:
        module: One of "vpc", "alb", "compute", "complete"
        region: AWS region
        environment: Environment label
        project_name: Project name; a random one is generated when omitted
        settings: Settings override
        event_logger: Structured event logger
        clients: Client factory override
        sleep: Sleep function for the convergence wait

    Returns:
        One ValidationReport per deployed layer, in deploy order
    """
    if module not in MODULES:
        raise ValueError(f"Unknown module '{module}', expected one of {', '.join(MODULES)}")

    settings = settings or Settings.from_env()
    events = event_logger or NullLogger()
    clients = clients or AwsClientFactory(region, endpoint_url=settings.endpoint_url)
    project = project_name or random_project_name("tmt")
    reports: List[ValidationReport] = []

    with Scenario(f"{module}-{region}-{environment}", settings=settings, event_logger=events) as scenario:
        if module == "complete":
            complete = deploy_complete(scenario, region, environment, project)
            reports.append(CompleteExampleValidator.from_outputs(
                clients, complete.runtime,
                convergence_wait_seconds=settings.convergence_wait_seconds,
                sleep=sleep,
                event_logger=events,
            ).validate())
            return reports

        vpc = deploy_vpc(scenario, region, environment, project)
        reports.append(VpcValidator.from_outputs(clients, vpc.runtime, vpc.options, events).validate())
        if module == "vpc":
            return reports

        alb = deploy_alb(scenario, vpc)
        reports.append(AlbValidator.from_outputs(clients, alb.runtime, alb.options, events).validate())
        if module == "alb":
            return reports

        compute = deploy_compute(scenario, vpc, alb)
        reports.append(ComputeValidator.from_outputs(clients, compute.runtime, compute.options, events).validate())

    logger.info(f"{module} scenario finished: {[r.passed for r in reports]}")
    return reports
