"""Option builders for each module under test."""

from typing import Any, List, Mapping, Optional, Union

from tf_module_tests.config import Settings
from tf_module_tests.modules.apps import AppSet, default_apps
from tf_module_tests.modules.network import (
    DEFAULT_AZ_COUNT,
    DEFAULT_VPC_CIDR,
    expected_nat_gateway_count,
)
from tf_module_tests.runtime.options import ModuleOptions

DEFAULT_INSTANCE_TYPE = "t3.micro"
DEFAULT_INSTANCE_COUNT = 2

AppsLike = Union[AppSet, Mapping[str, Mapping[str, Any]]]


def _settings(settings: Optional[Settings]) -> Settings:
    return settings or Settings.from_env()


def _region_env(region: str) -> dict:
    return {"AWS_DEFAULT_REGION": region}


def _app_set(apps: Optional[AppsLike], settings: Settings) -> AppSet:
    if apps is None:
        return default_apps(settings.domain)
    if isinstance(apps, AppSet):
        return apps
    return AppSet.from_vars(apps)


def create_vpc_options(
    region: str,
    environment: str,
    project_name: str,
    vpc_cidr: str = DEFAULT_VPC_CIDR,
    terraform_dir: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ModuleOptions:
    """
    Options for the VPC module.

    Requests three AZs and one NAT gateway, or one per AZ for "prod".
    Subnet CIDRs are left to the module's defaults.
    """
    settings = _settings(settings)
    return ModuleOptions(
        terraform_dir=terraform_dir or str(settings.module_dir("vpc")),
        vars={
            "region": region,
            "environment": environment,
            "project_name": project_name,
            "vpc_cidr": vpc_cidr,
            "az_count": DEFAULT_AZ_COUNT,
            "nat_gateway_count": expected_nat_gateway_count(environment),
        },
        env_vars=_region_env(region),
    )


def create_alb_options(
    region: str,
    environment: str,
    project_name: str,
    vpc_id: str,
    public_subnets: List[str],
    apps: Optional[AppsLike] = None,
    certificate_arn: Optional[str] = None,
    terraform_dir: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ModuleOptions:
    """
    Options for the ALB module, fed by the VPC module's outputs.

    Args:
        region: AWS region
        environment: Environment label
        project_name: Project name prefix
        vpc_id: VPC id output of the VPC module
        public_subnets: Public subnet ids output of the VPC module
        apps: App descriptors; defaults to the two-app configuration
        certificate_arn: HTTPS listener certificate; defaults to the configured one
        terraform_dir: Module directory override (e.g. a temp copy)
        settings: Settings override

    Raises:
        pydantic.ValidationError: two apps share a rule priority, or an app is malformed
    """
    settings = _settings(settings)
    app_set = _app_set(apps, settings)
    return ModuleOptions(
        terraform_dir=terraform_dir or str(settings.module_dir("alb")),
        vars={
            "environment": environment,
            "project_name": project_name,
            "vpc_id": vpc_id,
            "public_subnets": list(public_subnets),
            "certificate_arn": certificate_arn or settings.certificate_arn,
            "apps": app_set.to_vars(),
        },
        env_vars=_region_env(region),
    )


def create_compute_options(
    region: str,
    environment: str,
    project_name: str,
    vpc_id: str,
    private_subnets: List[str],
    target_group_arns: List[str],
    alb_security_group_id: str,
    apps: Optional[AppsLike] = None,
    instance_type: str = DEFAULT_INSTANCE_TYPE,
    instance_count: int = DEFAULT_INSTANCE_COUNT,
    terraform_dir: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ModuleOptions:
    """Options for the compute module, fed by the VPC and ALB modules' outputs."""
    if instance_count < 1:
        raise ValueError(f"instance_count must be at least 1, got {instance_count}")

    settings = _settings(settings)
    app_set = _app_set(apps, settings)
    return ModuleOptions(
        terraform_dir=terraform_dir or str(settings.module_dir("compute")),
        vars={
            "environment": environment,
            "project_name": project_name,
            "vpc_id": vpc_id,
            "private_subnets": list(private_subnets),
            "instance_type": instance_type,
            "instance_count": instance_count,
            "apps": app_set.to_vars(),
            "target_group_arns": list(target_group_arns),
            "alb_security_group_id": alb_security_group_id,
        },
        env_vars=_region_env(region),
    )


def create_complete_options(
    region: str,
    environment: str,
    project_name: str,
    terraform_dir: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ModuleOptions:
    """Options for the top-level example composing all modules."""
    settings = _settings(settings)
    return ModuleOptions(
        terraform_dir=terraform_dir or str(settings.example_dir("complete")),
        vars={
            "environment": environment,
            "project_name": project_name,
        },
        env_vars=_region_env(region),
    )
