"""Options command for printing the variable bag a module would be applied with."""

import json
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from tf_module_tests.config import Settings
from tf_module_tests.modules import (
    DEFAULT_INSTANCE_COUNT,
    DEFAULT_INSTANCE_TYPE,
    DEFAULT_VPC_CIDR,
    create_alb_options,
    create_complete_options,
    create_compute_options,
    create_vpc_options,
)

console = Console()


def options_command(
    module: str = typer.Argument(..., help="Module: vpc, alb, compute or complete"),
    region: str = typer.Option("us-east-1", "--region", "-r", help="AWS region"),
    environment: str = typer.Option("staging", "--environment", "-e", help="Environment label"),
    project_name: str = typer.Option("example", "--project-name", "-p", help="Project name prefix"),
    vpc_cidr: str = typer.Option(DEFAULT_VPC_CIDR, "--vpc-cidr", help="VPC CIDR (vpc module)"),
    vpc_id: str = typer.Option("vpc-00000000", "--vpc-id", help="VPC id (alb, compute)"),
    subnets: Optional[List[str]] = typer.Option(
        None, "--subnet", help="Subnet id, repeatable (public for alb, private for compute)",
    ),
    target_group_arns: Optional[List[str]] = typer.Option(
        None, "--target-group-arn", help="Target group ARN, repeatable (compute)",
    ),
    alb_security_group_id: str = typer.Option("sg-00000000", "--alb-security-group-id", help="ALB security group (compute)"),
    instance_type: str = typer.Option(DEFAULT_INSTANCE_TYPE, "--instance-type", help="Instance type (compute)"),
    instance_count: int = typer.Option(DEFAULT_INSTANCE_COUNT, "--instance-count", help="Instance count (compute)"),
):
    """Print the terraform variables and environment for a module as JSON."""
    settings = Settings.from_env()
    subnet_ids = subnets or []

    try:
        if module == "vpc":
            options = create_vpc_options(region, environment, project_name, vpc_cidr=vpc_cidr, settings=settings)
        elif module == "alb":
            options = create_alb_options(region, environment, project_name, vpc_id, subnet_ids, settings=settings)
        elif module == "compute":
            options = create_compute_options(
                region, environment, project_name, vpc_id, subnet_ids,
                target_group_arns=target_group_arns or [],
                alb_security_group_id=alb_security_group_id,
                instance_type=instance_type,
                instance_count=instance_count,
                settings=settings,
            )
        elif module == "complete":
            options = create_complete_options(region, environment, project_name, settings=settings)
        else:
            console.print(f"[red]Error: unknown module '{module}'[/red]")
            raise typer.Exit(code=1)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    console.print_json(json.dumps(options.to_dict()))
