"""CLI command for deploying, validating and destroying a module outside pytest."""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tf_module_tests.config import Settings
from tf_module_tests.logging import ConsoleLogger, FileLogger, LogLevel
from tf_module_tests.runtime import TerraformCommandError, TerraformOutputError
from tf_module_tests.scenarios import MODULES, run_module_scenario
from tf_module_tests.validation import ValidationReport

console = Console()


def print_reports(reports: List[ValidationReport]) -> None:
    """Render one table row per check."""
    table = Table(title="Validation results")
    table.add_column("Module", style="cyan")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Message", overflow="fold")

    for report in reports:
        for check in report.checks:
            color = "green" if check.passed else "red"
            table.add_row(report.module, check.name, f"[{color}]{check.status.value}[/{color}]", escape(check.message))

    console.print(table)


def run_command(
    module: str = typer.Argument(..., help="Module to test: vpc, alb, compute or complete"),
    region: str = typer.Option("us-east-1", "--region", "-r", help="AWS region"),
    environment: str = typer.Option("staging", "--environment", "-e", help="Environment label"),
    project_name: Optional[str] = typer.Option(
        None, "--project-name", "-p", help="Project name (random when omitted)",
    ),
    root_dir: Optional[Path] = typer.Option(
        None, "--root", help="Repository root holding modules/ and examples/",
    ),
    report_file: Optional[Path] = typer.Option(
        None, "--report", help="Write the validation reports as JSON",
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Write scenario events as JSON lines",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show debug events"),
):
    """
    Deploy a module with its dependencies, validate it, and destroy everything.

    Examples:

        tf-module-tests run vpc --region eu-west-1 --environment prod

        tf-module-tests run compute --root ../infrastructure --report report.json
    """
    if module not in MODULES:
        console.print(f"[red]Error: unknown module '{escape(module)}', expected one of {', '.join(MODULES)}[/red]")
        raise typer.Exit(code=1)

    settings = Settings.from_env()
    if root_dir:
        settings.root_dir = root_dir

    if log_file:
        events = FileLogger(str(log_file), min_level=LogLevel.DEBUG if verbose else LogLevel.INFO)
    else:
        events = ConsoleLogger(min_level=LogLevel.DEBUG if verbose else LogLevel.INFO)

    try:
        reports = run_module_scenario(
            module, region, environment,
            project_name=project_name,
            settings=settings,
            event_logger=events,
        )
    except (TerraformCommandError, TerraformOutputError, FileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    print_reports(reports)

    if report_file:
        report_file.write_text(json.dumps([r.to_dict() for r in reports], indent=2))
        console.print(f"Report: {report_file}")

    if not all(report.passed for report in reports):
        raise typer.Exit(code=1)
