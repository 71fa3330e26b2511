"""Command-line interface for tf-module-tests."""

import typer

from tf_module_tests.cli.options import options_command
from tf_module_tests.cli.run import run_command

app = typer.Typer(help="Terraform module integration tests - deploy, validate, destroy")

app.command(name="options")(options_command)
app.command(name="run")(run_command)


def main():
    """Main CLI entry point."""
    app()


__all__ = ["app", "main"]
