"""Shared CLI context, exit codes and error reporting for Jenkins CLI.

This module avoids circular imports between the main CLI entry point
and individual command modules by centralizing common definitions.
"""

import sys
from typing import Optional

import click

from jenkins_cli.cli.formatters import human_formatter, json_formatter


# Exit codes
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1


class Context:
    """CLI context passed to all commands.

    Stores global CLI options such as JSON output and debug mode.
    """

    def __init__(self) -> None:
        self.json_output: bool = False
        self.debug: bool = False


# Click decorator to pass the shared Context instance into commands
pass_context = click.make_pass_decorator(Context, ensure=True)


def handle_error(
    ctx: Context,
    error_type: str,
    message: str,
    exit_code: int = EXIT_GENERAL_ERROR,
    hint: Optional[str] = None,
) -> None:
    """Report an error on stderr and exit."""
    if ctx.json_output:
        click.echo(json_formatter.format_json_error(error_type, message, exit_code, hint), err=True)
    else:
        click.echo(human_formatter.format_error(message, hint), err=True)
    sys.exit(exit_code)


def handle_cancel(ctx: Context, message: str = "Operation cancelled.") -> None:
    """A cancelled prompt is not an error: say so and exit cleanly."""
    if ctx.json_output:
        click.echo(json_formatter.format_json({"cancelled": True, "message": message}, success=False))
    else:
        click.echo(message, err=True)
    sys.exit(EXIT_SUCCESS)
