"""Jenkins CLI - Main entry point.

Usage:
    jenkins config add
    jenkins build platform/job/deploy --follow
    jenkins status deploy --build 42
    jenkins logs deploy --follow
"""

import logging
import sys

import click

from jenkins_cli import __version__
from jenkins_cli.cli.context import Context, pass_context, EXIT_GENERAL_ERROR
from jenkins_cli.cli.commands import config, alias, build, status, logs, open_job, completion


@click.group()
@click.version_option(version=__version__, prog_name="jenkins")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output as JSON (machine-readable)",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug logging",
)
@pass_context
def main(ctx: Context, json_output: bool, debug: bool) -> None:
    """Jenkins command-line client.

    Trigger builds, check their status and follow console logs on one or
    more Jenkins instances.

    \b
    Examples:
        jenkins config add
        jenkins build platform/job/deploy --follow
        jenkins status deploy
        jenkins logs deploy --build 42
        jenkins open
    """
    ctx.json_output = json_output
    ctx.debug = debug

    if debug:
        logging.basicConfig(level=logging.DEBUG)


# Register commands
main.add_command(config)
main.add_command(alias)
main.add_command(build)
main.add_command(status)
main.add_command(logs)
main.add_command(open_job)
main.add_command(completion)


def cli() -> None:
    """Entry point for the CLI."""
    try:
        main()
    except Exception as e:  # pragma: no cover - top-level safety net
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_GENERAL_ERROR)


if __name__ == "__main__":  # pragma: no cover
    cli()
