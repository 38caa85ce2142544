"""Job alias commands for Jenkins CLI.

Commands:
    jenkins alias add      - Save a short name for a job
    jenkins alias list     - List aliases
    jenkins alias remove   - Delete an alias
"""

from typing import Optional

import click

from jenkins_cli.cli.context import Context, pass_context, handle_error, handle_cancel
from jenkins_cli.cli.utils.config import Config, ConfigError
from jenkins_cli.cli.utils.auth import AuthManager
from jenkins_cli.cli.utils.job_resolver import NoJobsError, resolve_job_name
from jenkins_cli.cli.utils.prompts import PromptCancelled, get_prompter, not_empty
from jenkins_cli.cli.formatters import json_formatter, human_formatter
from jenkins_cli.jenkins_api_control import AuthenticationError, JenkinsAPIError, JobNotFoundError


@click.group()
def alias() -> None:
    """Manage job aliases."""
    pass


@alias.command("add")
@click.argument("name", required=False)
@click.argument("job", required=False)
@click.option("--jenkins", "jenkins_name", help="Pin the alias to this Jenkins host")
@pass_context
def add(ctx: Context, name: Optional[str], job: Optional[str], jenkins_name: Optional[str]) -> None:
    """Save NAME as a short name for JOB.

    JOB is checked against the server; when it is a folder (or omitted)
    you pick the job interactively.

    \b
    Examples:
        jenkins alias add deploy platform/job/deploy
        jenkins alias add ship --jenkins prod
    """
    try:
        cfg = Config.load()
        prompter = get_prompter()

        name = name or prompter.text("Alias name:", validate=not_empty("Alias name"))
        name = name.strip()
        if name in cfg.job_aliases and not prompter.confirm(
            f"Job alias '{name}' already exists. Do you want to overwrite it?", default=False
        ):
            handle_cancel(ctx)

        api = AuthManager.get_api(cfg, jenkins_name)
        job_name = resolve_job_name(api, job, prompter=prompter)

        cfg.add_job_alias(name, job_name, jenkins_name)
        cfg.save()

        if ctx.json_output:
            click.echo(json_formatter.format_json({"alias": name, "job_name": job_name, "jenkins": jenkins_name}))
        else:
            target = job_name + (f" (jenkins: {jenkins_name})" if jenkins_name else "")
            click.echo(human_formatter.format_success(f"Alias '{name}' -> {target}"))

    except PromptCancelled as e:
        handle_cancel(ctx, str(e))
    except ConfigError as e:
        handle_error(ctx, "ConfigError", str(e))
    except AuthenticationError as e:
        handle_error(ctx, "AuthenticationError", str(e))
    except JobNotFoundError as e:
        handle_error(ctx, "JobNotFound", str(e))
    except NoJobsError as e:
        handle_error(ctx, "NoJobs", str(e))
    except JenkinsAPIError as e:
        handle_error(ctx, "APIError", str(e))


@alias.command("list")
@pass_context
def list_aliases(ctx: Context) -> None:
    """List job aliases."""
    try:
        cfg = Config.load()
        if ctx.json_output:
            click.echo(
                json_formatter.format_json(
                    [
                        {"alias": n, "job_name": a.job_name, "jenkins": a.jenkins}
                        for n, a in sorted(cfg.job_aliases.items())
                    ]
                )
            )
        else:
            click.echo(human_formatter.format_alias_list(cfg.job_aliases))
    except ConfigError as e:
        handle_error(ctx, "ConfigError", str(e))


@alias.command("remove")
@click.argument("name", required=False)
@pass_context
def remove(ctx: Context, name: Optional[str]) -> None:
    """Delete an alias (choose from a list when NAME is omitted)."""
    try:
        cfg = Config.load()
        if not name:
            if not cfg.job_aliases:
                raise ConfigError("No job aliases configured.")
            name = get_prompter().select(
                "Select an alias to remove:",
                [(f"{n} -> {a.job_name}", n) for n, a in sorted(cfg.job_aliases.items())],
            )

        cfg.remove_job_alias(name)
        cfg.save()

        if ctx.json_output:
            click.echo(json_formatter.format_json({"removed": name}))
        else:
            click.echo(human_formatter.format_success(f"Alias '{name}' removed"))

    except PromptCancelled as e:
        handle_cancel(ctx, str(e))
    except ConfigError as e:
        handle_error(ctx, "ConfigError", str(e))
