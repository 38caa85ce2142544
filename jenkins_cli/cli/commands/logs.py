"""Logs command for Jenkins CLI."""

from typing import Optional

import click

from jenkins_cli.cli.context import Context, pass_context, handle_error, handle_cancel
from jenkins_cli.cli.utils.config import Config, ConfigError
from jenkins_cli.cli.utils.auth import AuthManager
from jenkins_cli.cli.utils.job_resolver import NoJobsError, resolve_job_name
from jenkins_cli.cli.utils.logs import LogStreamer
from jenkins_cli.cli.utils.prompts import PromptCancelled
from jenkins_cli.cli.formatters import json_formatter
from jenkins_cli.jenkins_api_control import (
    AuthenticationError,
    BuildNotFoundError,
    JenkinsAPIError,
    JobNotFoundError,
)


@click.command("logs")
@click.argument("job", required=False)
@click.option("--build", "-b", "build_number", type=click.IntRange(min=1), help="Build number (default: last build)")
@click.option("--jenkins", "jenkins_name", help="Jenkins host to use (default: current)")
@click.option("--follow", "-f", is_flag=True, help="Keep streaming until the build finishes")
@pass_context
def logs(
    ctx: Context,
    job: Optional[str],
    build_number: Optional[int],
    jenkins_name: Optional[str],
    follow: bool,
) -> None:
    """Print the console log of a build.

    \b
    Examples:
        jenkins logs platform/job/deploy
        jenkins logs deploy --build 42
        jenkins logs deploy --follow
    """
    try:
        cfg = Config.load()
        job_name, host_name = cfg.resolve_target(job, jenkins_name)
        api = AuthManager.get_api(cfg, host_name)
        job_name = resolve_job_name(api, job_name)

        if build_number is None:
            build_number = api.get_last_build_number(job_name)
            if build_number is None:
                handle_error(ctx, "BuildNotFound", f"No builds found for job '{job_name}'")

        if follow:
            if ctx.json_output:
                chunks = []
                LogStreamer(api, job_name, build_number).follow(chunks.append)
                text = "".join(chunks)
            else:
                LogStreamer(api, job_name, build_number).follow(
                    lambda chunk: click.echo(chunk, nl=False)
                )
                return
        else:
            text = api.get_console_log(job_name, build_number)

        if ctx.json_output:
            click.echo(
                json_formatter.format_json(
                    {"job": job_name, "build_number": build_number, "log": text}
                )
            )
        else:
            click.echo(text, nl=False)

    except PromptCancelled as e:
        handle_cancel(ctx, str(e))
    except ConfigError as e:
        handle_error(ctx, "ConfigError", str(e))
    except AuthenticationError as e:
        handle_error(ctx, "AuthenticationError", str(e))
    except JobNotFoundError as e:
        handle_error(ctx, "JobNotFound", str(e))
    except BuildNotFoundError as e:
        handle_error(ctx, "BuildNotFound", str(e))
    except NoJobsError as e:
        handle_error(ctx, "NoJobs", str(e))
    except JenkinsAPIError as e:
        handle_error(ctx, "APIError", str(e))
