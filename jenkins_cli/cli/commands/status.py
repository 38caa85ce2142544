"""Status command for Jenkins CLI."""

from typing import Optional

import click

from jenkins_cli.cli.context import Context, pass_context, handle_error, handle_cancel
from jenkins_cli.cli.utils.config import Config, ConfigError
from jenkins_cli.cli.utils.auth import AuthManager
from jenkins_cli.cli.utils.job_resolver import NoJobsError, format_color, resolve_job_name
from jenkins_cli.cli.utils.prompts import PromptCancelled
from jenkins_cli.cli.formatters import json_formatter, human_formatter
from jenkins_cli.jenkins_api_control import (
    AuthenticationError,
    BuildNotFoundError,
    JenkinsAPI,
    JenkinsAPIError,
    JobNotFoundError,
)


@click.command("status")
@click.argument("job", required=False)
@click.option("--build", "-b", "build_number", type=click.IntRange(min=1), help="Build number")
@click.option("--jenkins", "jenkins_name", help="Jenkins host to use (default: current)")
@pass_context
def status(
    ctx: Context, job: Optional[str], build_number: Optional[int], jenkins_name: Optional[str]
) -> None:
    """Show the status of a job or one of its builds.

    \b
    Examples:
        jenkins status platform/job/deploy
        jenkins status deploy --build 42
    """
    try:
        cfg = Config.load()
        job_name, host_name = cfg.resolve_target(job, jenkins_name)
        api = AuthManager.get_api(cfg, host_name)
        job_name = resolve_job_name(api, job_name)

        if build_number is not None:
            build = api.get_build(job_name, build_number)
            if ctx.json_output:
                click.echo(json_formatter.format_json({"job": job_name, "build": build}))
            else:
                click.echo(human_formatter.format_build_details(job_name, build))
            return

        job_info = api.get_job(job_name, tree=JenkinsAPI.STATUS_TREE)
        if ctx.json_output:
            click.echo(
                json_formatter.format_json(
                    {"job": job_name, "status": format_color(job_info.color), "info": job_info}
                )
            )
        else:
            click.echo(human_formatter.format_job_info(job_name, job_info))

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
