"""Open command for Jenkins CLI."""

from typing import Optional

import click

from jenkins_cli.cli.context import Context, pass_context, handle_error, handle_cancel
from jenkins_cli.cli.utils.config import Config, ConfigError
from jenkins_cli.cli.utils.auth import AuthManager
from jenkins_cli.cli.utils.job_resolver import NoJobsError, resolve_job_name_for_open
from jenkins_cli.cli.utils.prompts import PromptCancelled
from jenkins_cli.cli.formatters import json_formatter
from jenkins_cli.jenkins_api_control import AuthenticationError, JenkinsAPIError, JobNotFoundError


@click.command("open")
@click.argument("job", required=False)
@click.option("--build", "-b", "build_number", type=click.IntRange(min=1), help="Open this build instead of the job")
@click.option("--jenkins", "jenkins_name", help="Jenkins host to use (default: current)")
@pass_context
def open_job(
    ctx: Context, job: Optional[str], build_number: Optional[int], jenkins_name: Optional[str]
) -> None:
    """Open a job, folder or build in the browser.

    While browsing folders you can stop at any level with
    "[Open this job/folder]".
    """
    try:
        cfg = Config.load()
        job_name, host_name = cfg.resolve_target(job, jenkins_name)
        api = AuthManager.get_api(cfg, host_name)
        job_name = resolve_job_name_for_open(api, job_name)

        if build_number is not None:
            url = api.get_build_url(job_name, build_number)
        else:
            url = api.get_job_url(job_name)

        if ctx.json_output:
            click.echo(json_formatter.format_json({"job": job_name, "url": url}))
        else:
            click.echo(f"Opening {url}")
        click.launch(url)

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
