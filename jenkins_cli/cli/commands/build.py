"""Build command for Jenkins CLI."""

from typing import Any, Dict, Optional, Tuple

import click

from jenkins_cli.cli.context import Context, pass_context, handle_error, handle_cancel
from jenkins_cli.cli.utils.config import Config, ConfigError
from jenkins_cli.cli.utils.auth import AuthManager
from jenkins_cli.cli.utils.build_tracker import (
    ParameterValueError,
    collect_parameter_values,
    parse_parameter_options,
    trigger_build,
    wait_for_build_number,
)
from jenkins_cli.cli.utils.job_resolver import NoJobsError, resolve_job_name
from jenkins_cli.cli.utils.logs import LogStreamer
from jenkins_cli.cli.utils.prompts import PromptCancelled, get_prompter
from jenkins_cli.cli.formatters import json_formatter, human_formatter
from jenkins_cli.jenkins_api_control import (
    AuthenticationError,
    JenkinsAPI,
    JenkinsAPIError,
    JobNotFoundError,
)


def _warn(message: str) -> None:
    click.echo(human_formatter.format_warning(message), err=True)


def _follow_build(
    ctx: Context, api: JenkinsAPI, job_name: str, queue_url: str, previous_build: Optional[int]
) -> Dict[str, Any]:
    """Wait for the build to start, stream its log and report the result.

    Failures here are reported as warnings; the build itself was already
    submitted.
    """
    result: Dict[str, Any] = {}

    if not ctx.json_output:
        click.echo("Waiting for the build to start...")
    try:
        build_number = wait_for_build_number(api, job_name, queue_url, previous_build=previous_build)
    except JenkinsAPIError as e:
        _warn(f"Could not determine build number: {e}")
        result["warning"] = f"could not determine build number: {e}"
        return result
    if build_number is None:
        _warn("Could not determine build number; not following logs.")
        result["warning"] = "could not determine build number"
        return result

    result["build_number"] = build_number
    result["build_url"] = api.get_build_url(job_name, build_number)
    if not ctx.json_output:
        click.echo(f"Build #{build_number} started: {result['build_url']}")

    streamer = LogStreamer(api, job_name, build_number)
    try:
        # Keep stdout valid JSON in --json mode
        streamer.follow(lambda text: click.echo(text, nl=False, err=ctx.json_output))
    except JenkinsAPIError as e:
        _warn(f"Log streaming stopped: {e}")
        result["warning"] = f"log streaming stopped: {e}"
        return result

    try:
        build = api.get_build(job_name, build_number)
    except JenkinsAPIError as e:
        _warn(f"Could not fetch build result: {e}")
        result["warning"] = f"could not fetch build result: {e}"
        return result

    result["result"] = build.result
    result["duration"] = build.duration
    if not ctx.json_output:
        click.echo("")
        click.echo(
            f"Build #{build_number} finished: "
            + human_formatter.format_build_result(build.result, build.building)
        )
    return result


@click.command("build")
@click.argument("job", required=False)
@click.option("--jenkins", "jenkins_name", help="Jenkins host to use (default: current)")
@click.option("--follow", "-f", is_flag=True, help="Stream the console log until the build finishes")
@click.option(
    "--param",
    "-p",
    "params",
    multiple=True,
    metavar="KEY=VALUE",
    help="Set a build parameter without prompting. Repeatable.",
)
@pass_context
def build(
    ctx: Context,
    job: Optional[str],
    jenkins_name: Optional[str],
    follow: bool,
    params: Tuple[str, ...],
) -> None:
    """Trigger a build.

    JOB may be a job path, a folder (you pick a job inside it) or an alias.
    Without JOB, pick from the job list. Parameterized jobs prompt for each
    parameter not given with --param.

    \b
    Examples:
        jenkins build
        jenkins build platform/job/deploy --follow
        jenkins build deploy -p BRANCH=main -p DEPLOY=true
    """
    try:
        cfg = Config.load()
        job_name, host_name = cfg.resolve_target(job, jenkins_name)
        api = AuthManager.get_api(cfg, host_name)
        preset = parse_parameter_options(params)
        prompter = get_prompter()

        job_name = resolve_job_name(api, job_name, prompter=prompter)
        values = collect_parameter_values(api.get_job_parameters(job_name), prompter, preset)
        previous_build = api.get_last_build_number(job_name)

        queue_url = trigger_build(api, job_name, values)

        output: Dict[str, Any] = {
            "job": job_name,
            "parameters": values,
            "queue_url": queue_url,
            "job_url": api.get_job_url(job_name),
        }
        if not ctx.json_output:
            click.echo(human_formatter.format_success(f"Build triggered for {job_name}"))

        if not queue_url:
            _warn("No queue location available; cannot track the build.")
            output["warning"] = "no queue location available"
        elif follow:
            output.update(_follow_build(ctx, api, job_name, queue_url, previous_build))
        elif not ctx.json_output:
            click.echo(f"Queued: {queue_url}")

        if ctx.json_output:
            click.echo(json_formatter.format_json(output))

    except PromptCancelled as e:
        handle_cancel(ctx, str(e))
    except ParameterValueError as e:
        handle_error(ctx, "ValidationError", str(e))
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
