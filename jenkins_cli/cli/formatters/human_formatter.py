"""Human-readable output formatter for CLI commands.

Provides pretty-printed output with colors and tables.
"""

from datetime import datetime
from typing import Dict, Optional

import click

from jenkins_cli.jenkins_api_control import BuildDetails, JobInfo
from jenkins_cli.cli.utils.config import JenkinsHost, JobAlias
from jenkins_cli.cli.utils.job_resolver import format_color


# Build result styling
RESULT_STYLE = {
    "SUCCESS": ("✅", "green"),
    "FAILURE": ("❌", "red"),
    "UNSTABLE": ("⚠️", "yellow"),
    "ABORTED": ("\U0001f6d1", None),
    "NOT_BUILT": ("⏸️", None),
}
BUILDING_STYLE = ("\U0001f3c3", "cyan")
DEFAULT_RESULT_STYLE = ("❓", None)

BOX_WIDTH = 60


def _format_duration(ms: int) -> str:
    """Format milliseconds as human-readable duration."""
    try:
        milliseconds = int(ms)
        seconds = milliseconds // 1000
        minutes = seconds // 60
        hours = minutes // 60

        if hours > 0:
            return f"{hours}h {minutes % 60}m {seconds % 60}s"
        elif minutes > 0:
            return f"{minutes}m {seconds % 60}s"
        else:
            return f"{seconds}s"
    except (ValueError, TypeError):
        return "Unknown"


def _format_timestamp(timestamp_ms: int) -> str:
    """Format millisecond timestamp as human-readable datetime."""
    try:
        timestamp = int(timestamp_ms) / 1000
        if timestamp <= 0:
            return "Unknown"
        dt = datetime.fromtimestamp(timestamp)
        return dt.strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, TypeError, OverflowError, OSError):
        return "Unknown"


def _box(title: str, fields: list) -> str:
    lines = [
        "",
        "╭" + "─" * BOX_WIDTH + "╮",
        "│" + f" {title}"[:BOX_WIDTH].ljust(BOX_WIDTH) + "│",
        "├" + "─" * BOX_WIDTH + "┤",
    ]
    for label, value in fields:
        line = f" {label}:".ljust(15) + str(value)
        lines.append("│" + line.ljust(BOX_WIDTH) + "│")
    lines.append("╰" + "─" * BOX_WIDTH + "╯")
    return "\n".join(lines)


def format_build_result(result: Optional[str], building: bool = False) -> str:
    """Format a build result as a colored label.

    Args:
        result: Jenkins result (SUCCESS, FAILURE, ...), None while running
        building: Whether the build is still running

    Returns:
        Styled label string
    """
    if building or result is None:
        emoji, color = BUILDING_STYLE if building else DEFAULT_RESULT_STYLE
        label = "BUILDING" if building else "UNKNOWN"
    else:
        emoji, color = RESULT_STYLE.get(result, DEFAULT_RESULT_STYLE)
        label = result
    return f"{emoji} " + click.style(label, fg=color, bold=True)


def format_job_info(job_name: str, job: JobInfo) -> str:
    """Format job status as a pretty box.

    Args:
        job_name: Full job path
        job: Job details from the API

    Returns:
        Formatted string with job status
    """
    fields = [
        ("Job", job_name),
        ("Status", format_color(job.color)),
    ]
    if job.buildable is not None:
        fields.append(("Buildable", "yes" if job.buildable else "no"))

    if job.last_build:
        last = job.last_build
        fields.append(("Last Build", f"#{last.number}"))
        if last.building:
            fields.append(("Result", "BUILDING"))
        elif last.result:
            fields.append(("Result", last.result))
        if last.timestamp:
            fields.append(("Started", _format_timestamp(last.timestamp)))
    else:
        fields.append(("Last Build", "none"))

    if job.has_children:
        fields.append(("Sub-jobs", str(len(job.jobs))))

    output = _box("Job Status", fields)
    if job.url:
        output += f"\n\U0001f517 {job.url}"
    return output


def format_build_details(job_name: str, build: BuildDetails) -> str:
    """Format a single build as a pretty box."""
    fields = [
        ("Job", job_name),
        ("Build", f"#{build.number}"),
        ("Name", build.full_display_name),
        ("Started", _format_timestamp(build.timestamp)),
    ]
    if build.building:
        fields.append(("Result", "BUILDING"))
    else:
        fields.append(("Result", build.result or "UNKNOWN"))
        fields.append(("Duration", _format_duration(build.duration)))

    output = _box("Build Status", fields)
    if build.url:
        output += f"\n\U0001f517 {build.url}"
    return output


def format_host_list(hosts: Dict[str, JenkinsHost], current: Optional[str]) -> str:
    """Format configured Jenkins hosts as a table, marking the current one."""
    if not hosts:
        return "\nNo Jenkins hosts configured. Use 'jenkins config add' to add one.\n"

    name_width = max(len("Name"), *(len(name) for name in hosts))
    user_width = max(len("User"), *(len(h.user) for h in hosts.values()))

    header_line = f"  {'Name':<{name_width}} {'User':<{user_width}} URL"
    separator = "─" * max(len(header_line), 40)

    lines = [
        "",
        "\U0001f5a5️  Jenkins Hosts",
        separator,
        header_line,
        separator,
    ]
    for name, host in hosts.items():
        marker = "*" if name == current else " "
        lines.append(f"{marker} {name:<{name_width}} {host.user:<{user_width}} {host.host}")
    lines.append(separator)
    lines.append(f"Total: {len(hosts)} host(s)")
    return "\n".join(lines)


def format_host(name: str, host: JenkinsHost, is_current: bool) -> str:
    """Format one host with its token masked."""
    fields = [
        ("Name", name + (" (current)" if is_current else "")),
        ("URL", host.host),
        ("User", host.user),
        ("Token", mask_token(host.token)),
    ]
    return _box("Jenkins Host", fields)


def mask_token(token: str) -> str:
    """Show only the first 8 characters of a token."""
    if len(token) <= 8:
        return "*" * len(token)
    return token[:8] + "..."


def format_alias_list(aliases: Dict[str, JobAlias]) -> str:
    """Format job aliases as a table."""
    if not aliases:
        return "\nNo job aliases configured. Use 'jenkins alias add' to add one.\n"

    alias_width = max(len("Alias"), *(len(a) for a in aliases))
    lines = [
        "",
        "\U0001f516 Job Aliases",
        "─" * 60,
        f"{'Alias':<{alias_width}}  Job",
        "─" * 60,
    ]
    for name, alias in sorted(aliases.items()):
        target = alias.job_name
        if alias.jenkins:
            target += f" (jenkins: {alias.jenkins})"
        lines.append(f"{name:<{alias_width}}  {target}")
    lines.append("─" * 60)
    lines.append(f"Total: {len(aliases)} alias(es)")
    return "\n".join(lines)


def format_error(message: str, hint: Optional[str] = None) -> str:
    """Format an error message.

    Args:
        message: Error message
        hint: Optional hint for fixing

    Returns:
        Formatted error string
    """
    lines = [f"\n❌ Error: {message}"]
    if hint:
        lines.append(f"\U0001f4a1 Hint: {hint}")
    return "\n".join(lines)


def format_success(message: str) -> str:
    """Format a success message."""
    return f"✅ {message}"


def format_warning(message: str) -> str:
    """Format a warning message."""
    return f"⚠️ {message}"
