"""Output formatters for CLI commands."""

from jenkins_cli.cli.formatters.json_formatter import format_json, format_json_error
from jenkins_cli.cli.formatters.human_formatter import (
    format_job_info,
    format_build_details,
    format_build_result,
    format_host_list,
    format_alias_list,
    format_error,
    format_success,
    format_warning,
)

__all__ = [
    "format_json",
    "format_json_error",
    "format_job_info",
    "format_build_details",
    "format_build_result",
    "format_host_list",
    "format_alias_list",
    "format_error",
    "format_success",
    "format_warning",
]
