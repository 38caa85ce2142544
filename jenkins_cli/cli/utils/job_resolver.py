"""Interactive job resolution.

Jenkins folders nest jobs; a folder child is addressed as
`<folder>/job/<child>`. The resolvers below walk that tree from an optional
starting path, prompting whenever the current job has children, until they
reach a concrete job.
"""

import logging
from typing import List, Optional

from jenkins_cli.jenkins_api_control import JenkinsAPI, JenkinsAPIError, SubJob
from jenkins_cli.cli.utils.prompts import Prompter, get_prompter


logger = logging.getLogger(__name__)

BUILDING_SUFFIX = "_anime"
OPEN_HERE_TITLE = "[Open this job/folder]"

COLOR_LABELS = {
    "blue": "Success",
    "red": "Failed",
    "yellow": "Unstable",
    "aborted": "Aborted",
    "notbuilt": "Not Built",
    "disabled": "Disabled",
}


class NoJobsError(JenkinsAPIError):
    """The Jenkins instance has no jobs to choose from."""
    pass


class _OpenHere:
    """Marker value for the 'stop at this level' choice."""

    def __repr__(self) -> str:
        return "OPEN_HERE"


OPEN_HERE = _OpenHere()


def format_color(color: Optional[str]) -> str:
    """Map a Jenkins status color to a human label.

    `<base>_anime` colors mean a build is running and render as
    "Building (<base>)". Unknown colors pass through unchanged.
    """
    if color is None:
        return "Unknown"
    if color in COLOR_LABELS:
        return COLOR_LABELS[color]
    if color.endswith(BUILDING_SUFFIX):
        return f"Building ({color[:-len(BUILDING_SUFFIX)]})"
    return color


def _job_choices(jobs: List[SubJob]) -> list:
    return [(f"{job.name} [{format_color(job.color)}]", job.name) for job in jobs]


def child_path(parent: str, child: str) -> str:
    """Path of a folder child using the Jenkins folder convention."""
    return f"{parent}/job/{child}"


def _select_root_job(api: JenkinsAPI, prompter: Prompter) -> str:
    root_jobs = api.get_root_jobs()
    if not root_jobs:
        raise NoJobsError("No jobs found on this Jenkins instance")
    return prompter.select("Select a job:", _job_choices(root_jobs))


def _resolve(
    api: JenkinsAPI,
    initial_job_name: Optional[str],
    prompter: Optional[Prompter],
    allow_stop: bool,
) -> str:
    prompter = prompter or get_prompter()
    current = initial_job_name or _select_root_job(api, prompter)

    while True:
        job_info = api.get_job(current, tree=JenkinsAPI.JOB_TREE)
        if not job_info.has_children:
            return current

        sub_jobs = job_info.jobs
        choices = _job_choices(sub_jobs)
        if allow_stop:
            choices.insert(0, (OPEN_HERE_TITLE, OPEN_HERE))
            message = f"'{current}' contains {len(sub_jobs)} sub-job(s). Select an option:"
        else:
            message = f"'{current}' contains {len(sub_jobs)} sub-job(s). Select a job:"

        selection = prompter.select(message, choices)
        if selection is OPEN_HERE:
            return current

        current = child_path(current, selection)
        logger.debug("Descending into %s", current)


def resolve_job_name(
    api: JenkinsAPI,
    initial_job_name: Optional[str] = None,
    prompter: Optional[Prompter] = None,
) -> str:
    """Resolve a buildable job path, prompting through folders.

    Starts from the root job list when no name is given and only returns
    once the current job has no children.

    Raises:
        NoJobsError: If the instance has no jobs
        PromptCancelled: If the user cancels a selection
        JenkinsAPIError: On any fetch failure
    """
    return _resolve(api, initial_job_name, prompter, allow_stop=False)


def resolve_job_name_for_open(
    api: JenkinsAPI,
    initial_job_name: Optional[str] = None,
    prompter: Optional[Prompter] = None,
) -> str:
    """Resolve a job path, letting the user stop at any folder level."""
    return _resolve(api, initial_job_name, prompter, allow_stop=True)
