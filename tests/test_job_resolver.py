"""Tests for interactive job resolution."""

from typing import Any, Dict, List, Optional

import pytest

from jenkins_cli.jenkins_api_control import JobInfo, JobNotFoundError, SubJob
from jenkins_cli.cli.utils.job_resolver import (
    OPEN_HERE,
    OPEN_HERE_TITLE,
    NoJobsError,
    child_path,
    format_color,
    resolve_job_name,
    resolve_job_name_for_open,
)
from jenkins_cli.cli.utils.prompts import PromptCancelled


class DummyPrompter:
    """Answers select prompts from a script and records what was asked."""

    def __init__(self, answers: Optional[List[Any]] = None) -> None:
        self.answers = list(answers or [])
        self.asked: List[Dict[str, Any]] = []

    def select(self, message: str, choices: list, default: Any = None) -> Any:
        self.asked.append({"message": message, "choices": list(choices)})
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


class TreeAPI:
    """Job tree keyed by full path; a path maps to its child names."""

    def __init__(self, tree: Dict[str, List[str]], root: Optional[List[str]] = None) -> None:
        self.tree = tree
        self.root = root or []
        self.fetched: List[str] = []
        self.root_fetches = 0

    def get_root_jobs(self) -> List[SubJob]:
        self.root_fetches += 1
        return [SubJob(name=name, color="blue") for name in self.root]

    def get_job(self, job_name: str, tree: Optional[str] = None) -> JobInfo:
        self.fetched.append(job_name)
        if job_name not in self.tree:
            raise JobNotFoundError(f"Job '{job_name}' not found", status_code=404)
        children = [SubJob(name=c, color="notbuilt") for c in self.tree[job_name]]
        return JobInfo(name=job_name.rsplit("/", 1)[-1], jobs=children)


class TestFormatColor:
    @pytest.mark.parametrize(
        "color, label",
        [
            ("blue", "Success"),
            ("red", "Failed"),
            ("yellow", "Unstable"),
            ("aborted", "Aborted"),
            ("notbuilt", "Not Built"),
            ("disabled", "Disabled"),
            ("blue_anime", "Building (blue)"),
            ("red_anime", "Building (red)"),
            ("grey", "grey"),
            (None, "Unknown"),
        ],
    )
    def test_labels(self, color: Optional[str], label: str) -> None:
        assert format_color(color) == label


class TestResolveJobName:
    def test_leaf_returned_after_single_fetch(self) -> None:
        api = TreeAPI({"deploy": []})
        prompter = DummyPrompter()

        assert resolve_job_name(api, "deploy", prompter=prompter) == "deploy"
        assert api.fetched == ["deploy"]
        assert prompter.asked == []

    def test_folder_child_selection(self) -> None:
        api = TreeAPI({"folder": ["a", "b"], "folder/job/a": []})
        prompter = DummyPrompter(["a"])

        assert resolve_job_name(api, "folder", prompter=prompter) == "folder/job/a"
        assert api.fetched == ["folder", "folder/job/a"]
        asked = prompter.asked[0]
        assert asked["message"] == "'folder' contains 2 sub-job(s). Select a job:"
        assert asked["choices"] == [("a [Not Built]", "a"), ("b [Not Built]", "b")]

    def test_nested_folders(self) -> None:
        api = TreeAPI(
            {
                "org": ["team"],
                "org/job/team": ["svc"],
                "org/job/team/job/svc": ["main"],
                "org/job/team/job/svc/job/main": [],
            }
        )
        prompter = DummyPrompter(["team", "svc", "main"])

        result = resolve_job_name(api, "org", prompter=prompter)

        assert result == "org/job/team/job/svc/job/main"
        assert len(api.fetched) == 4

    def test_no_start_lists_root_jobs(self) -> None:
        api = TreeAPI({"alpha": [], "beta": []}, root=["alpha", "beta"])
        prompter = DummyPrompter(["beta"])

        assert resolve_job_name(api, prompter=prompter) == "beta"
        assert api.root_fetches == 1
        assert prompter.asked[0]["choices"] == [("alpha [Success]", "alpha"), ("beta [Success]", "beta")]

    def test_no_jobs_on_instance(self) -> None:
        api = TreeAPI({}, root=[])

        with pytest.raises(NoJobsError, match="No jobs found on this Jenkins instance"):
            resolve_job_name(api, prompter=DummyPrompter())

    def test_cancel_propagates(self) -> None:
        api = TreeAPI({"folder": ["a"]})
        prompter = DummyPrompter([PromptCancelled()])

        with pytest.raises(PromptCancelled):
            resolve_job_name(api, "folder", prompter=prompter)

    def test_missing_job_propagates(self) -> None:
        api = TreeAPI({})

        with pytest.raises(JobNotFoundError):
            resolve_job_name(api, "nope", prompter=DummyPrompter())

    def test_strict_resolver_has_no_open_choice(self) -> None:
        api = TreeAPI({"folder": ["a"], "folder/job/a": []})
        prompter = DummyPrompter(["a"])

        resolve_job_name(api, "folder", prompter=prompter)

        titles = [title for title, _ in prompter.asked[0]["choices"]]
        assert OPEN_HERE_TITLE not in titles


class TestResolveJobNameForOpen:
    def test_stop_at_folder(self) -> None:
        api = TreeAPI({"folder": ["a", "b"]})
        prompter = DummyPrompter([OPEN_HERE])

        assert resolve_job_name_for_open(api, "folder", prompter=prompter) == "folder"
        first_choice = prompter.asked[0]["choices"][0]
        assert first_choice == (OPEN_HERE_TITLE, OPEN_HERE)

    def test_descend_then_stop(self) -> None:
        api = TreeAPI({"org": ["team"], "org/job/team": ["svc"]})
        prompter = DummyPrompter(["team", OPEN_HERE])

        assert resolve_job_name_for_open(api, "org", prompter=prompter) == "org/job/team"
        assert all(asked["choices"][0][1] is OPEN_HERE for asked in prompter.asked)

    def test_leaf_needs_no_prompt(self) -> None:
        api = TreeAPI({"deploy": []})
        prompter = DummyPrompter()

        assert resolve_job_name_for_open(api, "deploy", prompter=prompter) == "deploy"
        assert prompter.asked == []


def test_child_path() -> None:
    assert child_path("a", "b") == "a/job/b"
    assert child_path("a/job/b", "c") == "a/job/b/job/c"
