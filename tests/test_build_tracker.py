"""Tests for build triggering, parameter collection and queue tracking."""

import logging
from typing import Any, Dict, List, Optional

import pytest

from jenkins_cli.jenkins_api_control import (
    JenkinsAPIError,
    ParameterDefinition,
    ParameterKind,
    QueueItem,
    QueueItemNotFoundError,
)
from jenkins_cli.cli.utils.build_tracker import (
    ParameterValueError,
    coerce_value,
    collect_parameter_values,
    default_value,
    parse_parameter_options,
    trigger_build,
    wait_for_build_number,
)
from jenkins_cli.cli.utils.prompts import PromptCancelled


QUEUE_URL = "https://ci.example.com/queue/item/17/"


class DummyAPI:
    def __init__(
        self,
        location: Optional[str] = QUEUE_URL,
        queue_responses: Optional[List[Any]] = None,
        last_build: Any = None,
    ) -> None:
        self.location = location
        self.queue_responses = list(queue_responses or [])
        self.last_build = last_build
        self.calls: Dict[str, Any] = {}
        self.queue_fetches = 0
        self.last_build_fetches = 0

    def trigger_build(self, job_name: str) -> Optional[str]:
        self.calls["trigger_build"] = job_name
        return self.location

    def trigger_build_with_parameters(self, job_name: str, parameters: Dict[str, str]) -> Optional[str]:
        self.calls["trigger_build_with_parameters"] = (job_name, dict(parameters))
        return self.location

    def get_queue_item(self, queue_url: str) -> QueueItem:
        self.queue_fetches += 1
        response = self.queue_responses.pop(0) if self.queue_responses else QueueItem(url=queue_url)
        if isinstance(response, Exception):
            raise response
        return response

    def get_last_build_number(self, job_name: str) -> Optional[int]:
        self.last_build_fetches += 1
        if isinstance(self.last_build, Exception):
            raise self.last_build
        return self.last_build


class DummyPrompter:
    def __init__(self, answers: Optional[List[Any]] = None) -> None:
        self.answers = list(answers or [])
        self.asked: List[tuple] = []

    def _next(self, kind: str, message: str, **kwargs: Any) -> Any:
        self.asked.append((kind, message, kwargs))
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def text(self, message: str, default: Optional[str] = None, validate: Any = None, secret: bool = False) -> str:
        return self._next("text", message, default=default)

    def confirm(self, message: str, default: bool = False) -> bool:
        return self._next("confirm", message, default=default)

    def select(self, message: str, choices: list, default: Any = None) -> Any:
        return self._next("select", message, choices=list(choices), default=default)


def _not_found() -> QueueItemNotFoundError:
    return QueueItemNotFoundError("Queue item not found", status_code=404)


def _param(kind: ParameterKind, name: str, default: Any = None, choices: Optional[List[str]] = None) -> ParameterDefinition:
    return ParameterDefinition(kind=kind, name=name, default=default, choices=choices or [])


# ===========================================================================
# Trigger
# ===========================================================================


class TestTriggerBuild:
    def test_parameterized_trigger_posts_form_fields(self) -> None:
        api = DummyAPI(location="https://ci.example.com/queue/item/42/")

        location = trigger_build(api, "folder/job/app", {"BRANCH": "main", "DEPLOY": "true"})

        assert location == "https://ci.example.com/queue/item/42/"
        assert api.calls["trigger_build_with_parameters"] == (
            "folder/job/app",
            {"BRANCH": "main", "DEPLOY": "true"},
        )
        assert "trigger_build" not in api.calls

    def test_plain_trigger_without_parameters(self) -> None:
        api = DummyAPI()

        assert trigger_build(api, "app") == QUEUE_URL
        assert trigger_build(api, "app", {}) == QUEUE_URL
        assert api.calls["trigger_build"] == "app"
        assert "trigger_build_with_parameters" not in api.calls

    def test_missing_location_returns_none(self) -> None:
        api = DummyAPI(location=None)

        assert trigger_build(api, "app") is None

    def test_debug_log_names_parameters_without_values(self, caplog: pytest.LogCaptureFixture) -> None:
        api = DummyAPI()

        with caplog.at_level(logging.DEBUG, logger="jenkins_cli.cli.utils.build_tracker"):
            trigger_build(api, "app", {"BRANCH": "main", "PASSWORD": "hunter2"})

        assert "BRANCH, PASSWORD" in caplog.text
        assert "hunter2" not in caplog.text


# ===========================================================================
# Queue tracking
# ===========================================================================


class TestWaitForBuildNumber:
    def test_resolves_once_executable_appears(self) -> None:
        sleeps: List[float] = []
        api = DummyAPI(
            queue_responses=[
                QueueItem(url=QUEUE_URL, why="Waiting for next available executor"),
                QueueItem(url=QUEUE_URL, build_number=7),
            ]
        )

        number = wait_for_build_number(api, "app", QUEUE_URL, sleep=sleeps.append)

        assert number == 7
        assert api.queue_fetches == 2
        assert sleeps == [1.0]

    def test_queue_item_gone_falls_back_to_last_build(self) -> None:
        api = DummyAPI(queue_responses=[_not_found()], last_build=12)

        assert wait_for_build_number(api, "app", QUEUE_URL, sleep=lambda _: None) == 12

    def test_fallback_ignores_builds_that_predate_trigger(self) -> None:
        api = DummyAPI(
            queue_responses=[_not_found(), _not_found(), QueueItem(url=QUEUE_URL, build_number=13)],
            last_build=12,
        )

        number = wait_for_build_number(api, "app", QUEUE_URL, previous_build=12, sleep=lambda _: None)

        assert number == 13
        assert api.last_build_fetches == 2

    def test_gives_up_after_exact_attempt_budget(self) -> None:
        sleeps: List[float] = []
        api = DummyAPI(queue_responses=[_not_found()] * 30, last_build=None)

        number = wait_for_build_number(api, "app", QUEUE_URL, sleep=sleeps.append)

        assert number is None
        assert api.queue_fetches == 30
        assert len(sleeps) == 29

    def test_custom_budget_and_interval(self) -> None:
        sleeps: List[float] = []
        api = DummyAPI()

        assert wait_for_build_number(api, "app", QUEUE_URL, interval=0.25, max_attempts=3, sleep=sleeps.append) is None
        assert api.queue_fetches == 3
        assert sleeps == [0.25, 0.25]

    def test_cancelled_item_stops_immediately(self) -> None:
        api = DummyAPI(queue_responses=[QueueItem(url=QUEUE_URL, cancelled=True)])

        assert wait_for_build_number(api, "app", QUEUE_URL, sleep=lambda _: None) is None
        assert api.queue_fetches == 1

    def test_fallback_error_is_not_fatal(self) -> None:
        api = DummyAPI(
            queue_responses=[_not_found(), QueueItem(url=QUEUE_URL, build_number=3)],
            last_build=JenkinsAPIError("boom", status_code=500),
        )

        assert wait_for_build_number(api, "app", QUEUE_URL, sleep=lambda _: None) == 3

    def test_other_queue_errors_propagate(self) -> None:
        api = DummyAPI(queue_responses=[JenkinsAPIError("server error", status_code=500)])

        with pytest.raises(JenkinsAPIError, match="server error"):
            wait_for_build_number(api, "app", QUEUE_URL, sleep=lambda _: None)


# ===========================================================================
# Parameters
# ===========================================================================


class TestParameterValues:
    @pytest.mark.parametrize(
        "default, expected",
        [
            ("main", "main"),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (1.5, "1.5"),
            (None, None),
            ({"nested": 1}, None),
        ],
    )
    def test_default_value(self, default: Any, expected: Optional[str]) -> None:
        assert default_value(_param(ParameterKind.STRING, "P", default=default)) == expected

    def test_coerce_boolean(self) -> None:
        flag = _param(ParameterKind.BOOLEAN, "DEPLOY")
        assert coerce_value(flag, True) == "true"
        assert coerce_value(flag, "yes") == "true"
        assert coerce_value(flag, "False") == "false"
        with pytest.raises(ParameterValueError):
            coerce_value(flag, "maybe")

    def test_coerce_choice(self) -> None:
        env = _param(ParameterKind.CHOICE, "ENV", choices=["dev", "prod"])
        assert coerce_value(env, "prod") == "prod"
        with pytest.raises(ParameterValueError, match="must be one of: dev, prod"):
            coerce_value(env, "staging")

    def test_collect_prompts_by_kind(self) -> None:
        definitions = [
            _param(ParameterKind.STRING, "BRANCH", default="main"),
            _param(ParameterKind.BOOLEAN, "DEPLOY", default=False),
            _param(ParameterKind.CHOICE, "ENV", default="dev", choices=["dev", "prod"]),
            _param(ParameterKind.OTHER, "FILE"),
        ]
        prompter = DummyPrompter(["feature", True, "prod", "x.txt"])

        values = collect_parameter_values(definitions, prompter)

        assert values == {"BRANCH": "feature", "DEPLOY": "true", "ENV": "prod", "FILE": "x.txt"}
        kinds = [kind for kind, _, _ in prompter.asked]
        assert kinds == ["text", "confirm", "select", "text"]
        assert prompter.asked[0][2]["default"] == "main"
        assert prompter.asked[1][2]["default"] is False
        assert prompter.asked[2][2]["default"] == "dev"

    def test_preset_values_skip_prompt(self) -> None:
        definitions = [
            _param(ParameterKind.STRING, "BRANCH"),
            _param(ParameterKind.BOOLEAN, "DEPLOY"),
        ]
        prompter = DummyPrompter(["main"])

        values = collect_parameter_values(definitions, prompter, preset={"DEPLOY": "1"})

        assert values == {"BRANCH": "main", "DEPLOY": "true"}
        assert len(prompter.asked) == 1

    def test_unknown_preset_rejected(self) -> None:
        with pytest.raises(ParameterValueError, match="Unknown parameter"):
            collect_parameter_values([], DummyPrompter(), preset={"NOPE": "1"})

    def test_cancel_propagates(self) -> None:
        prompter = DummyPrompter([PromptCancelled()])

        with pytest.raises(PromptCancelled):
            collect_parameter_values([_param(ParameterKind.STRING, "BRANCH")], prompter)

    def test_parse_parameter_options(self) -> None:
        assert parse_parameter_options(["A=1", "B=x=y", "C="]) == {"A": "1", "B": "x=y", "C": ""}
        with pytest.raises(ParameterValueError):
            parse_parameter_options(["novalue"])
