"""Build triggering and queue tracking.

Triggering a build returns a queue item URL (the `Location` header). Once
Jenkins schedules the item, the queue item carries the build number. Items
can vanish from the queue before we see them resolve; in that case the
job's last build is used instead.
"""

import logging
import time
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from jenkins_cli.jenkins_api_control import (
    JenkinsAPI,
    JenkinsAPIError,
    ParameterDefinition,
    ParameterKind,
    QueueItemNotFoundError,
)
from jenkins_cli.cli.utils.prompts import Prompter


logger = logging.getLogger(__name__)

QUEUE_POLL_INTERVAL = 1.0
QUEUE_POLL_ATTEMPTS = 30

TRUE_VALUES = {"true", "yes", "y", "1", "on"}
FALSE_VALUES = {"false", "no", "n", "0", "off", ""}


class ParameterValueError(ValueError):
    """A supplied parameter value is invalid for its definition."""
    pass


def default_value(definition: ParameterDefinition) -> Optional[str]:
    """Default of a parameter as the string that would be submitted.

    Returns None when the job declares no default or the default's type is
    not representable.
    """
    value = definition.default
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


def coerce_value(definition: ParameterDefinition, value: object) -> str:
    """Convert a collected value into its submitted form.

    Raises:
        ParameterValueError: For unrecognised booleans or unknown choices
    """
    kind = definition.kind
    if kind is ParameterKind.BOOLEAN:
        if isinstance(value, bool):
            return "true" if value else "false"
        text = str(value).strip().lower()
        if text in TRUE_VALUES:
            return "true"
        if text in FALSE_VALUES:
            return "false"
        raise ParameterValueError(
            f"Parameter '{definition.name}' expects true or false, got {value!r}"
        )
    if kind is ParameterKind.CHOICE:
        text = str(value)
        if definition.choices and text not in definition.choices:
            raise ParameterValueError(
                f"Parameter '{definition.name}' must be one of: {', '.join(definition.choices)}"
            )
        return text
    if kind in (ParameterKind.STRING, ParameterKind.OTHER):
        return str(value)
    raise AssertionError(f"Unhandled parameter kind: {kind}")


def _prompt_label(definition: ParameterDefinition) -> str:
    if definition.description:
        return f"{definition.name} ({definition.description}):"
    return f"{definition.name}:"


def _prompt_value(definition: ParameterDefinition, prompter: Prompter) -> str:
    label = _prompt_label(definition)
    default = default_value(definition)
    kind = definition.kind

    if kind is ParameterKind.BOOLEAN:
        return coerce_value(definition, prompter.confirm(label, default=default == "true"))
    if kind is ParameterKind.CHOICE:
        if not definition.choices:
            return prompter.text(label, default=default)
        selected_default = default if default in definition.choices else None
        return coerce_value(
            definition, prompter.select(label, definition.choices, default=selected_default)
        )
    if kind in (ParameterKind.STRING, ParameterKind.OTHER):
        return coerce_value(definition, prompter.text(label, default=default))
    raise AssertionError(f"Unhandled parameter kind: {kind}")


def parse_parameter_options(options: Iterable[str]) -> Dict[str, str]:
    """Parse repeated KEY=VALUE command-line options."""
    values: Dict[str, str] = {}
    for option in options:
        if "=" not in option:
            raise ParameterValueError(f"Invalid parameter '{option}'. Use KEY=VALUE.")
        key, value = option.split("=", 1)
        key = key.strip()
        if not key:
            raise ParameterValueError(f"Invalid parameter '{option}'. Use KEY=VALUE.")
        values[key] = value
    return values


def collect_parameter_values(
    definitions: List[ParameterDefinition],
    prompter: Prompter,
    preset: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Collect one value per declared parameter.

    Values given in `preset` are coerced and used without prompting; every
    other parameter is prompted for according to its kind.

    Raises:
        ParameterValueError: If a preset names an undeclared parameter or is invalid
        PromptCancelled: If the user cancels a prompt
    """
    preset = dict(preset or {})
    declared = {d.name for d in definitions}
    unknown = sorted(set(preset) - declared)
    if unknown:
        raise ParameterValueError(
            f"Unknown parameter(s): {', '.join(unknown)}. "
            f"Declared parameters: {', '.join(sorted(declared)) or '(none)'}"
        )

    values: Dict[str, str] = {}
    for definition in definitions:
        if definition.name in preset:
            values[definition.name] = coerce_value(definition, preset[definition.name])
        else:
            values[definition.name] = _prompt_value(definition, prompter)
    return values


def trigger_build(
    api: JenkinsAPI,
    job_name: str,
    parameters: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Submit a build.

    Jobs with parameters go through the parameterized endpoint with the
    values as form fields; others through the plain build endpoint.

    Returns:
        The queue item URL, or None if the server did not send a Location header
    """
    if parameters:
        logger.debug("Triggering %s with parameters: %s", job_name, ", ".join(sorted(parameters)))
        queue_url = api.trigger_build_with_parameters(job_name, dict(parameters))
    else:
        logger.debug("Triggering %s", job_name)
        queue_url = api.trigger_build(job_name)
    if not queue_url:
        logger.debug("No queue location returned for %s", job_name)
    return queue_url


def _last_build_fallback(
    api: JenkinsAPI, job_name: str, previous_build: Optional[int]
) -> Optional[int]:
    try:
        last_build = api.get_last_build_number(job_name)
    except JenkinsAPIError as e:
        logger.debug("Could not read last build of %s: %s", job_name, e)
        return None
    if last_build is None:
        return None
    if previous_build is not None and last_build <= previous_build:
        return None
    logger.warning(
        "Queue item for %s is gone; assuming the build started as #%s",
        job_name,
        last_build,
    )
    return last_build


def wait_for_build_number(
    api: JenkinsAPI,
    job_name: str,
    queue_url: str,
    previous_build: Optional[int] = None,
    interval: float = QUEUE_POLL_INTERVAL,
    max_attempts: int = QUEUE_POLL_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[int]:
    """Poll a queue item until it is assigned a build number.

    When the queue item is no longer found, the job's last build number is
    used if it is newer than `previous_build` (the last build seen before
    triggering, when known).

    Returns:
        The build number, or None if it could not be determined within
        `max_attempts` polls or the queue item was cancelled
    """
    for attempt in range(1, max_attempts + 1):
        try:
            item = api.get_queue_item(queue_url)
        except QueueItemNotFoundError:
            build_number = _last_build_fallback(api, job_name, previous_build)
            if build_number is not None:
                return build_number
        else:
            if item.build_number is not None:
                return item.build_number
            if item.cancelled:
                logger.warning("Queue item %s was cancelled", queue_url)
                return None
            logger.debug("Attempt %d/%d: still queued (%s)", attempt, max_attempts, item.why or "waiting")

        if attempt < max_attempts:
            sleep(interval)

    logger.debug("Gave up waiting for %s after %d attempts", queue_url, max_attempts)
    return None
