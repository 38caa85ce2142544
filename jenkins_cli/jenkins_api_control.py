"""
Jenkins API Control - REST client for the Jenkins JSON API

This module provides functionality to:
- Verify credentials against a Jenkins host
- List root jobs and inspect jobs, folders and their parameters
- Trigger plain and parameterized builds
- Query queue items and build details
- Fetch console output, either in full or progressively from an offset

API Documentation: https://www.jenkins.io/doc/book/using/remote-access-api/
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
import urllib3


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class ParameterKind(Enum):
    """Kind of a job parameter definition."""
    STRING = "string"
    BOOLEAN = "boolean"
    CHOICE = "choice"
    OTHER = "other"


# Declared `type` field -> parameter kind
PARAMETER_KIND_BY_TYPE = {
    "StringParameterDefinition": ParameterKind.STRING,
    "TextParameterDefinition": ParameterKind.STRING,
    "BooleanParameterDefinition": ParameterKind.BOOLEAN,
    "ChoiceParameterDefinition": ParameterKind.CHOICE,
}


class JenkinsAPIError(Exception):
    """Jenkins API base exception."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(JenkinsAPIError):
    """Credentials were rejected (HTTP 401/403)."""
    pass


class JobNotFoundError(JenkinsAPIError):
    """Job path does not exist."""
    pass


class BuildNotFoundError(JenkinsAPIError):
    """Build number does not exist for the job."""
    pass


class QueueItemNotFoundError(JenkinsAPIError):
    """Queue item is gone, usually because its build already started."""
    pass


class JenkinsConnectionError(JenkinsAPIError):
    """Timeout or connection failure."""
    pass


class InvalidResponseError(JenkinsAPIError):
    """Response body did not have the expected shape."""
    pass


@dataclass
class JenkinsConfig:
    """Connection settings for a single Jenkins host."""
    base_url: str
    user: str
    token: str
    timeout: int = DEFAULT_TIMEOUT
    verify_ssl: bool = True


@dataclass
class SubJob:
    """Entry of a job list (root listing or folder children)."""
    name: str
    url: str = ""
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubJob":
        try:
            return cls(name=data["name"], url=data.get("url", ""), color=data.get("color"))
        except (KeyError, TypeError, AttributeError) as e:
            raise InvalidResponseError(f"Invalid job entry in response: {data!r}") from e


@dataclass
class BuildSummary:
    """Short build description embedded in job info (e.g. lastBuild)."""
    number: int
    url: str = ""
    result: Optional[str] = None
    building: Optional[bool] = None
    timestamp: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildSummary":
        try:
            return cls(
                number=int(data["number"]),
                url=data.get("url", ""),
                result=data.get("result"),
                building=data.get("building"),
                timestamp=data.get("timestamp"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InvalidResponseError(f"Invalid build entry in response: {data!r}") from e


@dataclass
class ParameterDefinition:
    """Build parameter declared by a job."""
    kind: ParameterKind
    name: str
    description: Optional[str] = None
    default: Any = None
    choices: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParameterDefinition":
        try:
            declared_type = data.get("type") or data.get("_class", "").rsplit(".", 1)[-1]
            default_value = data.get("defaultParameterValue") or {}
            return cls(
                kind=PARAMETER_KIND_BY_TYPE.get(declared_type, ParameterKind.OTHER),
                name=data["name"],
                description=data.get("description") or None,
                default=default_value.get("value"),
                choices=[str(c) for c in data.get("choices") or []],
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise InvalidResponseError(f"Invalid parameter definition in response: {data!r}") from e


def _parse_parameter_definitions(properties: Any) -> List[ParameterDefinition]:
    """Collect parameter definitions from a job's `property` array."""
    definitions: List[ParameterDefinition] = []
    for prop in properties or []:
        if not isinstance(prop, dict):
            continue
        for raw in prop.get("parameterDefinitions") or []:
            definitions.append(ParameterDefinition.from_dict(raw))
    return definitions


@dataclass
class JobInfo:
    """Job or folder details."""
    name: str
    url: str = ""
    color: Optional[str] = None
    buildable: Optional[bool] = None
    last_build: Optional[BuildSummary] = None
    jobs: List[SubJob] = field(default_factory=list)
    parameters: List[ParameterDefinition] = field(default_factory=list)

    @property
    def has_children(self) -> bool:
        return bool(self.jobs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobInfo":
        if not isinstance(data, dict):
            raise InvalidResponseError(f"Invalid job response: {data!r}")
        last_build = data.get("lastBuild")
        return cls(
            name=data.get("name") or data.get("displayName") or "",
            url=data.get("url", ""),
            color=data.get("color"),
            buildable=data.get("buildable"),
            last_build=BuildSummary.from_dict(last_build) if last_build else None,
            jobs=[SubJob.from_dict(j) for j in data.get("jobs") or []],
            parameters=_parse_parameter_definitions(data.get("property")),
        )


@dataclass
class BuildDetails:
    """Details of a single build."""
    number: int
    url: str
    result: Optional[str]
    building: bool
    timestamp: int
    duration: int
    full_display_name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildDetails":
        try:
            return cls(
                number=int(data["number"]),
                url=data.get("url", ""),
                result=data.get("result"),
                building=bool(data.get("building", False)),
                timestamp=int(data.get("timestamp") or 0),
                duration=int(data.get("duration") or 0),
                full_display_name=data.get("fullDisplayName") or f"#{data['number']}",
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InvalidResponseError(f"Invalid build response: {data!r}") from e


@dataclass
class QueueItem:
    """Queue entry created by a build trigger."""
    url: str
    build_number: Optional[int] = None
    build_url: Optional[str] = None
    cancelled: bool = False
    why: Optional[str] = None

    @classmethod
    def from_dict(cls, url: str, data: Dict[str, Any]) -> "QueueItem":
        if not isinstance(data, dict):
            raise InvalidResponseError(f"Invalid queue item response: {data!r}")
        executable = data.get("executable")
        number = None
        build_url = None
        if isinstance(executable, dict) and executable.get("number") is not None:
            try:
                number = int(executable["number"])
            except (TypeError, ValueError) as e:
                raise InvalidResponseError(f"Invalid build number in queue item: {executable!r}") from e
            build_url = executable.get("url")
        return cls(
            url=url,
            build_number=number,
            build_url=build_url,
            cancelled=bool(data.get("cancelled", False)),
            why=data.get("why"),
        )


@dataclass
class LogChunk:
    """One progressive console fetch."""
    text: str
    next_offset: int
    has_more: bool


class APIEndpoints:
    """Jenkins REST paths.

    Job paths use the folder convention `folder/job/child`; each is mounted
    under a leading `/job/`.
    """

    ROOT_API = "/api/json"
    ROOT_JOBS_TREE = "jobs[name,url,color]"

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def job_path(job_name: str) -> str:
        return "/job/" + quote(job_name.strip("/"), safe="/")

    def job(self, job_name: str) -> str:
        return f"{self.base_url}{self.job_path(job_name)}"

    def job_api(self, job_name: str) -> str:
        return f"{self.job(job_name)}/api/json"

    def build(self, job_name: str, build_number: int) -> str:
        return f"{self.job(job_name)}/{build_number}"

    def build_api(self, job_name: str, build_number: int) -> str:
        return f"{self.build(job_name, build_number)}/api/json"

    def console_text(self, job_name: str, build_number: int) -> str:
        return f"{self.build(job_name, build_number)}/consoleText"

    def progressive_text(self, job_name: str, build_number: int) -> str:
        return f"{self.build(job_name, build_number)}/logText/progressiveText"

    def trigger(self, job_name: str) -> str:
        return f"{self.job(job_name)}/build"

    def trigger_with_parameters(self, job_name: str) -> str:
        return f"{self.job(job_name)}/buildWithParameters"

    def root_api(self) -> str:
        return f"{self.base_url}{self.ROOT_API}"

    @staticmethod
    def queue_item_api(queue_url: str) -> str:
        return queue_url.rstrip("/") + "/api/json"


class JenkinsAPI:
    """
    Jenkins API Client
    """

    # Job tree fields used when only structure is needed
    JOB_TREE = "name,url,color,buildable,jobs[name,url,color]"
    STATUS_TREE = "name,url,color,buildable,lastBuild[number,url,result,building,timestamp],jobs[name,url,color]"
    PARAMETERS_TREE = (
        "name,url,buildable,"
        "property[parameterDefinitions[name,type,description,defaultParameterValue[value],choices]]"
    )
    LAST_BUILD_TREE = "lastBuild[number]"
    ERROR_BODY_PREVIEW_LIMIT = 2000

    def __init__(self, config: JenkinsConfig):
        """
        Initialize API client.

        Args:
            config: Connection settings for the host
        """
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.endpoints = APIEndpoints(self.base_url)

        if not config.verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        self.session = requests.Session()
        self.session.auth = (config.user, config.token)
        self.session.headers.update({"Accept": "application/json"})

    def _request(
        self,
        method: str,
        url: str,
        operation: str,
        not_found: Optional[JenkinsAPIError] = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Send a request and map failures onto the error taxonomy.

        Args:
            method: HTTP method
            url: Absolute URL
            operation: Human description used in error messages
            not_found: Error to raise on HTTP 404 instead of the generic one

        Returns:
            The successful response
        """
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
                **kwargs,
            )
        except requests.exceptions.Timeout as e:
            raise JenkinsConnectionError(
                f"Failed to {operation}: Jenkins did not respond within {self.config.timeout} seconds"
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise JenkinsConnectionError(
                f"Failed to {operation}: cannot reach Jenkins at {self.base_url} ({e})"
            ) from e
        except requests.exceptions.RequestException as e:
            raise JenkinsAPIError(f"Failed to {operation}: {e}") from e

        logger.debug("Request: %s %s", method, url)
        logger.debug("Response status: %s", response.status_code)

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Failed to {operation}: authentication failed (HTTP {response.status_code}). "
                "Check the user name and API token.",
                status_code=response.status_code,
            )
        if response.status_code == 404 and not_found is not None:
            raise not_found
        if not response.ok:
            body = (response.text or "").strip()
            if len(body) > self.ERROR_BODY_PREVIEW_LIMIT:
                body = body[:self.ERROR_BODY_PREVIEW_LIMIT] + "..."
            message = f"Failed to {operation}: HTTP {response.status_code} {response.reason or ''}".rstrip()
            if body:
                message += f"\n{body}"
            raise JenkinsAPIError(message, status_code=response.status_code)
        return response

    def _json(self, response: requests.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            preview = (response.text or "")[:self.ERROR_BODY_PREVIEW_LIMIT]
            raise InvalidResponseError(
                f"Failed to {operation}: invalid JSON response. Body preview: {preview or '<empty>'}"
            ) from e

    def verify_connection(self) -> None:
        """Check that the host is reachable and accepts the credentials."""
        self._request("GET", self.endpoints.root_api(), "connect to Jenkins")

    def get_root_jobs(self) -> List[SubJob]:
        """List the jobs at the top level of the instance."""
        operation = "list jobs"
        response = self._request(
            "GET",
            self.endpoints.root_api(),
            operation,
            params={"tree": APIEndpoints.ROOT_JOBS_TREE},
        )
        data = self._json(response, operation)
        if not isinstance(data, dict) or not isinstance(data.get("jobs", []), list):
            raise InvalidResponseError(f"Failed to {operation}: unexpected response shape")
        return [SubJob.from_dict(j) for j in data.get("jobs", [])]

    def get_job(self, job_name: str, tree: Optional[str] = None) -> JobInfo:
        """Fetch job details, optionally restricted to a field selection."""
        operation = f"fetch job '{job_name}'"
        params = {"tree": tree} if tree else None
        response = self._request(
            "GET",
            self.endpoints.job_api(job_name),
            operation,
            not_found=JobNotFoundError(f"Job '{job_name}' not found", status_code=404),
            params=params,
        )
        return JobInfo.from_dict(self._json(response, operation))

    def get_job_parameters(self, job_name: str) -> List[ParameterDefinition]:
        """Fetch the parameter definitions declared by a job."""
        return self.get_job(job_name, tree=self.PARAMETERS_TREE).parameters

    def get_last_build_number(self, job_name: str) -> Optional[int]:
        """Number of the job's most recent build, or None if it never ran."""
        job = self.get_job(job_name, tree=self.LAST_BUILD_TREE)
        return job.last_build.number if job.last_build else None

    def get_build(self, job_name: str, build_number: int) -> BuildDetails:
        """Fetch details of a single build."""
        operation = f"fetch build {job_name}#{build_number}"
        response = self._request(
            "GET",
            self.endpoints.build_api(job_name, build_number),
            operation,
            not_found=BuildNotFoundError(
                f"Build #{build_number} of job '{job_name}' not found", status_code=404
            ),
        )
        return BuildDetails.from_dict(self._json(response, operation))

    def get_console_log(self, job_name: str, build_number: int) -> str:
        """Fetch the full console output of a build."""
        response = self._request(
            "GET",
            self.endpoints.console_text(job_name, build_number),
            f"fetch console log for {job_name}#{build_number}",
            not_found=BuildNotFoundError(
                f"Build #{build_number} of job '{job_name}' not found", status_code=404
            ),
        )
        return response.text

    def get_progressive_log(self, job_name: str, build_number: int, start: int = 0) -> LogChunk:
        """Fetch console output starting at a byte offset.

        The server reports the new offset in `X-Text-Size` and sets
        `X-More-Data: true` while the build is still writing output.
        """
        operation = f"fetch console log for {job_name}#{build_number}"
        response = self._request(
            "GET",
            self.endpoints.progressive_text(job_name, build_number),
            operation,
            not_found=BuildNotFoundError(
                f"Build #{build_number} of job '{job_name}' not found", status_code=404
            ),
            params={"start": start},
        )
        size_header = response.headers.get("X-Text-Size")
        try:
            next_offset = int(size_header) if size_header is not None else start + len(response.content)
        except ValueError as e:
            raise InvalidResponseError(
                f"Failed to {operation}: invalid X-Text-Size header {size_header!r}"
            ) from e
        has_more = response.headers.get("X-More-Data", "").strip().lower() == "true"
        return LogChunk(text=response.text, next_offset=next_offset, has_more=has_more)

    def trigger_build(self, job_name: str) -> Optional[str]:
        """Trigger a build of a job without parameters.

        Returns:
            The queue item URL from the Location header, or None if absent
        """
        response = self._request(
            "POST",
            self.endpoints.trigger(job_name),
            f"trigger build for job '{job_name}'",
            not_found=JobNotFoundError(f"Job '{job_name}' not found", status_code=404),
        )
        return response.headers.get("Location")

    def trigger_build_with_parameters(self, job_name: str, parameters: Dict[str, str]) -> Optional[str]:
        """Trigger a parameterized build; parameters are sent as form fields.

        Returns:
            The queue item URL from the Location header, or None if absent
        """
        response = self._request(
            "POST",
            self.endpoints.trigger_with_parameters(job_name),
            f"trigger build for job '{job_name}'",
            not_found=JobNotFoundError(f"Job '{job_name}' not found", status_code=404),
            data=parameters,
        )
        return response.headers.get("Location")

    def get_queue_item(self, queue_url: str) -> QueueItem:
        """Fetch a queue item by the URL returned from a trigger."""
        operation = "fetch queue item"
        response = self._request(
            "GET",
            self.endpoints.queue_item_api(queue_url),
            operation,
            not_found=QueueItemNotFoundError(f"Queue item {queue_url} not found", status_code=404),
        )
        return QueueItem.from_dict(queue_url, self._json(response, operation))

    def get_job_url(self, job_name: str) -> str:
        return self.endpoints.job(job_name)

    def get_build_url(self, job_name: str, build_number: int) -> str:
        return self.endpoints.build(job_name, build_number)

