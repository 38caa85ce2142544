"""Configuration management for Jenkins CLI.

Named Jenkins hosts, the current host selection and job aliases live in a
single YAML file (default: ~/.config/jenkins-cli/config.yml):

    current: prod
    jenkins:
      prod:
        host: https://jenkins.example.com
        user: alice
        token: 11aa22bb
    job_aliases:
      deploy: platform/job/deploy
      ship:
        job_name: platform/job/ship
        jenkins: prod

Environment variables:
    JENKINS_CLI_CONFIG       Config file location
    JENKINS_CLI_TIMEOUT      Per-request timeout in seconds (default: 30)
    JENKINS_SKIP_SSL_VERIFY  Disable TLS verification (1/true/yes)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from jenkins_cli.jenkins_api_control import DEFAULT_TIMEOUT


CONFIG_ENV_VAR = "JENKINS_CLI_CONFIG"
TIMEOUT_ENV_VAR = "JENKINS_CLI_TIMEOUT"
SKIP_SSL_ENV_VAR = "JENKINS_SKIP_SSL_VERIFY"
DEFAULT_CONFIG_PATH = Path("~/.config/jenkins-cli/config.yml")


class ConfigError(Exception):
    """Configuration error - missing or invalid settings."""

    pass


def _parse_timeout(value: str) -> int:
    """Parse JENKINS_CLI_TIMEOUT.

    Raises:
        ConfigError: If value is not a positive integer
    """
    try:
        timeout = int(value)
    except ValueError:
        raise ConfigError(
            f"Invalid {TIMEOUT_ENV_VAR} value. It must be an integer number of seconds."
        )
    if timeout < 1:
        raise ConfigError(f"Invalid {TIMEOUT_ENV_VAR} value. It must be at least 1 second.")
    return timeout


def _parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


def default_config_path() -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(os.path.expanduser(env_path))
    return Path(os.path.expanduser(str(DEFAULT_CONFIG_PATH)))


@dataclass
class JenkinsHost:
    """Credentials for one Jenkins instance."""

    host: str
    user: str
    token: str

    def to_dict(self) -> dict:
        return {"host": self.host, "user": self.user, "token": self.token}

    @classmethod
    def from_dict(cls, name: str, data: Any) -> "JenkinsHost":
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid entry for Jenkins host '{name}': expected a mapping")
        missing = [k for k in ("host", "user", "token") if not data.get(k)]
        if missing:
            raise ConfigError(f"Jenkins host '{name}' is missing: {', '.join(missing)}")
        return cls(host=str(data["host"]), user=str(data["user"]), token=str(data["token"]))


@dataclass(frozen=True)
class BareAlias:
    """Alias stored as a plain job name; uses whichever host is selected."""

    job_name: str

    @property
    def jenkins(self) -> Optional[str]:
        return None

    def to_yaml(self) -> Any:
        return self.job_name


@dataclass(frozen=True)
class FullAlias:
    """Alias pinned to a specific Jenkins host."""

    job_name: str
    jenkins: str

    def to_yaml(self) -> Any:
        return {"job_name": self.job_name, "jenkins": self.jenkins}


JobAlias = Union[BareAlias, FullAlias]


def make_alias(job_name: str, jenkins: Optional[str] = None) -> JobAlias:
    return FullAlias(job_name, jenkins) if jenkins else BareAlias(job_name)


def parse_alias(name: str, raw: Any) -> JobAlias:
    """Decode an alias entry.

    A scalar string is a bare alias; a mapping with `job_name` (and an
    optional `jenkins`) is a full alias.
    """
    if isinstance(raw, str):
        if not raw.strip():
            raise ConfigError(f"Job alias '{name}' has an empty job name")
        return BareAlias(raw)
    if isinstance(raw, dict):
        job_name = raw.get("job_name")
        if not isinstance(job_name, str) or not job_name.strip():
            raise ConfigError(f"Job alias '{name}' is missing 'job_name'")
        jenkins = raw.get("jenkins")
        if jenkins is not None and not isinstance(jenkins, str):
            raise ConfigError(f"Job alias '{name}' has an invalid 'jenkins' value")
        return make_alias(job_name, jenkins)
    raise ConfigError(
        f"Invalid entry for job alias '{name}': expected a job name or a mapping with 'job_name'"
    )


@dataclass
class Config:
    """Jenkins CLI configuration.

    Loaded once per command and passed explicitly to whatever needs it.
    """

    hosts: Dict[str, JenkinsHost] = field(default_factory=dict)
    current: Optional[str] = None
    job_aliases: Dict[str, JobAlias] = field(default_factory=dict)
    path: Path = field(default_factory=default_config_path)

    # Client settings (environment only)
    timeout: int = DEFAULT_TIMEOUT
    skip_ssl_verify: bool = False

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Load configuration from the YAML file and environment.

        A missing file yields an empty configuration.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        config_path = Path(path) if path else default_config_path()
        config = cls(path=config_path)

        timeout_env = os.environ.get(TIMEOUT_ENV_VAR)
        if timeout_env:
            config.timeout = _parse_timeout(timeout_env)
        config.skip_ssl_verify = _parse_bool(os.environ.get(SKIP_SSL_ENV_VAR))

        if not config_path.exists():
            return config

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Failed to read config file {config_path}: {e}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file {config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Failed to parse config file {config_path}: expected a mapping")

        for name, host_data in (data.get("jenkins") or {}).items():
            config.hosts[str(name)] = JenkinsHost.from_dict(str(name), host_data)
        for name, raw in (data.get("job_aliases") or {}).items():
            config.job_aliases[str(name)] = parse_alias(str(name), raw)

        current = data.get("current")
        config.current = str(current) if current else None
        return config

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {}
        if self.current:
            data["current"] = self.current
        data["jenkins"] = {name: host.to_dict() for name, host in self.hosts.items()}
        if self.job_aliases:
            data["job_aliases"] = {
                name: alias.to_yaml() for name, alias in sorted(self.job_aliases.items())
            }
        return data

    def save(self) -> None:
        """Write configuration back to the YAML file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ConfigError(f"Failed to write config file {self.path}: {e}")

    # Hosts ---------------------------------------------------------------

    def add_host(self, name: str, host: JenkinsHost) -> None:
        """Add or replace a host."""
        self.hosts[name] = host

    def remove_host(self, name: str) -> None:
        if name not in self.hosts:
            raise ConfigError(f"Jenkins '{name}' not found")
        del self.hosts[name]
        if self.current == name:
            self.current = None

    def get_host(self, name: str) -> JenkinsHost:
        host = self.hosts.get(name)
        if host is None:
            raise ConfigError(f"Jenkins '{name}' not found")
        return host

    def set_current(self, name: str) -> None:
        if name not in self.hosts:
            raise ConfigError(f"Jenkins '{name}' not found")
        self.current = name

    def get_current(self) -> Tuple[str, JenkinsHost]:
        """Return the name and credentials of the current host."""
        if not self.current:
            raise ConfigError(
                "No Jenkins host is currently selected.\n"
                "Use 'jenkins config add' to add one or 'jenkins config use <name>' to select one."
            )
        if self.current not in self.hosts:
            raise ConfigError(
                f"Current Jenkins host '{self.current}' is not configured.\n"
                "Use 'jenkins config use <name>' to select another one."
            )
        return self.current, self.hosts[self.current]

    def select_host(self, name: Optional[str] = None) -> Tuple[str, JenkinsHost]:
        """Return the named host, or the current one when no name is given."""
        if name:
            return name, self.get_host(name)
        return self.get_current()

    # Aliases -------------------------------------------------------------

    def add_job_alias(self, alias: str, job_name: str, jenkins: Optional[str] = None) -> None:
        self.job_aliases[alias] = make_alias(job_name, jenkins)

    def remove_job_alias(self, alias: str) -> None:
        if alias not in self.job_aliases:
            raise ConfigError(f"Job alias '{alias}' not found")
        del self.job_aliases[alias]

    def resolve_job_name(self, alias_or_name: str) -> Tuple[str, bool, Optional[str]]:
        """Resolve an alias.

        Returns:
            (job path, whether it was an alias, host name pinned by the alias)
        """
        alias = self.job_aliases.get(alias_or_name)
        if alias is None:
            return alias_or_name, False, None
        return alias.job_name, True, alias.jenkins

    def resolve_target(
        self, job_name: Optional[str], jenkins_name: Optional[str]
    ) -> Tuple[Optional[str], Optional[str]]:
        """Apply alias resolution to a command's job argument and --jenkins option.

        An explicit --jenkins wins over the host pinned by an alias.
        """
        if not job_name:
            return None, jenkins_name
        resolved, _, alias_host = self.resolve_job_name(job_name)
        return resolved, jenkins_name or alias_host
