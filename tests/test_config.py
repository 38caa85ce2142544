"""Tests for the YAML configuration store."""

from pathlib import Path

import pytest
import yaml

from jenkins_cli.cli.utils.config import (
    BareAlias,
    Config,
    ConfigError,
    FullAlias,
    JenkinsHost,
    parse_alias,
)


SAMPLE_CONFIG = """\
current: prod
jenkins:
  prod:
    host: https://ci.example.com
    user: alice
    token: s3cr3t-token-value
  staging:
    host: https://staging.example.com
    user: bob
    token: t0k3n
job_aliases:
  deploy: platform/job/deploy
  ship:
    job_name: platform/job/ship
    jenkins: staging
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("JENKINS_CLI_CONFIG", "JENKINS_CLI_TIMEOUT", "JENKINS_SKIP_SSL_VERIFY"):
        monkeypatch.delenv(var, raising=False)


def write_config(tmp_path: Path, content: str = SAMPLE_CONFIG) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoad:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        config = Config.load(tmp_path / "missing.yml")

        assert config.hosts == {}
        assert config.current is None
        assert config.job_aliases == {}
        assert config.timeout == 30
        assert config.skip_ssl_verify is False

    def test_load_hosts_and_aliases(self, tmp_path: Path) -> None:
        config = Config.load(write_config(tmp_path))

        assert config.current == "prod"
        assert config.hosts["staging"] == JenkinsHost("https://staging.example.com", "bob", "t0k3n")
        assert config.job_aliases["deploy"] == BareAlias("platform/job/deploy")
        assert config.job_aliases["ship"] == FullAlias("platform/job/ship", "staging")

    def test_env_config_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_config(tmp_path)
        monkeypatch.setenv("JENKINS_CLI_CONFIG", str(path))

        config = Config.load()

        assert config.path == path
        assert config.current == "prod"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "jenkins: [unclosed")

        with pytest.raises(ConfigError, match="Failed to parse config file"):
            Config.load(path)

    def test_host_missing_fields(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "jenkins:\n  prod:\n    host: https://x\n")

        with pytest.raises(ConfigError, match="missing: user, token"):
            Config.load(path)

    def test_timeout_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JENKINS_CLI_TIMEOUT", "5")
        monkeypatch.setenv("JENKINS_SKIP_SSL_VERIFY", "yes")

        config = Config.load(tmp_path / "missing.yml")

        assert config.timeout == 5
        assert config.skip_ssl_verify is True

    @pytest.mark.parametrize("value", ["abc", "0", "-3"])
    def test_invalid_timeout_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("JENKINS_CLI_TIMEOUT", value)

        with pytest.raises(ConfigError, match="JENKINS_CLI_TIMEOUT"):
            Config.load(tmp_path / "missing.yml")


class TestAliases:
    def test_parse_bare_and_full(self) -> None:
        assert parse_alias("a", "folder/job/x") == BareAlias("folder/job/x")
        assert parse_alias("b", {"job_name": "x", "jenkins": "prod"}) == FullAlias("x", "prod")
        assert parse_alias("c", {"job_name": "x"}) == BareAlias("x")

    @pytest.mark.parametrize("raw", [42, ["x"], {"jenkins": "prod"}, "  "])
    def test_parse_invalid(self, raw: object) -> None:
        with pytest.raises(ConfigError):
            parse_alias("bad", raw)

    def test_resolve_job_name(self, tmp_path: Path) -> None:
        config = Config.load(write_config(tmp_path))

        assert config.resolve_job_name("deploy") == ("platform/job/deploy", True, None)
        assert config.resolve_job_name("ship") == ("platform/job/ship", True, "staging")
        assert config.resolve_job_name("other/job/x") == ("other/job/x", False, None)

    def test_resolve_target_explicit_jenkins_wins(self, tmp_path: Path) -> None:
        config = Config.load(write_config(tmp_path))

        assert config.resolve_target("ship", None) == ("platform/job/ship", "staging")
        assert config.resolve_target("ship", "prod") == ("platform/job/ship", "prod")
        assert config.resolve_target(None, "prod") == (None, "prod")

    def test_remove_unknown_alias(self) -> None:
        with pytest.raises(ConfigError, match="not found"):
            Config().remove_job_alias("nope")


class TestHosts:
    def test_no_current_host(self) -> None:
        with pytest.raises(ConfigError, match="No Jenkins host is currently selected"):
            Config().get_current()

    def test_current_host_not_configured(self) -> None:
        config = Config(current="gone")

        with pytest.raises(ConfigError, match="'gone' is not configured"):
            config.get_current()

    def test_select_host(self, tmp_path: Path) -> None:
        config = Config.load(write_config(tmp_path))

        assert config.select_host()[0] == "prod"
        assert config.select_host("staging")[1].user == "bob"
        with pytest.raises(ConfigError, match="Jenkins 'nope' not found"):
            config.select_host("nope")

    def test_remove_current_clears_selection(self, tmp_path: Path) -> None:
        config = Config.load(write_config(tmp_path))

        config.remove_host("prod")

        assert config.current is None
        assert list(config.hosts) == ["staging"]

    def test_set_current_unknown(self) -> None:
        with pytest.raises(ConfigError):
            Config().set_current("nope")


class TestSave:
    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.yml"
        config = Config(path=path)
        config.add_host("prod", JenkinsHost("https://ci.example.com", "alice", "tok"))
        config.set_current("prod")
        config.add_job_alias("deploy", "platform/job/deploy")
        config.add_job_alias("ship", "platform/job/ship", "prod")

        config.save()
        reloaded = Config.load(path)

        assert reloaded.hosts == config.hosts
        assert reloaded.current == "prod"
        assert reloaded.job_aliases == config.job_aliases

    def test_saved_layout(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yml"
        config = Config(path=path)
        config.add_host("prod", JenkinsHost("https://ci.example.com", "alice", "tok"))
        config.add_job_alias("deploy", "platform/job/deploy")
        config.add_job_alias("ship", "platform/job/ship", "prod")

        config.save()
        data = yaml.safe_load(path.read_text(encoding="utf-8"))

        assert "current" not in data
        assert data["jenkins"]["prod"] == {"host": "https://ci.example.com", "user": "alice", "token": "tok"}
        assert data["job_aliases"]["deploy"] == "platform/job/deploy"
        assert data["job_aliases"]["ship"] == {"job_name": "platform/job/ship", "jenkins": "prod"}
