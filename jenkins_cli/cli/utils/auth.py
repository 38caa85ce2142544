"""Authentication management for Jenkins CLI.

Provides API clients authenticated for the selected Jenkins host.
"""

from typing import Optional

from jenkins_cli.jenkins_api_control import JenkinsAPI, JenkinsConfig, AuthenticationError
from jenkins_cli.cli.utils.config import Config, ConfigError, JenkinsHost

__all__ = ["AuthManager", "AuthenticationError", "ConfigError"]


class AuthManager:
    """Builds API client instances from configured hosts.

    Jenkins uses basic auth with a user name and API token, so no session
    token exchange is needed; every client is created fresh for the command.
    """

    @classmethod
    def client_for_host(cls, config: Config, host: JenkinsHost) -> JenkinsAPI:
        """Create a client for explicit credentials (e.g. before they are saved)."""
        return JenkinsAPI(
            JenkinsConfig(
                base_url=host.host,
                user=host.user,
                token=host.token,
                timeout=config.timeout,
                verify_ssl=not config.skip_ssl_verify,
            )
        )

    @classmethod
    def get_api(cls, config: Config, jenkins_name: Optional[str] = None) -> JenkinsAPI:
        """Get an API client for the named host, or the current one.

        Args:
            config: Loaded configuration
            jenkins_name: Host name from --jenkins or an alias

        Raises:
            ConfigError: If no host is selected or the name is unknown
        """
        _, host = config.select_host(jenkins_name)
        return cls.client_for_host(config, host)
