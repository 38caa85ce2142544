"""CLI utility modules."""

from jenkins_cli.cli.utils.config import Config, ConfigError
from jenkins_cli.cli.utils.auth import AuthManager
from jenkins_cli.cli.utils.prompts import PromptCancelled
from jenkins_cli.jenkins_api_control import AuthenticationError

__all__ = ["Config", "ConfigError", "AuthManager", "AuthenticationError", "PromptCancelled"]
