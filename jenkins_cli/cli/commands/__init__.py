"""CLI command modules."""

from jenkins_cli.cli.commands.config import config
from jenkins_cli.cli.commands.alias import alias
from jenkins_cli.cli.commands.build import build
from jenkins_cli.cli.commands.status import status
from jenkins_cli.cli.commands.logs import logs
from jenkins_cli.cli.commands.open import open_job
from jenkins_cli.cli.commands.completion import completion

__all__ = ["config", "alias", "build", "status", "logs", "open_job", "completion"]
