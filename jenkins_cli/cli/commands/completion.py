"""Shell completion command for Jenkins CLI."""

import click
from click.shell_completion import get_completion_class


PROG_NAME = "jenkins"
COMPLETE_VAR = "_JENKINS_COMPLETE"

INSTALL_HINTS = {
    "bash": "Add to ~/.bashrc:\n    eval \"$(jenkins completion bash)\"",
    "zsh": "Add to ~/.zshrc:\n    eval \"$(jenkins completion zsh)\"",
    "fish": "Run:\n    jenkins completion fish > ~/.config/fish/completions/jenkins.fish",
}


@click.command("completion")
@click.argument("shell", type=click.Choice(sorted(INSTALL_HINTS)))
@click.pass_context
def completion(click_ctx: click.Context, shell: str) -> None:
    """Print the shell completion script for SHELL.

    The script goes to stdout and installation hints to stderr, so the
    output can be redirected or eval'd directly.

    Only bash, zsh and fish are available; click has no PowerShell
    completion support.
    """
    completion_class = get_completion_class(shell)
    root = click_ctx.find_root().command
    script = completion_class(root, {}, PROG_NAME, COMPLETE_VAR).source()
    click.echo(script)
    click.echo(INSTALL_HINTS[shell], err=True)
