"""Configuration commands for Jenkins CLI.

Commands:
    jenkins config add     - Add (or replace) a Jenkins host
    jenkins config list    - List configured hosts
    jenkins config remove  - Remove one or more hosts
    jenkins config use     - Select the current host
    jenkins config show    - Show a host with its token masked
"""

from typing import Optional, Tuple, Union

import click

from jenkins_cli.cli.context import Context, pass_context, handle_error, handle_cancel
from jenkins_cli.cli.utils.config import Config, ConfigError, JenkinsHost
from jenkins_cli.cli.utils.auth import AuthManager
from jenkins_cli.cli.utils.prompts import PromptCancelled, get_prompter, not_empty
from jenkins_cli.cli.formatters import json_formatter, human_formatter
from jenkins_cli.jenkins_api_control import AuthenticationError, JenkinsAPIError


def validate_url(value: str) -> Union[bool, str]:
    """Accept only absolute http(s) URLs."""
    value = (value or "").strip()
    if not value:
        return "URL cannot be empty"
    if not value.startswith(("http://", "https://")):
        return "URL must start with http:// or https://"
    if len(value.split("://", 1)[1].strip("/")) == 0:
        return "URL must include a host"
    return True


def _require_hosts(config: Config) -> None:
    if not config.hosts:
        raise ConfigError("No Jenkins hosts configured. Use 'jenkins config add' to add one.")


@click.group()
def config() -> None:
    """Manage Jenkins hosts."""
    pass


@config.command("add")
@click.option("--name", help="Name for this Jenkins host")
@click.option("--url", help="Jenkins base URL (e.g. https://ci.example.com)")
@click.option("--user", help="Jenkins user name")
@click.option("--token", help="Jenkins API token")
@click.option("--no-verify", is_flag=True, help="Save without checking the connection")
@pass_context
def add(
    ctx: Context,
    name: Optional[str],
    url: Optional[str],
    user: Optional[str],
    token: Optional[str],
    no_verify: bool,
) -> None:
    """Add a Jenkins host.

    Prompts for any value not given as an option, checks that the
    credentials work, then saves the host. The first host added becomes
    the current one.

    \b
    Examples:
        jenkins config add
        jenkins config add --name prod --url https://ci.example.com --user alice --token ...
    """
    try:
        cfg = Config.load()
        prompter = get_prompter()

        name = name or prompter.text("Name for this Jenkins:", validate=not_empty("Name"))
        name = name.strip()
        if name in cfg.hosts and not prompter.confirm(
            f"Jenkins '{name}' already exists. Overwrite it?", default=False
        ):
            handle_cancel(ctx)

        url = url or prompter.text("Jenkins URL:", validate=validate_url)
        url_check = validate_url(url)
        if url_check is not True:
            handle_error(ctx, "ValidationError", f"Invalid URL '{url}': {url_check}")
        url = url.strip().rstrip("/")

        user = user or prompter.text("User name:", validate=not_empty("User name"))
        token = token or prompter.text("API token:", validate=not_empty("API token"), secret=True)

        host = JenkinsHost(host=url, user=user.strip(), token=token.strip())

        if not no_verify:
            if not ctx.json_output:
                click.echo(f"Verifying connection to {url}...")
            AuthManager.client_for_host(cfg, host).verify_connection()

        cfg.add_host(name, host)
        if not cfg.current:
            cfg.set_current(name)
        cfg.save()

        if ctx.json_output:
            click.echo(
                json_formatter.format_json(
                    {"name": name, "host": url, "user": host.user, "current": cfg.current == name}
                )
            )
        else:
            click.echo(human_formatter.format_success(f"Jenkins '{name}' saved to {cfg.path}"))
            if cfg.current == name:
                click.echo(f"Current Jenkins: {name}")

    except PromptCancelled as e:
        handle_cancel(ctx, str(e))
    except ConfigError as e:
        handle_error(ctx, "ConfigError", str(e))
    except AuthenticationError as e:
        handle_error(
            ctx,
            "AuthenticationError",
            str(e),
            hint="Check the user name and API token, or use --no-verify to save anyway.",
        )
    except JenkinsAPIError as e:
        handle_error(ctx, "APIError", f"Could not verify connection: {e}")


@config.command("list")
@pass_context
def list_hosts(ctx: Context) -> None:
    """List configured Jenkins hosts (current marked with *)."""
    try:
        cfg = Config.load()
        if ctx.json_output:
            click.echo(
                json_formatter.format_json(
                    [
                        {"name": name, "host": h.host, "user": h.user, "current": name == cfg.current}
                        for name, h in cfg.hosts.items()
                    ]
                )
            )
        else:
            click.echo(human_formatter.format_host_list(cfg.hosts, cfg.current))
    except ConfigError as e:
        handle_error(ctx, "ConfigError", str(e))


@config.command("remove")
@click.argument("names", nargs=-1)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@pass_context
def remove(ctx: Context, names: Tuple[str, ...], yes: bool) -> None:
    """Remove Jenkins hosts.

    Without NAMES, choose the hosts to remove from a list.
    """
    try:
        cfg = Config.load()
        _require_hosts(cfg)
        prompter = get_prompter()

        selected = list(names)
        if not selected:
            selected = prompter.multi_select(
                "Select Jenkins host(s) to remove:",
                [(f"{n} ({h.host})", n) for n, h in cfg.hosts.items()],
            )
            if not selected:
                if not ctx.json_output:
                    click.echo("Nothing selected.")
                return

        for name in selected:
            cfg.get_host(name)

        if not yes and not prompter.confirm(
            f"Remove {len(selected)} Jenkins host(s): {', '.join(selected)}?", default=False
        ):
            handle_cancel(ctx)

        for name in selected:
            cfg.remove_host(name)
        cfg.save()

        if ctx.json_output:
            click.echo(json_formatter.format_json({"removed": selected, "current": cfg.current}))
        else:
            click.echo(human_formatter.format_success(f"Removed: {', '.join(selected)}"))
            if cfg.current is None:
                click.echo(
                    human_formatter.format_warning(
                        "No Jenkins is selected now. Use 'jenkins config use' to pick one."
                    )
                )

    except PromptCancelled as e:
        handle_cancel(ctx, str(e))
    except ConfigError as e:
        handle_error(ctx, "ConfigError", str(e))


@config.command("use")
@click.argument("name", required=False)
@pass_context
def use(ctx: Context, name: Optional[str]) -> None:
    """Select the current Jenkins host."""
    try:
        cfg = Config.load()
        _require_hosts(cfg)

        if not name:
            name = get_prompter().select(
                "Select the Jenkins to use:",
                [(f"{n} ({h.host})", n) for n, h in cfg.hosts.items()],
                default=cfg.current if cfg.current in cfg.hosts else None,
            )

        cfg.set_current(name)
        cfg.save()

        if ctx.json_output:
            click.echo(json_formatter.format_json({"current": name}))
        else:
            click.echo(human_formatter.format_success(f"Now using Jenkins '{name}'"))

    except PromptCancelled as e:
        handle_cancel(ctx, str(e))
    except ConfigError as e:
        handle_error(ctx, "ConfigError", str(e))


@config.command("show")
@click.argument("name", required=False)
@pass_context
def show(ctx: Context, name: Optional[str]) -> None:
    """Show a Jenkins host (defaults to the current one)."""
    try:
        cfg = Config.load()
        host_name, host = cfg.select_host(name)

        if ctx.json_output:
            click.echo(
                json_formatter.format_json(
                    {
                        "name": host_name,
                        "host": host.host,
                        "user": host.user,
                        "token": human_formatter.mask_token(host.token),
                        "current": host_name == cfg.current,
                        "config_path": str(cfg.path),
                    }
                )
            )
        else:
            click.echo(human_formatter.format_host(host_name, host, host_name == cfg.current))
            click.echo(f"Config file: {cfg.path}")

    except ConfigError as e:
        handle_error(ctx, "ConfigError", str(e))
