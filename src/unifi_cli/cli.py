"""Typer-based command line interface for UniFi controller firewall automation."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.json import JSON

from unifi_cli import __version__
from unifi_cli.commands.firewall_groups import group_app
from unifi_cli.commands.firewall_rules import rule_app
from unifi_cli.config import Settings
from unifi_cli.connection import (
    BaseUrlOption,
    ControllerTypeOption,
    InsecureOption,
    PasswordOption,
    TimeoutOption,
    UsernameOption,
    connection_params,
)
from unifi_cli.errors import UnifiAuthFailure, UnifiError
from unifi_cli.logging_setup import setup_logging
from unifi_cli.sdk import create_controller

app = typer.Typer(
    no_args_is_help=True,
    help="Manage UniFi controller firewall rules and groups over the REST API.",
)
app.add_typer(rule_app, name="rule")
app.add_typer(group_app, name="group")
console = Console()


def _format_expiry(expires: float | None) -> str:
    if expires is None:
        return "session"
    return datetime.fromtimestamp(expires, tz=UTC).isoformat()


@app.callback()
def common_options(
    ctx: typer.Context,
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Optional .env file with UNIFI_CLI_* variables.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Load shared configuration for all commands."""

    setup_logging(verbose)
    ctx.obj = {"settings": Settings.from_env_file(env_file)}


@app.command("version")
def show_version() -> None:
    """Show the installed unifi-cli version."""

    console.print(f"unifi-cli {__version__}")


@app.command("test-connection")
def test_connection(
    ctx: typer.Context,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Validate controller credentials with a login/logout cycle."""

    settings: Settings = ctx.obj["settings"]
    params = connection_params(
        settings,
        base_url,
        username,
        password,
        controller_type=controller_type,
        timeout=timeout,
        insecure=insecure,
    )

    summary: dict[str, object] = {}
    try:
        controller = create_controller(params)
        controller.login(params.username, params.password)
        summary = {
            "base_url": controller.base_url,
            "controller_type": str(controller.controller_type),
            "authenticated": controller.is_authenticated,
            "session_expires": _format_expiry(controller.session_expires),
        }
        controller.logout()
    except UnifiAuthFailure as exc:
        console.print(f"Authentication failed: {exc}", style="bold red")
        raise typer.Exit(code=1) from exc
    except UnifiError as exc:
        console.print(f"API request failed: {exc}", style="bold red")
        raise typer.Exit(code=1) from exc

    console.print("Login successful")
    console.print(JSON.from_data(summary))
