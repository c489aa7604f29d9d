"""Shared connection option resolution for CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

import typer

from unifi_cli.config import Settings
from unifi_cli.endpoints import ControllerType

BaseUrlOption = Annotated[
    str | None,
    typer.Option("--base-url", help="Controller URL, e.g. https://unifi.example.com."),
]
UsernameOption = Annotated[str | None, typer.Option(help="Controller username.")]
PasswordOption = Annotated[str | None, typer.Option(help="Controller password.")]
ControllerTypeOption = Annotated[
    str | None,
    typer.Option("--controller-type", help="Controller variant: default or UDM-Pro (udm-pro)."),
]
SiteOption = Annotated[str | None, typer.Option(help="Site name as defined in the controller.")]
TimeoutOption = Annotated[
    float | None,
    typer.Option(min=0, help="Request timeout in seconds (0 disables the timeout)."),
]
InsecureOption = Annotated[
    bool,
    typer.Option(help="Disable TLS certificate verification."),
]


@dataclass(frozen=True, slots=True)
class ConnectionParams:
    """Resolved connection parameters for the controller client."""

    base_url: str
    username: str
    password: str
    controller_type: ControllerType
    site: str
    timeout: float
    verify_ssl: bool
    auto_relogin: bool
    expiry_margin: float


def _resolve(value: str | None, default: str | None, option_name: str) -> str:
    if value:
        return value
    if default:
        return default
    raise typer.BadParameter(
        f"Provide --{option_name} or set UNIFI_CLI_{option_name.upper().replace('-', '_')}."
    )


def _resolve_controller_type(value: str | None, default: ControllerType) -> ControllerType:
    if not value:
        return default
    try:
        return ControllerType.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--controller-type") from exc


def connection_params(
    settings: Settings,
    base_url: str | None,
    username: str | None,
    password: str | None,
    controller_type: str | None = None,
    site: str | None = None,
    timeout: float | None = None,
    insecure: bool = False,
) -> ConnectionParams:
    """Resolve command options and settings into controller client kwargs."""

    return ConnectionParams(
        base_url=_resolve(base_url, settings.base_url, "base-url"),
        username=_resolve(username, settings.username, "username"),
        password=_resolve(password, settings.password, "password"),
        controller_type=_resolve_controller_type(controller_type, settings.controller_type),
        site=site or settings.site,
        timeout=timeout if timeout is not None else settings.timeout,
        verify_ssl=False if insecure else settings.verify_ssl,
        auto_relogin=settings.auto_relogin,
        expiry_margin=settings.expiry_margin,
    )
