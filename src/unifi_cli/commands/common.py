"""Helpers shared by the firewall command groups."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Annotated, Literal, NoReturn

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.json import JSON

from unifi_cli.config import Settings
from unifi_cli.connection import connection_params
from unifi_cli.errors import UnifiError
from unifi_cli.sdk import create_controller, open_site
from unifi_cli.services.results import BulkMutationResult
from unifi_cli.site import Site

console = Console()
API_EXCEPTIONS = (UnifiError,)

OutputFormat = Literal["table", "json"]
OutputOption = Annotated[
    OutputFormat,
    typer.Option("--output", help="Response format: table or json."),
]


@contextmanager
def site_session(
    ctx: typer.Context,
    base_url: str | None,
    username: str | None,
    password: str | None,
    controller_type: str | None,
    site: str | None,
    timeout: float | None,
    insecure: bool,
) -> Iterator[Site]:
    """Resolve connection options, log in and yield the configured site."""

    settings: Settings = ctx.obj["settings"]
    params = connection_params(
        settings,
        base_url,
        username,
        password,
        controller_type=controller_type,
        site=site,
        timeout=timeout,
        insecure=insecure,
    )
    controller = create_controller(params)
    with open_site(controller, params) as opened:
        yield opened


def dump_records(records: Sequence[BaseModel]) -> list[dict[str, object]]:
    return [record.model_dump(mode="json", by_alias=True, exclude_none=True) for record in records]


def render_json(payload: object) -> None:
    console.print(JSON.from_data(payload))


def render_bulk_summary(action: str, result: BulkMutationResult) -> None:
    console.print(
        f"{action} summary: total={result.total} created={result.created} failed={result.failed}"
    )
    for error in result.errors:
        console.print(f"- {error}", style="red")


def handle_api_exception(exc: Exception) -> NoReturn:
    console.print(f"API request failed: {exc}", style="bold red")
    raise typer.Exit(code=1) from exc


def fail(message: str, exc: Exception | None = None) -> NoReturn:
    console.print(message, style="bold red")
    if exc is not None:
        raise typer.Exit(code=1) from exc
    raise typer.Exit(code=1)
