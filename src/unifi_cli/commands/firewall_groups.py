"""Firewall group command group implementation."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from unifi_cli.commands.common import (
    API_EXCEPTIONS,
    OutputFormat,
    OutputOption,
    console,
    dump_records,
    fail,
    handle_api_exception,
    render_bulk_summary,
    render_json,
    site_session,
)
from unifi_cli.connection import (
    BaseUrlOption,
    ControllerTypeOption,
    InsecureOption,
    PasswordOption,
    SiteOption,
    TimeoutOption,
    UsernameOption,
)
from unifi_cli.io.bulk_input import BulkInputFormat, load_firewall_groups
from unifi_cli.models.firewall_group import (
    FirewallGroup,
    FirewallGroupRecord,
    FirewallGroupResponse,
    GroupType,
)
from unifi_cli.services.firewall_group_service import FirewallGroupService
from unifi_cli.services.results import BulkMutationResult

group_app = typer.Typer(no_args_is_help=True, help="Manage firewall groups of a site.")

GroupIdArgument = Annotated[str, typer.Argument(help="Firewall group ID.")]


def _render_groups(groups: list[FirewallGroupRecord], output: OutputFormat) -> None:
    if output == "json":
        render_json(dump_records(groups))
        return

    table = Table(title="Firewall Groups")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Members")

    for group in groups:
        table.add_row(
            group.id or "",
            group.name or "",
            group.group_type or "",
            ", ".join(group.group_members or []),
        )

    console.print(table)


def _report_mutation(group_label: str, action: str, response: FirewallGroupResponse) -> None:
    console.print(f"Firewall group '{group_label}' {action}")
    render_json(dump_records(response.data))


@group_app.command("list")
def group_list(
    ctx: typer.Context,
    output: OutputOption = "table",
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """List the firewall groups of the site."""

    groups: list[FirewallGroupRecord] = []
    try:
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            groups = list(FirewallGroupService(opened).list_groups().data)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)

    _render_groups(groups, output)


@group_app.command("get")
def group_get(
    ctx: typer.Context,
    group_id: GroupIdArgument,
    by_name: Annotated[
        bool,
        typer.Option("--by-name", help="Treat the argument as a group name instead of an ID."),
    ] = False,
    output: OutputOption = "table",
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Get a specific firewall group."""

    group: FirewallGroupRecord | None = None
    try:
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            service = FirewallGroupService(opened)
            group = service.find_by_name(group_id) if by_name else service.find_group(group_id)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)

    if group is None:
        fail(f"Firewall group '{group_id}' not found")

    _render_groups([group], output)


@group_app.command("create")
def group_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Group name.")],
    group_type: Annotated[
        GroupType,
        typer.Option("--type", help="address-group, ipv6-address-group or port-group."),
    ],
    members: Annotated[
        list[str],
        typer.Option("--member", help="Address, network, range or port (repeatable)."),
    ],
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Create a firewall group."""

    response = FirewallGroupResponse()
    try:
        group = FirewallGroup(name=name, group_type=group_type, group_members=members)
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            response = FirewallGroupService(opened).create_group(group)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)
    except ValueError as exc:
        fail(str(exc), exc)

    _report_mutation(name, "created", response)


@group_app.command("update")
def group_update(
    ctx: typer.Context,
    group_id: GroupIdArgument,
    name: Annotated[str | None, typer.Option("--name", help="New group name.")] = None,
    members: Annotated[
        list[str] | None,
        typer.Option("--member", help="Replacement member list (repeatable)."),
    ] = None,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Rename a firewall group or replace its members."""

    if name is None and not members:
        fail("Provide --name and/or --member.")

    response = FirewallGroupResponse()
    try:
        changes = FirewallGroup(name=name, group_members=members or None)
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            response = FirewallGroupService(opened).patch_group(group_id, changes)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)
    except ValueError as exc:
        fail(str(exc), exc)

    _report_mutation(group_id, "updated", response)


@group_app.command("delete")
def group_delete(
    ctx: typer.Context,
    group_id: GroupIdArgument,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Delete a firewall group."""

    try:
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            FirewallGroupService(opened).delete_group(group_id)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)

    console.print(f"Firewall group '{group_id}' deleted")


@group_app.command("create-many")
def group_create_many(
    ctx: typer.Context,
    file_path: Annotated[
        str,
        typer.Option("--file", "-f", help="Path to JSON/CSV file, or '-' for stdin."),
    ],
    input_format: Annotated[
        BulkInputFormat,
        typer.Option("--format", help="Input format: auto, json, csv."),
    ] = "auto",
    continue_on_error: Annotated[
        bool,
        typer.Option("--continue-on-error", help="Continue processing after a group error."),
    ] = False,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Create multiple firewall groups from file/stdin.

    Input examples:

    JSON list:
    [
      {
        "name": "web-ports",
        "group_type": "port-group",
        "group_members": ["80", "443", "8000-8080"]
      },
      {
        "name": "iot-devices",
        "group_type": "address-group",
        "group_members": ["192.0.2.0/28", "192.0.2.100"]
      }
    ]

    CSV (members separated by ';'):
    name,group_type,group_members
    web-ports,port-group,80;443;8000-8080
    iot-devices,address-group,192.0.2.0/28;192.0.2.100
    """

    result = BulkMutationResult(total=0)
    try:
        groups = load_firewall_groups(file_path, input_format=input_format)
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            result = FirewallGroupService(opened).create_many(
                groups, continue_on_error=continue_on_error
            )
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)
    except (ValueError, OSError) as exc:
        fail(f"Invalid input: {exc}", exc)

    render_bulk_summary("create-many", result)
    if result.failed > 0:
        raise typer.Exit(code=2)
