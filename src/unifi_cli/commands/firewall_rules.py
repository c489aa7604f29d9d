"""Firewall rule command group implementation."""

from __future__ import annotations

from typing import Annotated, Literal

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
from unifi_cli.io.bulk_input import BulkInputFormat, load_firewall_rules
from unifi_cli.models.firewall_rule import (
    FirewallRule,
    FirewallRuleRecord,
    FirewallRuleResponse,
    RuleAction,
    Ruleset,
)
from unifi_cli.services.firewall_rule_service import FirewallRuleService
from unifi_cli.services.results import BulkMutationResult

rule_app = typer.Typer(no_args_is_help=True, help="Manage firewall rules of a site.")

RuleIdArgument = Annotated[str, typer.Argument(help="Firewall rule ID.")]


def _describe_endpoint(
    group_ids: list[str] | None,
    network_id: str | None,
    address: str | None,
    port: str | None,
) -> str:
    if group_ids:
        return "groups:" + ",".join(group_ids)
    if network_id:
        return f"network:{network_id}"
    target = address or "any"
    return f"{target}:{port}" if port else target


def _render_rules(rules: list[FirewallRuleRecord], output: OutputFormat) -> None:
    if output == "json":
        render_json(dump_records(rules))
        return

    table = Table(title="Firewall Rules")
    table.add_column("ID")
    table.add_column("Index")
    table.add_column("Name")
    table.add_column("Ruleset")
    table.add_column("Action")
    table.add_column("Protocol")
    table.add_column("Source")
    table.add_column("Destination")
    table.add_column("Enabled")

    for rule in sorted(rules, key=lambda item: (item.ruleset or "", item.rule_index or 0)):
        table.add_row(
            rule.id or "",
            str(rule.rule_index) if rule.rule_index is not None else "",
            rule.name or "",
            rule.ruleset or "",
            rule.action or "",
            rule.protocol or "",
            _describe_endpoint(
                rule.src_firewallgroup_ids,
                rule.src_networkconf_id,
                rule.src_address,
                rule.src_port,
            ),
            _describe_endpoint(
                rule.dst_firewallgroup_ids,
                rule.dst_networkconf_id,
                rule.dst_address,
                rule.dst_port,
            ),
            "yes" if rule.enabled else "no",
        )

    console.print(table)


def _report_mutation(rule_label: str, action: str, response: FirewallRuleResponse) -> None:
    console.print(f"Firewall rule '{rule_label}' {action}")
    render_json(dump_records(response.data))


@rule_app.command("list")
def rule_list(
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
    """List the firewall rules of the site."""

    rules: list[FirewallRuleRecord] = []
    try:
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            rules = list(FirewallRuleService(opened).list_rules().data)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)

    _render_rules(rules, output)


@rule_app.command("get")
def rule_get(
    ctx: typer.Context,
    rule_id: RuleIdArgument,
    output: OutputOption = "table",
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Get a specific firewall rule."""

    rule: FirewallRuleRecord | None = None
    try:
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            rule = FirewallRuleService(opened).find_rule(rule_id)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)

    if rule is None:
        fail(f"Firewall rule '{rule_id}' not found")

    _render_rules([rule], output)


@rule_app.command("create")
def rule_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", help="Rule name.")],
    ruleset: Annotated[Ruleset, typer.Option("--ruleset", help="Ruleset, e.g. LAN_IN.")],
    rule_index: Annotated[
        int,
        typer.Option("--rule-index", min=0, help="Rule index; lower is evaluated first."),
    ],
    action: Annotated[
        RuleAction,
        typer.Option("--action", help="Rule action: accept, reject or drop."),
    ] = "drop",
    protocol: Annotated[str, typer.Option("--protocol", help="Protocol name or number.")] = "all",
    src_address: Annotated[str | None, typer.Option("--src-address")] = None,
    src_port: Annotated[str | None, typer.Option("--src-port")] = None,
    src_group: Annotated[
        list[str] | None,
        typer.Option("--src-group", help="Source firewall group ID (repeatable)."),
    ] = None,
    dst_address: Annotated[str | None, typer.Option("--dst-address")] = None,
    dst_port: Annotated[str | None, typer.Option("--dst-port")] = None,
    dst_group: Annotated[
        list[str] | None,
        typer.Option("--dst-group", help="Destination firewall group ID (repeatable)."),
    ] = None,
    enabled: Annotated[bool, typer.Option("--enabled/--disabled")] = True,
    log_matches: Annotated[
        bool,
        typer.Option("--logging/--no-logging", help="Emit a syslog entry on match."),
    ] = False,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Create a firewall rule."""

    response = FirewallRuleResponse()
    try:
        rule = FirewallRule(
            name=name,
            ruleset=ruleset,
            rule_index=rule_index,
            action=action,
            protocol=protocol,
            src_address=src_address,
            src_port=src_port,
            src_firewallgroup_ids=src_group or None,
            dst_address=dst_address,
            dst_port=dst_port,
            dst_firewallgroup_ids=dst_group or None,
            enabled=enabled,
            logging=log_matches,
        )
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            response = FirewallRuleService(opened).create_rule(rule)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)
    except ValueError as exc:
        fail(str(exc), exc)

    _report_mutation(name, "created", response)


@rule_app.command("update")
def rule_update(
    ctx: typer.Context,
    rule_id: RuleIdArgument,
    name: Annotated[str | None, typer.Option("--name")] = None,
    ruleset: Annotated[Ruleset | None, typer.Option("--ruleset")] = None,
    rule_index: Annotated[int | None, typer.Option("--rule-index", min=0)] = None,
    action: Annotated[RuleAction | None, typer.Option("--action")] = None,
    protocol: Annotated[str | None, typer.Option("--protocol")] = None,
    src_address: Annotated[str | None, typer.Option("--src-address")] = None,
    src_port: Annotated[str | None, typer.Option("--src-port")] = None,
    dst_address: Annotated[str | None, typer.Option("--dst-address")] = None,
    dst_port: Annotated[str | None, typer.Option("--dst-port")] = None,
    state: Annotated[
        Literal["enabled", "disabled"] | None,
        typer.Option("--state", help="Enable or disable the rule."),
    ] = None,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Update fields of an existing firewall rule."""

    changes = FirewallRule(
        name=name,
        ruleset=ruleset,
        rule_index=rule_index,
        action=action,
        protocol=protocol,
        src_address=src_address,
        src_port=src_port,
        dst_address=dst_address,
        dst_port=dst_port,
        enabled=None if state is None else state == "enabled",
    )
    if not changes.to_payload():
        fail("Provide at least one field to update.")

    response = FirewallRuleResponse()
    try:
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            response = FirewallRuleService(opened).patch_rule(rule_id, changes)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)
    except ValueError as exc:
        fail(str(exc), exc)

    _report_mutation(rule_id, "updated", response)


@rule_app.command("delete")
def rule_delete(
    ctx: typer.Context,
    rule_id: RuleIdArgument,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Delete a firewall rule."""

    try:
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            FirewallRuleService(opened).delete_rule(rule_id)
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)

    console.print(f"Firewall rule '{rule_id}' deleted")


@rule_app.command("create-many")
def rule_create_many(
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
        typer.Option("--continue-on-error", help="Continue processing after a rule error."),
    ] = False,
    base_url: BaseUrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    controller_type: ControllerTypeOption = None,
    site: SiteOption = None,
    timeout: TimeoutOption = None,
    insecure: InsecureOption = False,
) -> None:
    """Create multiple firewall rules from file/stdin.

    Input examples:

    JSON list:
    [
      {
        "name": "Block IoT to LAN",
        "ruleset": "LAN_IN",
        "rule_index": 2000,
        "action": "drop",
        "protocol": "all",
        "src_firewallgroup_ids": ["63f0c0ffee0000000000a001"],
        "dst_firewallgroup_ids": ["63f0c0ffee0000000000a002"]
      }
    ]

    CSV (list fields separated by ';'):
    name,ruleset,rule_index,action,protocol,dst_address,dst_port,enabled
    Allow DNS,LAN_IN,2001,accept,tcp_udp,192.0.2.53,53,true
    """

    result = BulkMutationResult(total=0)
    try:
        rules = load_firewall_rules(file_path, input_format=input_format)
        with site_session(
            ctx, base_url, username, password, controller_type, site, timeout, insecure
        ) as opened:
            result = FirewallRuleService(opened).create_many(
                rules, continue_on_error=continue_on_error
            )
    except API_EXCEPTIONS as exc:
        handle_api_exception(exc)
    except (ValueError, OSError) as exc:
        fail(f"Invalid input: {exc}", exc)

    render_bulk_summary("create-many", result)
    if result.failed > 0:
        raise typer.Exit(code=2)
