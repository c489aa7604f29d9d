"""Models for firewall rule records."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from unifi_cli.models.common import ApiModel, ApiResponse, DataValidationError

# <NETWORK>_IN: traffic from the network destined for other networks.
# <NETWORK>_OUT: traffic from other networks destined for the network.
# <NETWORK>_LOCAL: traffic from the network destined for the gateway itself.
Ruleset = Literal[
    "WAN_IN",
    "WAN_OUT",
    "WAN_LOCAL",
    "LAN_IN",
    "LAN_OUT",
    "LAN_LOCAL",
    "GUEST_IN",
    "GUEST_OUT",
    "GUEST_LOCAL",
    "WANv6_IN",
    "WANv6_OUT",
    "WANv6_LOCAL",
    "LANv6_IN",
    "LANv6_OUT",
    "LANv6_LOCAL",
    "GUESTv6_IN",
    "GUESTv6_OUT",
    "GUESTv6_LOCAL",
]
RuleAction = Literal["accept", "reject", "drop"]
NetworkConfType = Literal["ADDRv4", "NETv4"]
SettingPreference = Literal["auto", "manual"]
IpsecMatch = Literal["", "match-ipsec", "match-none"]


class FirewallRuleRecord(ApiModel):
    """A firewall rule as stored by the controller.

    Source and destination are matched either by firewall group ids, by a
    network (``*_networkconf_id`` plus ``*_networkconf_type``) or by a plain
    address and port list. Ports are comma separated and may contain ranges.
    If all ``state_*`` flags are false, connection state is not matched.

    Option fields are plain strings here so records written by other clients
    or newer controller versions still decode.
    """

    id: str | None = Field(default=None, alias="_id")
    site_id: str | None = None
    # Lower indexes are evaluated first.
    rule_index: int | None = None
    enabled: bool | None = None
    ruleset: str | None = None
    name: str | None = None
    action: str | None = None
    # Protocol name (tcp, udp, tcp_udp, icmp, all, ...) or number.
    protocol: str | None = None
    protocol_v6: str | None = None
    protocol_match_excepted: bool | None = None
    src_firewallgroup_ids: list[str] | None = None
    src_networkconf_id: str | None = None
    src_networkconf_type: str | None = None
    src_address: str | None = None
    src_port: str | None = None
    src_mac_address: str | None = None
    dst_firewallgroup_ids: list[str] | None = None
    dst_networkconf_id: str | None = None
    dst_networkconf_type: str | None = None
    dst_address: str | None = None
    dst_port: str | None = None
    setting_preference: str | None = None
    state_new: bool | None = None
    state_invalid: bool | None = None
    state_established: bool | None = None
    state_related: bool | None = None
    ipsec: str | None = None
    # Emit a syslog entry when the rule matches.
    logging: bool | None = None
    icmp_typename: str | None = None
    icmpv6_typename: str | None = None


class FirewallRule(FirewallRuleRecord):
    """A firewall rule sent to the controller, restricted to the known option sets."""

    ruleset: Ruleset | None = None
    action: RuleAction | None = None
    src_networkconf_type: NetworkConfType | None = None
    dst_networkconf_type: NetworkConfType | None = None
    setting_preference: SettingPreference | None = None
    ipsec: IpsecMatch | None = None


class FirewallRuleResponseData(FirewallRuleRecord, DataValidationError):
    """A data array item: a rule on success, validation details on failure."""


class FirewallRuleResponse(ApiResponse[FirewallRuleResponseData]):
    """Response of a firewall rule request."""
