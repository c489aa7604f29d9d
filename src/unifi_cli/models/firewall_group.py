"""Models for firewall group records."""

from __future__ import annotations

import ipaddress
import re
from typing import Literal

from pydantic import Field, model_validator

from unifi_cli.models.common import ApiModel, ApiResponse, DataValidationError

GroupType = Literal["address-group", "ipv6-address-group", "port-group"]

_PORT_RE = re.compile(r"^(\d{1,5})(?:-(\d{1,5}))?$")


def _validate_port_member(member: str) -> None:
    match = _PORT_RE.match(member)
    if match is None:
        raise ValueError(f"Invalid port or port range: {member}")

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else start
    if not 1 <= start <= end <= 65535:
        raise ValueError(f"Invalid port or port range: {member}")


def _validate_address_member(member: str, version: int) -> None:
    parts = member.split("-")
    try:
        if len(parts) == 2:
            first = ipaddress.ip_address(parts[0].strip())
            last = ipaddress.ip_address(parts[1].strip())
            if first.version != version or last.version != version or first > last:
                raise ValueError
            return
        network = ipaddress.ip_network(member, strict=False)
    except ValueError as exc:
        raise ValueError(f"Invalid IPv{version} address, network or range: {member}") from exc

    if network.version != version:
        raise ValueError(f"Invalid IPv{version} address, network or range: {member}")


class FirewallGroupRecord(ApiModel):
    """A named set of addresses or ports as stored by the controller."""

    id: str | None = Field(default=None, alias="_id")
    site_id: str | None = None
    name: str | None = None
    group_type: str | None = None
    # IPv4 addresses, IPv6 addresses or ports, depending on group_type.
    group_members: list[str] | None = None


class FirewallGroup(FirewallGroupRecord):
    """A firewall group sent to the controller; members must match the group type."""

    group_type: GroupType | None = None

    @model_validator(mode="after")
    def validate_members(self) -> FirewallGroup:
        if self.group_type is None or not self.group_members:
            return self

        for member in self.group_members:
            if self.group_type == "port-group":
                _validate_port_member(member.strip())
            elif self.group_type == "address-group":
                _validate_address_member(member.strip(), version=4)
            else:
                _validate_address_member(member.strip(), version=6)
        return self


class FirewallGroupResponseData(FirewallGroupRecord, DataValidationError):
    """A data array item: a group on success, validation details on failure."""


class FirewallGroupResponse(ApiResponse[FirewallGroupResponseData]):
    """Response of a firewall group request."""
