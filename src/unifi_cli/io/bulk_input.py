"""Bulk input parsing for firewall rule and group commands."""

from __future__ import annotations

import csv
import io
import json
import re
import sys
from pathlib import Path
from typing import Literal, cast

from unifi_cli.models.firewall_group import FirewallGroup
from unifi_cli.models.firewall_rule import FirewallRule

BulkInputFormat = Literal["auto", "json", "csv"]
Record = dict[str, object]

_LIST_SPLIT_RE = re.compile(r"[;,\s]+")

_RULE_LIST_FIELDS = {"src_firewallgroup_ids", "dst_firewallgroup_ids"}
_RULE_BOOL_FIELDS = {
    "enabled",
    "protocol_match_excepted",
    "state_new",
    "state_invalid",
    "state_established",
    "state_related",
    "logging",
}
_RULE_INT_FIELDS = {"rule_index"}


def load_firewall_rules(
    source: str,
    input_format: BulkInputFormat = "auto",
) -> list[FirewallRule]:
    """Load firewall rule records from a JSON/CSV file or stdin."""

    records = _load_records(source, input_format)
    return [FirewallRule.model_validate(_canonicalize_rule(record)) for record in records]


def load_firewall_groups(
    source: str,
    input_format: BulkInputFormat = "auto",
) -> list[FirewallGroup]:
    """Load firewall group records from a JSON/CSV file or stdin."""

    records = _load_records(source, input_format)
    return [FirewallGroup.model_validate(_canonicalize_group(record)) for record in records]


def _load_records(source: str, input_format: BulkInputFormat) -> list[Record]:
    text = _read_text(source)
    resolved_format = _resolve_format(source, text, input_format)

    if resolved_format == "json":
        records = _parse_json(text)
    else:
        records = _parse_csv(text)

    if not records:
        raise ValueError("Input data did not contain any records")
    return records


def _read_text(source: str) -> str:
    if source == "-":
        content = sys.stdin.read()
    else:
        content = Path(source).read_text(encoding="utf-8")

    if not content.strip():
        raise ValueError("Input is empty")
    return content


def _resolve_format(
    source: str,
    text: str,
    input_format: BulkInputFormat,
) -> Literal["json", "csv"]:
    if input_format == "json":
        return "json"
    if input_format == "csv":
        return "csv"

    if source != "-":
        suffix = Path(source).suffix.lower()
        if suffix == ".json":
            return "json"
        if suffix == ".csv":
            return "csv"

    stripped = text.lstrip()
    if stripped.startswith("[") or stripped.startswith("{"):
        return "json"
    return "csv"


def _parse_json(text: str) -> list[Record]:
    payload: object = json.loads(text)
    raw_records: list[object]

    if isinstance(payload, list):
        raw_records = cast(list[object], payload)
    else:
        payload_dict = _normalize_record(payload)
        entries = payload_dict.get("entries") if payload_dict is not None else None
        if not isinstance(entries, list):
            raise ValueError(
                "JSON input must be a list of records or an object with an 'entries' list"
            )
        raw_records = cast(list[object], entries)

    records: list[Record] = []
    for raw_record in raw_records:
        record = _normalize_record(raw_record)
        if record is None:
            raise ValueError("All JSON records must be objects with string keys")
        records.append(record)
    return records


def _parse_csv(text: str) -> list[Record]:
    reader: csv.DictReader[str] = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ValueError("CSV input must include a header row")

    records: list[Record] = []
    for row in reader:
        record: Record = {}
        for key, value in row.items():
            if key:
                record[key.strip()] = value
        records.append(record)
    return records


def _canonicalize_group(record: Record) -> Record:
    canonical: Record = {}

    name = _pick(record, ["name", "Name", "group_name"])
    if not _is_blank(name):
        canonical["name"] = str(name).strip()

    group_type = _pick(record, ["group_type", "type", "GroupType"])
    if not _is_blank(group_type):
        canonical["group_type"] = str(group_type).strip()

    members = _parse_optional_list(_pick(record, ["group_members", "members"]))
    if members is not None:
        canonical["group_members"] = members

    return canonical


def _canonicalize_rule(record: Record) -> Record:
    canonical: Record = {}

    for key, value in record.items():
        field_name = "id" if key == "_id" else key
        if field_name not in FirewallRule.model_fields or _is_blank(value):
            continue

        if field_name in _RULE_LIST_FIELDS:
            canonical[field_name] = _parse_optional_list(value)
        elif field_name in _RULE_BOOL_FIELDS:
            canonical[field_name] = _parse_optional_bool(value)
        elif field_name in _RULE_INT_FIELDS:
            canonical[field_name] = _parse_optional_int(value)
        elif isinstance(value, str):
            canonical[field_name] = value.strip()
        else:
            canonical[field_name] = value

    return canonical


def _pick(source: Record, keys: list[str]) -> object | None:
    for key in keys:
        if key in source:
            return source[key]
    return None


def _is_blank(value: object | None) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _parse_optional_list(value: object | None) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, list):
        return [str(item).strip() for item in cast(list[object], value) if str(item).strip()]

    text = str(value).strip()
    if text == "":
        return None
    return [item for item in _LIST_SPLIT_RE.split(text) if item]


def _parse_optional_int(value: object | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Unsupported integer value: {value}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text == "":
        return None
    return int(text)


def _parse_optional_bool(value: object | None) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value

    text = str(value).strip().lower()
    if text == "":
        return None
    if text in {"true", "1", "yes", "y", "enable", "enabled"}:
        return True
    if text in {"false", "0", "no", "n", "disable", "disabled"}:
        return False

    raise ValueError(f"Unsupported boolean value: {value}")


def _normalize_record(value: object) -> Record | None:
    if not isinstance(value, dict):
        return None

    normalized: Record = {}
    for key, item in cast(dict[object, object], value).items():
        if not isinstance(key, str):
            return None
        normalized[key] = item
    return normalized
