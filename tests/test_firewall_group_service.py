from __future__ import annotations

import pytest

from conftest import FakeUnifiAdapter
from unifi_cli.controller import Controller
from unifi_cli.errors import UnifiAPIError
from unifi_cli.models.firewall_group import FirewallGroup
from unifi_cli.services.firewall_group_service import FirewallGroupService


@pytest.fixture
def service(logged_in: Controller) -> FirewallGroupService:
    return FirewallGroupService(logged_in.default_site())


def test_create_group_returns_stored_record(
    service: FirewallGroupService, fake_unifi: FakeUnifiAdapter
) -> None:
    response = service.create_group(
        FirewallGroup(name="web", group_type="port-group", group_members=["80", "443"])
    )

    created = response.first()
    assert created is not None
    assert created.id in fake_unifi.groups
    assert created.site_id == "site-default"
    assert fake_unifi.groups[created.id or ""]["group_members"] == ["80", "443"]


def test_list_and_get_groups(service: FirewallGroupService, fake_unifi: FakeUnifiAdapter) -> None:
    web_id = fake_unifi.seed_group("web", "port-group", ["443"])
    fake_unifi.seed_group("lan", "address-group", ["192.0.2.0/24"])

    listed = service.list_groups()
    fetched = service.get_group(web_id)

    assert [group.name for group in listed.data] == ["web", "lan"]
    assert len(fetched.data) == 1
    assert fetched.data[0].group_members == ["443"]


def test_find_group_returns_none_for_unknown_id(service: FirewallGroupService) -> None:
    assert service.find_group("63f0c0ffee99999999999999") is None


def test_find_by_name(service: FirewallGroupService, fake_unifi: FakeUnifiAdapter) -> None:
    lan_id = fake_unifi.seed_group("lan", "address-group", ["192.0.2.0/24"])

    found = service.find_by_name("lan")

    assert found is not None
    assert found.id == lan_id
    assert service.find_by_name("missing") is None


def test_update_group_replaces_record(
    service: FirewallGroupService, fake_unifi: FakeUnifiAdapter
) -> None:
    group_id = fake_unifi.seed_group("web", "port-group", ["443"])

    service.update_group(
        group_id, FirewallGroup(name="web", group_type="port-group", group_members=["8443"])
    )

    assert fake_unifi.groups[group_id]["group_members"] == ["8443"]


def test_patch_group_keeps_unchanged_fields(
    service: FirewallGroupService, fake_unifi: FakeUnifiAdapter
) -> None:
    group_id = fake_unifi.seed_group("web", "port-group", ["443"])

    response = service.patch_group(group_id, FirewallGroup(name="https"))

    stored = fake_unifi.groups[group_id]
    assert stored["name"] == "https"
    assert stored["group_type"] == "port-group"
    assert stored["group_members"] == ["443"]
    assert response.data[0].name == "https"


def test_patch_group_validates_members_against_stored_type(
    service: FirewallGroupService, fake_unifi: FakeUnifiAdapter
) -> None:
    group_id = fake_unifi.seed_group("web", "port-group", ["443"])

    with pytest.raises(ValueError):
        service.patch_group(group_id, FirewallGroup(group_members=["192.0.2.1"]))
    assert fake_unifi.groups[group_id]["group_members"] == ["443"]


def test_patch_unknown_group_raises(service: FirewallGroupService) -> None:
    with pytest.raises(ValueError, match="does not exist"):
        service.patch_group("63f0c0ffee99999999999999", FirewallGroup(name="x"))


def test_delete_group(service: FirewallGroupService, fake_unifi: FakeUnifiAdapter) -> None:
    group_id = fake_unifi.seed_group("web", "port-group", ["443"])

    service.delete_group(group_id)

    assert group_id not in fake_unifi.groups


def test_delete_unknown_group_raises_api_error(service: FirewallGroupService) -> None:
    with pytest.raises(UnifiAPIError) as excinfo:
        service.delete_group("63f0c0ffee99999999999999")

    assert excinfo.value.status_code == 400
    assert excinfo.value.meta is not None
    assert excinfo.value.meta.msg == "api.err.IdInvalid"


def test_create_many_stops_on_first_error(
    service: FirewallGroupService, fake_unifi: FakeUnifiAdapter
) -> None:
    fake_unifi.seed_group("dup", "port-group", ["22"])
    groups = [
        FirewallGroup(name="dup", group_type="port-group", group_members=["23"]),
        FirewallGroup(name="ok", group_type="port-group", group_members=["24"]),
    ]

    result = service.create_many(groups, continue_on_error=False)

    assert result.total == 2
    assert result.created == 0
    assert result.failed == 1
    assert "dup:" in result.errors[0]
    assert "FirewallGroupExisted" in result.errors[0]
    assert len(fake_unifi.groups) == 1


def test_create_many_continues_on_error(
    service: FirewallGroupService, fake_unifi: FakeUnifiAdapter
) -> None:
    fake_unifi.seed_group("dup", "port-group", ["22"])
    groups = [
        FirewallGroup(name="dup", group_type="port-group", group_members=["23"]),
        FirewallGroup(name="ok", group_type="port-group", group_members=["24"]),
    ]

    result = service.create_many(groups, continue_on_error=True)

    assert result.created == 1
    assert result.failed == 1
    assert sorted(group["name"] for group in fake_unifi.groups.values()) == ["dup", "ok"]


def test_list_groups_decodes_records_the_client_would_not_send(
    service: FirewallGroupService, fake_unifi: FakeUnifiAdapter
) -> None:
    fake_unifi.seed_group("web", "port-group", ["443"])
    legacy_id = fake_unifi.seed_group("legacy", "port-group", ["0"])
    fake_unifi.seed_group("macs", "mac-group", ["00:11:22:33:44:55"])

    listed = service.list_groups()

    assert [group.name for group in listed.data] == ["web", "legacy", "macs"]
    assert listed.data[2].group_type == "mac-group"
    found = service.find_by_name("legacy")
    assert found is not None
    assert found.id == legacy_id
