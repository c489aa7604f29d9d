"""CRUD operations for firewall groups of a site."""

from __future__ import annotations

from unifi_cli.errors import UnifiError
from unifi_cli.models.firewall_group import (
    FirewallGroup,
    FirewallGroupRecord,
    FirewallGroupResponse,
)
from unifi_cli.services.results import BulkMutationResult
from unifi_cli.site import Site

GROUP_PATH = "rest/firewallgroup"


class FirewallGroupService:
    """Service wrapper for managing the firewall groups of a site."""

    def __init__(self, site: Site):
        self._site = site

    def create_group(self, group: FirewallGroup) -> FirewallGroupResponse:
        url = self._site.endpoint_url(GROUP_PATH)
        return self._site.controller.execute(
            "POST", url, group, response_model=FirewallGroupResponse
        )

    def list_groups(self) -> FirewallGroupResponse:
        url = self._site.endpoint_url(GROUP_PATH)
        return self._site.controller.execute("GET", url, response_model=FirewallGroupResponse)

    def get_group(self, group_id: str) -> FirewallGroupResponse:
        url = self._site.endpoint_url(GROUP_PATH, group_id)
        return self._site.controller.execute("GET", url, response_model=FirewallGroupResponse)

    def update_group(self, group_id: str, group: FirewallGroup) -> FirewallGroupResponse:
        url = self._site.endpoint_url(GROUP_PATH, group_id)
        return self._site.controller.execute(
            "PUT", url, group, response_model=FirewallGroupResponse
        )

    def delete_group(self, group_id: str) -> FirewallGroupResponse:
        url = self._site.endpoint_url(GROUP_PATH, group_id)
        return self._site.controller.execute("DELETE", url, response_model=FirewallGroupResponse)

    def find_group(self, group_id: str) -> FirewallGroupRecord | None:
        return self.get_group(group_id).first()

    def find_by_name(self, name: str) -> FirewallGroupRecord | None:
        for group in self.list_groups().data:
            if group.name == name:
                return group
        return None

    def patch_group(self, group_id: str, changes: FirewallGroup) -> FirewallGroupResponse:
        existing = self.find_group(group_id)
        if existing is None:
            raise ValueError(f"Firewall group '{group_id}' does not exist")

        record_fields = set(FirewallGroupRecord.model_fields)
        merged = existing.model_dump(exclude_none=True, include=record_fields)
        merged.update(changes.model_dump(exclude_none=True, exclude={"id", "site_id"}))
        return self.update_group(group_id, FirewallGroup.model_validate(merged))

    def create_many(
        self,
        groups: list[FirewallGroup],
        *,
        continue_on_error: bool,
    ) -> BulkMutationResult:
        result = BulkMutationResult(total=len(groups))

        for index, group in enumerate(groups, start=1):
            try:
                self.create_group(group)
                result.created += 1
            except (UnifiError, ValueError) as exc:
                result.failed += 1
                result.errors.append(f"{group.name or f'group #{index}'}: {exc}")
                if not continue_on_error:
                    break

        return result
