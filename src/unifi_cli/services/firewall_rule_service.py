"""CRUD operations for firewall rules of a site."""

from __future__ import annotations

from unifi_cli.errors import UnifiError
from unifi_cli.models.firewall_rule import (
    FirewallRule,
    FirewallRuleRecord,
    FirewallRuleResponse,
)
from unifi_cli.services.results import BulkMutationResult
from unifi_cli.site import Site

RULE_PATH = "rest/firewallrule"


class FirewallRuleService:
    """Service wrapper for managing the firewall rules of a site."""

    def __init__(self, site: Site):
        self._site = site

    def create_rule(self, rule: FirewallRule) -> FirewallRuleResponse:
        url = self._site.endpoint_url(RULE_PATH)
        return self._site.controller.execute(
            "POST", url, rule, response_model=FirewallRuleResponse
        )

    def list_rules(self) -> FirewallRuleResponse:
        url = self._site.endpoint_url(RULE_PATH)
        return self._site.controller.execute("GET", url, response_model=FirewallRuleResponse)

    def get_rule(self, rule_id: str) -> FirewallRuleResponse:
        """Fetch one rule; an unknown id may yield an empty data array."""

        url = self._site.endpoint_url(RULE_PATH, rule_id)
        return self._site.controller.execute("GET", url, response_model=FirewallRuleResponse)

    def update_rule(self, rule_id: str, rule: FirewallRule) -> FirewallRuleResponse:
        url = self._site.endpoint_url(RULE_PATH, rule_id)
        return self._site.controller.execute(
            "PUT", url, rule, response_model=FirewallRuleResponse
        )

    def delete_rule(self, rule_id: str) -> FirewallRuleResponse:
        url = self._site.endpoint_url(RULE_PATH, rule_id)
        return self._site.controller.execute("DELETE", url, response_model=FirewallRuleResponse)

    def find_rule(self, rule_id: str) -> FirewallRuleRecord | None:
        return self.get_rule(rule_id).first()

    def patch_rule(self, rule_id: str, changes: FirewallRule) -> FirewallRuleResponse:
        """Overlay the fields set in ``changes`` on the stored rule and save it."""

        existing = self.find_rule(rule_id)
        if existing is None:
            raise ValueError(f"Firewall rule '{rule_id}' does not exist")

        record_fields = set(FirewallRuleRecord.model_fields)
        merged = existing.model_dump(exclude_none=True, include=record_fields)
        merged.update(changes.model_dump(exclude_none=True, exclude={"id", "site_id"}))
        return self.update_rule(rule_id, FirewallRule.model_validate(merged))

    def create_many(
        self,
        rules: list[FirewallRule],
        *,
        continue_on_error: bool,
    ) -> BulkMutationResult:
        result = BulkMutationResult(total=len(rules))

        for index, rule in enumerate(rules, start=1):
            try:
                self.create_rule(rule)
                result.created += 1
            except (UnifiError, ValueError) as exc:
                result.failed += 1
                result.errors.append(f"{rule.name or f'rule #{index}'}: {exc}")
                if not continue_on_error:
                    break

        return result
