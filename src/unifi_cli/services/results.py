"""Result types shared by the resource services."""

from __future__ import annotations

from dataclasses import dataclass, field


def _new_error_list() -> list[str]:
    return []


@dataclass(slots=True)
class BulkMutationResult:
    """Summary of a bulk create operation."""

    total: int
    created: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=_new_error_list)
