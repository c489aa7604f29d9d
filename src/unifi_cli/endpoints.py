"""Controller variants and the REST paths that differ between them."""

from __future__ import annotations

from enum import StrEnum

SESSION_COOKIE = "TOKEN"
CSRF_HEADER = "X-CSRF-Token"

_UDM_PRO_ALIASES = {"udm-pro", "udm_pro", "udmpro"}


class ControllerType(StrEnum):
    """Known controller variants."""

    DEFAULT = "default"
    UDM_PRO = "UDM-Pro"

    @classmethod
    def parse(cls, value: ControllerType | str | None) -> ControllerType:
        if isinstance(value, ControllerType):
            return value
        text = (value or "").strip().lower()
        if text in {"", "default"}:
            return cls.DEFAULT
        if text in _UDM_PRO_ALIASES:
            return cls.UDM_PRO
        raise ValueError(f"Unknown controller type: {value}")


def login_url(base_url: str, controller_type: ControllerType) -> str:
    if controller_type is ControllerType.UDM_PRO:
        return f"{base_url}/api/auth/login"
    return f"{base_url}/api/login"


def logout_url(base_url: str, controller_type: ControllerType) -> str:
    if controller_type is ControllerType.UDM_PRO:
        return f"{base_url}/api/auth/logout"
    return f"{base_url}/api/logout"


def site_api_url(base_url: str, controller_type: ControllerType, site_name: str) -> str:
    """Return the API root for site scoped requests."""

    if controller_type is ControllerType.UDM_PRO:
        return f"{base_url}/proxy/network/api/s/{site_name}"
    return f"{base_url}/api/s/{site_name}"
