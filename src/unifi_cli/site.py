"""Site scoped endpoint construction."""

from __future__ import annotations

from unifi_cli.controller_client import ControllerClientProtocol


class Site:
    """A named site of a controller; used to build site specific endpoint URLs."""

    def __init__(self, name: str, controller: ControllerClientProtocol):
        self.name = name
        self.controller = controller

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        if not name:
            raise ValueError("Site name can not be empty")
        self._name = name

    @property
    def controller(self) -> ControllerClientProtocol:
        return self._controller

    @controller.setter
    def controller(self, controller: ControllerClientProtocol) -> None:
        if controller is None:
            raise ValueError("Site controller is required")
        self._controller = controller

    def endpoint_url(self, path: str, resource_id: str | None = None) -> str:
        """Return ``<site api root>/<path>[/<resource_id>]``."""

        endpoint = f"{self._controller.site_api_url(self._name)}/{path}"
        if resource_id:
            return f"{endpoint}/{resource_id}"
        return endpoint

    def __repr__(self) -> str:
        return f"Site(name={self._name!r})"
