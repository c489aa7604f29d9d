"""Factory helpers wiring CLI connection parameters to the controller client."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from unifi_cli.connection import ConnectionParams
from unifi_cli.controller import Controller
from unifi_cli.errors import UnifiAPIError, UnifiTransportError
from unifi_cli.site import Site

logger = logging.getLogger(__name__)


def create_controller(connection: ConnectionParams) -> Controller:
    """Create a configured, not yet authenticated controller client."""

    return Controller(
        connection.base_url,
        connection.controller_type,
        timeout=connection.timeout,
        verify_tls=connection.verify_ssl,
        auto_relogin=connection.auto_relogin,
        expiry_margin=connection.expiry_margin,
    )


@contextmanager
def open_site(controller: Controller, connection: ConnectionParams) -> Iterator[Site]:
    """Log in, yield the configured site and log out again."""

    controller.login(connection.username, connection.password)
    try:
        yield controller.site(connection.site)
    finally:
        try:
            controller.logout()
        except (UnifiAPIError, UnifiTransportError) as exc:
            logger.warning("Logout failed: %s", exc)
