"""Exceptions raised by the UniFi controller client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unifi_cli.models.common import Meta


class UnifiError(Exception):
    """Base class for all client errors."""


class UnifiConfigurationError(UnifiError, ValueError):
    """Invalid controller configuration (base URL, timeout, controller type)."""


class UnifiTransportError(UnifiError):
    """The request could not be sent or no response was received."""


class UnifiAuthFailure(UnifiError):
    """Login was rejected or returned no usable session."""


class UnifiNotAuthenticatedError(UnifiError):
    """No session cookie or CSRF token is stored."""


class UnifiSessionExpiredError(UnifiNotAuthenticatedError):
    """The stored session cookie has expired."""


class UnifiEncodeError(UnifiError):
    """The request body could not be serialized to JSON."""


class UnifiDecodeError(UnifiError):
    """The response body could not be parsed into the expected model."""


class UnifiAPIError(UnifiError):
    """The controller answered with a non-2xx status code."""

    def __init__(self, message: str, status_code: int, meta: Meta | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.meta = meta
