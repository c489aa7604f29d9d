"""Typed protocol for the controller interactions used by sites and services."""

from __future__ import annotations

from typing import Protocol, TypeVar, overload

import requests
from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


class ControllerClientProtocol(Protocol):
    """Subset of ``Controller`` methods that site scoped requests depend on."""

    def site_api_url(self, site_name: str) -> str: ...

    @overload
    def execute(
        self,
        method: str,
        url: str,
        body: object | None = None,
        response_model: None = None,
    ) -> requests.Response: ...

    @overload
    def execute(
        self,
        method: str,
        url: str,
        body: object | None = None,
        *,
        response_model: type[ModelT],
    ) -> ModelT: ...
