"""Session handling and request execution against a UniFi controller."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from types import TracebackType
from typing import TypeVar, overload
from urllib.parse import urlsplit

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from unifi_cli import endpoints
from unifi_cli.endpoints import CSRF_HEADER, SESSION_COOKIE, ControllerType
from unifi_cli.errors import (
    UnifiAPIError,
    UnifiAuthFailure,
    UnifiConfigurationError,
    UnifiDecodeError,
    UnifiEncodeError,
    UnifiNotAuthenticatedError,
    UnifiSessionExpiredError,
    UnifiTransportError,
)
from unifi_cli.models.common import ApiModel, Meta
from unifi_cli.session import LoginInfo, SessionCookie, SessionState
from unifi_cli.site import Site

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate_base_url(base_url: str) -> str:
    parts = urlsplit(base_url)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise UnifiConfigurationError(
            f"Invalid base URL {base_url!r}: expected an absolute http(s) URL with a host"
        )
    return base_url.rstrip("/")


def _validate_timeout(timeout: float) -> float:
    if timeout < 0:
        raise UnifiConfigurationError("Request timeout can not be smaller than 0 (no timeout)")
    return timeout


def _parse_controller_type(controller_type: ControllerType | str | None) -> ControllerType:
    try:
        return ControllerType.parse(controller_type)
    except ValueError as exc:
        raise UnifiConfigurationError(str(exc)) from exc


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _encode_body(body: object) -> str:
    if isinstance(body, ApiModel):
        payload: object = body.to_payload()
    elif isinstance(body, BaseModel):
        payload = body.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        payload = body
    try:
        return json.dumps(payload)
    except (TypeError, ValueError) as exc:
        raise UnifiEncodeError(f"Failed to encode request body: {exc}") from exc


def _decode_meta(response: requests.Response) -> Meta | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("meta"), dict):
        return None
    try:
        return Meta.model_validate(payload["meta"])
    except PydanticValidationError:
        return None


class Controller:
    """Login state and request execution for a single UniFi controller.

    The controller is not thread safe; callers sharing one instance across
    threads must synchronize access themselves.
    """

    def __init__(
        self,
        base_url: str,
        controller_type: ControllerType | str | None = ControllerType.DEFAULT,
        *,
        timeout: float = 0,
        verify_tls: bool = True,
        auto_relogin: bool = True,
        expiry_margin: float = 0,
        http_session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._base_url = _validate_base_url(base_url)
        self._controller_type = _parse_controller_type(controller_type)
        self._timeout = _validate_timeout(timeout)
        if expiry_margin < 0:
            raise UnifiConfigurationError("Expiry margin can not be smaller than 0")
        self._expiry_margin = expiry_margin
        self.auto_relogin = auto_relogin
        self._http = http_session if http_session is not None else requests.Session()
        self._http.verify = verify_tls
        self._clock = clock
        self._session = SessionState()

    def __enter__(self) -> Controller:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if not self._session.has_credentials:
            self._session.clear()
            return
        try:
            self.logout()
        except (UnifiAPIError, UnifiTransportError) as logout_exc:
            logger.warning("Logout from %s failed: %s", self._base_url, logout_exc)

    @property
    def base_url(self) -> str:
        return self._base_url

    @base_url.setter
    def base_url(self, base_url: str) -> None:
        self._base_url = _validate_base_url(base_url)

    @property
    def controller_type(self) -> ControllerType:
        return self._controller_type

    @controller_type.setter
    def controller_type(self, controller_type: ControllerType | str | None) -> None:
        self._controller_type = _parse_controller_type(controller_type)

    @property
    def timeout(self) -> float:
        """Request timeout in seconds, 0 meaning no timeout."""

        return self._timeout

    @timeout.setter
    def timeout(self, timeout: float) -> None:
        self._timeout = _validate_timeout(timeout)

    @property
    def verify_tls(self) -> bool:
        return bool(self._http.verify)

    @verify_tls.setter
    def verify_tls(self, verify: bool) -> None:
        self._http.verify = verify

    @property
    def csrf_token(self) -> str:
        return self._session.csrf_token

    @property
    def session_expires(self) -> float | None:
        cookie = self._session.cookie
        return cookie.expires if cookie is not None else None

    @property
    def is_authenticated(self) -> bool:
        try:
            self.assert_authenticated()
        except UnifiNotAuthenticatedError:
            return False
        return True

    def site(self, name: str) -> Site:
        return Site(name, self)

    def default_site(self) -> Site:
        return Site("default", self)

    def site_api_url(self, site_name: str) -> str:
        return endpoints.site_api_url(self._base_url, self._controller_type, site_name)

    def login(self, username: str, password: str) -> None:
        """Authenticate and store the session cookie and CSRF token.

        Raises ``UnifiAuthFailure`` when the controller rejects the login or
        does not return both the session cookie and the CSRF header.
        """

        url = endpoints.login_url(self._base_url, self._controller_type)
        request = requests.Request(
            "POST",
            url,
            json={"username": username, "password": password},
        )
        response = self._send(request)

        if not _is_success(response.status_code):
            raise UnifiAuthFailure(f"Login failed with response code {response.status_code}")

        session_cookie = next(
            (cookie for cookie in response.cookies if cookie.name == SESSION_COOKIE),
            None,
        )
        if session_cookie is None or not session_cookie.value:
            raise UnifiAuthFailure(f"Failed to extract '{SESSION_COOKIE}' cookie from response")

        csrf_token = response.headers.get(CSRF_HEADER, "")
        if not csrf_token:
            raise UnifiAuthFailure("Failed to extract CSRF token from response header")

        self._session = SessionState(
            cookie=SessionCookie(
                name=session_cookie.name,
                value=session_cookie.value,
                expires=float(session_cookie.expires) if session_cookie.expires else None,
            ),
            csrf_token=csrf_token,
            login_info=LoginInfo(username=username, password=password),
        )
        logger.info("Logged in to %s as %s", self._base_url, username)

    def logout(self) -> None:
        """Invalidate the session on the controller and forget it locally.

        Local state is cleared even when the logout request fails; the error
        still propagates.
        """

        if not self._session.has_credentials:
            self._session.clear()
            return

        url = endpoints.logout_url(self._base_url, self._controller_type)
        request = requests.Request("POST", url)
        self._attach_session(request)
        try:
            response = self._send(request)
            if not _is_success(response.status_code):
                raise UnifiAPIError(
                    f"Logout failed with response code {response.status_code}",
                    status_code=response.status_code,
                    meta=_decode_meta(response),
                )
        finally:
            self._session.clear()
        logger.info("Logged out from %s", self._base_url)

    def assert_authenticated(self) -> None:
        if not self._session.has_credentials:
            raise UnifiNotAuthenticatedError("Not authenticated, login first")

        cookie = self._session.cookie
        if cookie is not None and cookie.expires is not None:
            if self._clock() >= cookie.expires - self._expiry_margin:
                raise UnifiSessionExpiredError("Session expired")

    def authorize_request(self, request: requests.Request) -> None:
        """Attach the session cookie and CSRF header to ``request``.

        An expired session is renewed with the cached credentials when
        ``auto_relogin`` is enabled.
        """

        try:
            self.assert_authenticated()
        except UnifiSessionExpiredError:
            login_info = self._session.login_info
            if not self.auto_relogin or login_info is None:
                raise
            logger.info("Session expired, logging in again as %s", login_info.username)
            self.login(login_info.username, login_info.password)

        self._attach_session(request)

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

    def execute(
        self,
        method: str,
        url: str,
        body: object | None = None,
        response_model: type[ModelT] | None = None,
    ) -> ModelT | requests.Response:
        """Send an authorized request and optionally decode the JSON response.

        ``body`` may be a pydantic model or any JSON serializable value. When
        ``response_model`` is given the decoded model is returned, otherwise
        the raw response.
        """

        request = requests.Request(method.upper(), url)
        if body is not None:
            request.data = _encode_body(body)
            request.headers["Content-Type"] = "application/json"

        self.authorize_request(request)
        response = self._send(request)

        new_csrf_token = response.headers.get(CSRF_HEADER)
        if new_csrf_token:
            self._session.csrf_token = new_csrf_token

        success = _is_success(response.status_code)
        if response_model is None:
            if not success:
                raise self._status_error(request, response, _decode_meta(response))
            return response

        try:
            decoded = response_model.model_validate_json(response.content)
        except PydanticValidationError as exc:
            if not success:
                raise self._status_error(request, response, _decode_meta(response)) from exc
            raise UnifiDecodeError(
                f"Failed to decode response of {request.method} {url}: {exc}"
            ) from exc

        if not success:
            meta = getattr(decoded, "meta", None)
            raise self._status_error(
                request, response, meta if isinstance(meta, Meta) else None
            )
        return decoded

    def _attach_session(self, request: requests.Request) -> None:
        cookie = self._session.cookie
        if cookie is not None:
            request.cookies = {cookie.name: cookie.value}
        request.headers[CSRF_HEADER] = self._session.csrf_token

    def _send(self, request: requests.Request) -> requests.Response:
        # The session cookie comes from SessionState only; the jar stays empty.
        self._http.cookies.clear()
        prepared = self._http.prepare_request(request)
        logger.debug("%s %s", prepared.method, prepared.url)
        try:
            response = self._http.send(
                prepared,
                timeout=self._timeout or None,
                verify=self._http.verify,
            )
        except requests.RequestException as exc:
            raise UnifiTransportError(f"{prepared.method} {prepared.url} failed: {exc}") from exc
        finally:
            self._http.cookies.clear()
        logger.debug("%s %s -> %s", prepared.method, prepared.url, response.status_code)
        return response

    @staticmethod
    def _status_error(
        request: requests.Request,
        response: requests.Response,
        meta: Meta | None,
    ) -> UnifiAPIError:
        message = f"{request.method} {request.url} failed with response code {response.status_code}"
        if meta is not None and meta.msg:
            message = f"{message}: {meta.msg}"
        return UnifiAPIError(message, status_code=response.status_code, meta=meta)
