from __future__ import annotations

import itertools
import json
import re
from http.client import HTTPMessage
from types import SimpleNamespace
from typing import Any, cast
from urllib.parse import urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict
from typer.testing import CliRunner

from unifi_cli.connection import ConnectionParams
from unifi_cli.controller import Controller

BASE_URL = "https://unifi.example.com"
USERNAME = "api-user"
PASSWORD = "super-secret"

_SITE_PATH_RE = re.compile(
    r"^(?P<prefix>/proxy/network)?/api/s/(?P<site>[^/]+)/rest/"
    r"(?P<resource>firewallrule|firewallgroup)(?:/(?P<id>[^/]+))?$"
)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUnifiAdapter(BaseAdapter):
    """In-memory UniFi controller served through a requests transport adapter."""

    def __init__(self, clock: FakeClock, controller_type: str = "default") -> None:
        super().__init__()
        self.clock = clock
        self.udm_pro = controller_type == "UDM-Pro"
        self.token_lifetime = 3600
        self.rotate_csrf = False
        self.omit_cookie = False
        self.omit_csrf = False
        self.logout_status = 200
        self.raise_on_send: Exception | None = None

        self.rules: dict[str, dict[str, object]] = {}
        self.groups: dict[str, dict[str, object]] = {}
        self.sent: list[requests.PreparedRequest] = []
        self.last_timeout: object = None
        self.last_verify: object = None
        self.login_count = 0
        self.logout_count = 0
        self.created_params: list[ConnectionParams] = []

        self._sessions: dict[str, str] = {}
        self._counter = itertools.count(1)

    @property
    def login_path(self) -> str:
        return "/api/auth/login" if self.udm_pro else "/api/login"

    @property
    def logout_path(self) -> str:
        return "/api/auth/logout" if self.udm_pro else "/api/logout"

    def seed_group(self, name: str, group_type: str, members: list[str]) -> str:
        group_id = self._new_id()
        self.groups[group_id] = {
            "_id": group_id,
            "site_id": "site-default",
            "name": name,
            "group_type": group_type,
            "group_members": members,
        }
        return group_id

    def seed_rule(self, name: str, ruleset: str, rule_index: int, **fields: object) -> str:
        rule_id = self._new_id()
        self.rules[rule_id] = {
            "_id": rule_id,
            "site_id": "site-default",
            "name": name,
            "ruleset": ruleset,
            "rule_index": rule_index,
            "action": "drop",
            "enabled": True,
            "protocol": "all",
            **fields,
        }
        return rule_id

    def send(
        self,
        request: requests.PreparedRequest,
        stream: bool = False,
        timeout: object = None,
        verify: object = True,
        cert: object = None,
        proxies: object = None,
    ) -> requests.Response:
        del stream, cert, proxies
        self.sent.append(request)
        self.last_timeout = timeout
        self.last_verify = verify
        if self.raise_on_send is not None:
            raise self.raise_on_send

        path = urlsplit(request.url or "").path
        if request.method == "POST" and path == self.login_path:
            return self._login(request)
        if request.method == "POST" and path == self.logout_path:
            return self._logout(request)

        match = _SITE_PATH_RE.match(path)
        if match is None or bool(match.group("prefix")) != self.udm_pro:
            return _respond(request, 404, {"meta": {"rc": "error", "msg": "api.err.NotFound"}})

        token = self._authorized_token(request)
        if token is None:
            return _respond(
                request,
                401,
                {"meta": {"rc": "error", "msg": "api.err.LoginRequired"}, "data": []},
            )

        headers: dict[str, str] = {}
        if self.rotate_csrf:
            self._sessions[token] = f"csrf-{next(self._counter)}"
            headers["X-CSRF-Token"] = self._sessions[token]

        store = self.rules if match.group("resource") == "firewallrule" else self.groups
        status, payload = self._handle(
            request, store, match.group("resource"), match.group("site"), match.group("id")
        )
        return _respond(request, status, payload, headers=headers)

    def close(self) -> None:
        pass

    def _new_id(self) -> str:
        return f"63f0c0ffee{next(self._counter):014d}"

    def _login(self, request: requests.PreparedRequest) -> requests.Response:
        body = json.loads(request.body or b"{}")
        if body != {"username": USERNAME, "password": PASSWORD}:
            return _respond(request, 400, {"meta": {"rc": "error", "msg": "api.err.Invalid"}})

        self.login_count += 1
        token = f"token-{next(self._counter)}"
        csrf_token = f"csrf-{next(self._counter)}"
        self._sessions[token] = csrf_token

        headers = {} if self.omit_csrf else {"X-CSRF-Token": csrf_token}
        cookies = (
            {}
            if self.omit_cookie
            else {"TOKEN": (token, int(self.clock() + self.token_lifetime))}
        )
        return _respond(
            request,
            200,
            {"meta": {"rc": "ok"}, "data": []},
            headers=headers,
            cookies=cookies,
        )

    def _logout(self, request: requests.PreparedRequest) -> requests.Response:
        self.logout_count += 1
        token = self._authorized_token(request)
        if token is not None:
            del self._sessions[token]
        return _respond(request, self.logout_status, {"meta": {"rc": "ok"}, "data": []})

    def _authorized_token(self, request: requests.PreparedRequest) -> str | None:
        cookie_header = request.headers.get("Cookie", "")
        cookies = dict(
            part.strip().split("=", 1) for part in cookie_header.split(";") if "=" in part
        )
        token = cookies.get("TOKEN")
        if token is None or token not in self._sessions:
            return None
        if request.headers.get("X-CSRF-Token") != self._sessions[token]:
            return None
        return token

    def _handle(
        self,
        request: requests.PreparedRequest,
        store: dict[str, dict[str, object]],
        resource: str,
        site: str,
        record_id: str | None,
    ) -> tuple[int, dict[str, object]]:
        ok = {"rc": "ok"}
        method = request.method

        if method == "GET" and record_id is None:
            return 200, {"meta": ok, "data": list(store.values())}
        if method == "GET":
            record = store.get(record_id or "")
            return 200, {"meta": ok, "data": [record] if record else []}

        if method == "POST" and record_id is None:
            body = cast(dict[str, object], json.loads(request.body or b"{}"))
            clash = self._find_clash(store, resource, body)
            if clash is not None:
                return 400, {"meta": {"rc": "error", **clash}, "data": []}
            new_id = self._new_id()
            record = {**body, "_id": new_id, "site_id": f"site-{site}"}
            store[new_id] = record
            return 200, {"meta": ok, "data": [record]}

        if record_id not in store:
            return 400, {"meta": {"rc": "error", "msg": "api.err.IdInvalid"}, "data": []}

        if method == "PUT":
            body = cast(dict[str, object], json.loads(request.body or b"{}"))
            record = {**body, "_id": record_id, "site_id": store[record_id]["site_id"]}
            store[record_id] = record
            return 200, {"meta": ok, "data": [record]}
        if method == "DELETE":
            del store[record_id]
            return 200, {"meta": ok, "data": []}

        return 405, {"meta": {"rc": "error", "msg": "api.err.MethodNotAllowed"}, "data": []}

    @staticmethod
    def _find_clash(
        store: dict[str, dict[str, object]],
        resource: str,
        body: dict[str, object],
    ) -> dict[str, object] | None:
        for record in store.values():
            if resource == "firewallgroup" and record.get("name") == body.get("name"):
                return {"msg": "api.err.FirewallGroupExisted", "name": body.get("name")}
            if (
                resource == "firewallrule"
                and record.get("ruleset") == body.get("ruleset")
                and record.get("rule_index") == body.get("rule_index")
            ):
                return {
                    "msg": "api.err.FirewallRuleIndexExisted",
                    "rule_index": body.get("rule_index"),
                }
        return None


def _respond(
    request: requests.PreparedRequest,
    status: int,
    payload: object | None = None,
    headers: dict[str, str] | None = None,
    cookies: dict[str, tuple[str, int]] | None = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    response.url = request.url or ""
    response.request = request
    response.headers = CaseInsensitiveDict(headers or {})
    response.encoding = "utf-8"
    if payload is None:
        response._content = b""
    else:
        response.headers["Content-Type"] = "application/json"
        response._content = json.dumps(payload).encode("utf-8")
    # Set-Cookie headers reach the session jar the way a urllib3 response does.
    message = HTTPMessage()
    for name, (value, expires) in (cookies or {}).items():
        response.cookies.set(name, value, expires=expires, domain="unifi.example.com", path="/")
        message["Set-Cookie"] = f"{name}={value}; Max-Age=3600; Path=/"
    response.raw = SimpleNamespace(_original_response=SimpleNamespace(msg=message))
    return response


def build_controller(adapter: FakeUnifiAdapter, **kwargs: Any) -> Controller:
    http_session = requests.Session()
    http_session.mount("https://", adapter)
    kwargs.setdefault("controller_type", "UDM-Pro" if adapter.udm_pro else "default")
    return Controller(BASE_URL, http_session=http_session, clock=adapter.clock, **kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_unifi(clock: FakeClock) -> FakeUnifiAdapter:
    return FakeUnifiAdapter(clock)


@pytest.fixture
def controller(fake_unifi: FakeUnifiAdapter) -> Controller:
    return build_controller(fake_unifi, timeout=10)


@pytest.fixture
def logged_in(controller: Controller) -> Controller:
    controller.login(USERNAME, PASSWORD)
    return controller


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def connection_args() -> list[str]:
    return [
        "--base-url",
        BASE_URL,
        "--username",
        USERNAME,
        "--password",
        PASSWORD,
    ]


@pytest.fixture
def cli_unifi(monkeypatch: pytest.MonkeyPatch, fake_unifi: FakeUnifiAdapter) -> FakeUnifiAdapter:
    def _create_controller(params: ConnectionParams) -> Controller:
        fake_unifi.created_params.append(params)
        return build_controller(
            fake_unifi,
            controller_type=params.controller_type,
            timeout=params.timeout,
            verify_tls=params.verify_ssl,
        )

    monkeypatch.setattr("unifi_cli.cli.create_controller", _create_controller)
    monkeypatch.setattr("unifi_cli.commands.common.create_controller", _create_controller)
    return fake_unifi
