"""Session state kept between login and logout."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SessionCookie:
    """The session cookie issued at login."""

    name: str
    value: str
    expires: float | None = None


@dataclass(frozen=True, slots=True)
class LoginInfo:
    """Credentials cached for transparent re-login."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"LoginInfo(username={self.username!r}, password='***')"


@dataclass(slots=True)
class SessionState:
    """Cookie, CSRF token and credentials of the current controller session."""

    cookie: SessionCookie | None = None
    csrf_token: str = ""
    login_info: LoginInfo | None = None

    @property
    def has_credentials(self) -> bool:
        return self.cookie is not None and bool(self.csrf_token)

    def clear(self) -> None:
        self.cookie = None
        self.csrf_token = ""
        self.login_info = None
