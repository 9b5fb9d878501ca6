"""
client/auth.py -- Account calls and token bookkeeping for the Python client.

AuthClient owns one requests.Session for connection pooling and cookie
storage, so the server's session cookie and the x-access-token header both
travel on later calls. FavoriteClient borrows that session.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

logger = logging.getLogger("countries.client")

DEFAULT_API_URL = "http://localhost:8080/api/"


class ApiClientError(Exception):
    """A non-2xx response or a transport failure.

    status_code is None when the request never got a response.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def auth_header(user: Optional[dict[str, Any]]) -> dict[str, str]:
    """Return the x-access-token header for a signed-in user, or {} if there is none."""
    if user and user.get("accessToken"):
        return {"x-access-token": user["accessToken"]}
    return {}


def send(session: requests.Session, method: str, url: str, timeout: float, **kwargs: Any) -> Any:
    """Issue one request and return the decoded JSON body.

    Raises ApiClientError carrying the server's "message" for error responses.
    """
    try:
        resp = session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        logger.warning("%s %s failed: %s", method, url, e)
        raise ApiClientError(f"Request to {url} failed: {e}") from e

    if not resp.ok:
        try:
            body = resp.json()
        except ValueError:
            body = None
        message = (body.get("message") if isinstance(body, dict) else None) or resp.reason
        raise ApiClientError(message, status_code=resp.status_code)

    try:
        return resp.json()
    except ValueError as e:
        raise ApiClientError(f"Invalid JSON from {url}", status_code=resp.status_code) from e


class AuthClient:
    """Sign up, sign in and out, and remember who is signed in.

    Usage:
        auth = AuthClient("https://countries.example.com/api/")
        auth.sign_in("ana", "secret123")
        auth.current_user()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.session = session or requests.Session()
        self.session.max_redirects = 3
        self.timeout = timeout
        self.user: Optional[dict[str, Any]] = None

    def url(self, path: str) -> str:
        return self.base_url + path.lstrip("/")

    def headers(self) -> dict[str, str]:
        return auth_header(self.user)

    def sign_up(self, username: str, email: str, password: str, roles: Optional[list[str]] = None) -> dict:
        body: dict[str, Any] = {"username": username, "email": email, "password": password}
        if roles:
            body["roles"] = roles
        return send(self.session, "POST", self.url("auth/signup"), self.timeout, json=body)

    def sign_in(self, username: str, password: str) -> dict:
        """Sign in and keep the returned user (including accessToken) for later calls."""
        data = send(
            self.session,
            "POST",
            self.url("auth/signin"),
            self.timeout,
            json={"username": username, "password": password},
        )
        self.user = data
        return data

    def sign_out(self) -> dict:
        try:
            return send(self.session, "POST", self.url("auth/signout"), self.timeout)
        finally:
            self.user = None
            self.session.cookies.clear()

    def current_user(self) -> dict:
        return send(self.session, "GET", self.url("auth/me"), self.timeout, headers=self.headers())
