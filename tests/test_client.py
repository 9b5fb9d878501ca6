"""Unit tests for client/ -- the requests-based API client.

requests.Session.request is patched so no network is touched.

Covers:
- get_favorites / toggle_favorite hit the right URLs with x-access-token
- sign_in stores the user; sign_out forgets it
- non-2xx responses raise ApiClientError with the server message
- transport failures raise ApiClientError without a status code
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from client import ApiClientError, AuthClient, FavoriteClient, auth_header

BASE = "http://api.test/api/"


def _response(status: int, body=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.reason = "Error"
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def auth():
    client = AuthClient(BASE)
    client.user = {"id": 1, "username": "ana", "accessToken": "tok-123"}
    return client


def test_auth_header():
    assert auth_header({"accessToken": "abc"}) == {"x-access-token": "abc"}
    assert auth_header({"username": "ana"}) == {}
    assert auth_header(None) == {}


def test_get_favorites(auth):
    favorites = [{"countryCode": "FR", "countryName": "France", "flagUrl": "https://flagcdn.com/fr.svg"}]
    with patch.object(requests.Session, "request", return_value=_response(200, favorites)) as req:
        assert FavoriteClient(auth).get_favorites() == favorites

    method, url = req.call_args.args
    assert method == "GET"
    assert url == "http://api.test/api/favorites"
    assert req.call_args.kwargs["headers"] == {"x-access-token": "tok-123"}


def test_toggle_favorite(auth):
    with patch.object(requests.Session, "request", return_value=_response(200, {"added": True})) as req:
        assert FavoriteClient(auth).toggle_favorite("FR", "France", "https://flagcdn.com/fr.svg") is True

    method, url = req.call_args.args
    assert method == "POST"
    assert url == "http://api.test/api/favorites/toggle"
    assert req.call_args.kwargs["json"] == {
        "countryCode": "FR",
        "countryName": "France",
        "flagUrl": "https://flagcdn.com/fr.svg",
    }


def test_unauthenticated_raises_with_server_message(auth):
    auth.user = None
    with patch.object(
        requests.Session,
        "request",
        return_value=_response(401, {"message": "No token provided!", "code": "unauthenticated"}),
    ):
        with pytest.raises(ApiClientError) as excinfo:
            FavoriteClient(auth).get_favorites()
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "No token provided!"


def test_error_without_json_body_uses_reason(auth):
    with patch.object(requests.Session, "request", return_value=_response(502)):
        with pytest.raises(ApiClientError) as excinfo:
            FavoriteClient(auth).get_favorites()
    assert excinfo.value.status_code == 502
    assert excinfo.value.message == "Error"


def test_error_with_non_object_json_body_uses_reason(auth):
    with patch.object(requests.Session, "request", return_value=_response(502, ["oops"])):
        with pytest.raises(ApiClientError) as excinfo:
            FavoriteClient(auth).get_favorites()
    assert excinfo.value.status_code == 502
    assert excinfo.value.message == "Error"


def test_transport_failure(auth):
    with patch.object(requests.Session, "request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ApiClientError) as excinfo:
            FavoriteClient(auth).toggle_favorite("FR", "France", "x")
    assert excinfo.value.status_code is None


def test_sign_in_and_out():
    client = AuthClient("http://api.test/api")
    signed_in = {"id": 3, "username": "ana", "email": "ana@example.com", "roles": ["user"], "accessToken": "t"}
    with patch.object(requests.Session, "request", return_value=_response(200, signed_in)) as req:
        client.sign_in("ana", "secret123")
    assert req.call_args.args == ("POST", "http://api.test/api/auth/signin")
    assert client.user == signed_in
    assert client.headers() == {"x-access-token": "t"}

    with patch.object(requests.Session, "request", return_value=_response(200, {"message": "You've been signed out!"})):
        client.sign_out()
    assert client.user is None
    assert client.headers() == {}


def test_sign_up_omits_empty_roles():
    client = AuthClient(BASE)
    with patch.object(requests.Session, "request", return_value=_response(200, {"message": "ok"})) as req:
        client.sign_up("ana", "ana@example.com", "secret123")
    assert "roles" not in req.call_args.kwargs["json"]
