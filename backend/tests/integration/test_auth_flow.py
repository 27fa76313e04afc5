"""End-to-end authentication flows through the Flask test client."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from filevault.core.config import TestingConfig
from filevault.infra.jwt import PyJWTTokenProvider

COOKIE = "refreshToken"
CREDS = {"id": "a@b.com", "password": "secret1"}


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _cookie(client) -> str | None:
    cookie = client.get_cookie(COOKIE)
    return cookie.value if cookie is not None else None


def test_signup_signin_rotate_replay_scenario(client):
    res = client.post("/signup", json=CREDS)
    assert res.status_code == 201
    assert set(res.get_json()) == {"accessToken"}
    assert _cookie(client)

    res = client.post("/signin", json=CREDS)
    assert res.status_code == 200
    signin_cookie = _cookie(client)

    res = client.get("/signin/new_token")
    assert res.status_code == 200
    assert res.get_json()["accessToken"]
    rotated_cookie = _cookie(client)
    assert rotated_cookie != signin_cookie

    client.set_cookie(COOKIE, signin_cookie)
    res = client.get("/signin/new_token")
    assert res.status_code == 401
    assert res.get_json()["error"] == "Invalid refresh token"


def test_refresh_cookie_attributes(client):
    res = client.post("/signup", json=CREDS)

    header = res.headers["Set-Cookie"]
    assert header.startswith(f"{COOKIE}=")
    assert "HttpOnly" in header
    assert "SameSite=Strict" in header
    assert "Max-Age=2592000" in header
    assert "Path=/" in header


def test_signup_validation(client):
    res = client.post("/signup", json={"id": "a@b.com", "password": "123"})
    assert res.status_code == 400
    assert "at least 6 characters" in res.get_json()["error"]

    res = client.post("/signup", json={"id": "nope", "password": "secret1"})
    assert res.status_code == 400
    assert res.get_json()["error"] == "ID must be a valid email or phone number"

    res = client.post("/signup", json={"password": "secret1"})
    body = res.get_json()
    assert res.status_code == 400
    assert body["error"] == "Validation failed"
    assert "id" in body["details"]["errors"]


def test_duplicate_signup(client):
    assert client.post("/signup", json=CREDS).status_code == 201

    res = client.post("/signup", json=CREDS)

    assert res.status_code == 400
    assert res.get_json()["error"] == "User already exists"


def test_wrong_password(client):
    client.post("/signup", json=CREDS)

    res = client.post("/signin", json={"id": "a@b.com", "password": "wrong-one"})

    assert res.status_code == 401
    assert res.get_json()["error"] == "Invalid credentials"


def test_new_token_without_cookie(client):
    res = client.get("/signin/new_token")

    assert res.status_code == 400
    assert res.get_json()["error"] == "Refresh token is required"


def test_info_and_gate_errors(client):
    access = client.post("/signup", json=CREDS).get_json()["accessToken"]

    res = client.get("/info", headers=_bearer(access))
    assert res.status_code == 200
    assert res.get_json() == {"id": "a@b.com"}

    res = client.get("/info")
    assert res.status_code == 401
    assert res.get_json()["error"] == "Access token is required"

    res = client.get("/info", headers=_bearer("garbage"))
    assert res.status_code == 403
    assert res.get_json()["error"] == "Invalid token"

    client.delete_cookie(COOKIE)
    res = client.get("/info", headers=_bearer(access))
    assert res.status_code == 401
    assert res.get_json()["error"] == "Refresh token is required"


def test_expired_access_token_is_401(client):
    client.post("/signup", json=CREDS)
    past = PyJWTTokenProvider(
        access_secret=TestingConfig.JWT_ACCESS_SECRET,
        refresh_secret=TestingConfig.JWT_REFRESH_SECRET,
        clock=lambda: datetime.now(UTC) - timedelta(minutes=11),
    )
    expired = past.create_access_token(
        identity="a@b.com", expires_delta=timedelta(minutes=10), jti="expired"
    )

    res = client.get("/info", headers=_bearer(expired))

    assert res.status_code == 401
    assert res.get_json()["error"] == "Token expired"


def test_logout_kills_only_its_session(app, client):
    first_access = client.post("/signup", json=CREDS).get_json()["accessToken"]
    first_cookie = _cookie(client)

    other = app.test_client()
    second_access = other.post("/signin", json=CREDS).get_json()["accessToken"]

    res = client.get("/logout", headers=_bearer(first_access))
    assert res.status_code == 200
    assert res.get_json() == {"message": "Logged out successfully"}
    assert _cookie(client) is None

    client.set_cookie(COOKIE, first_cookie)
    res = client.get("/info", headers=_bearer(first_access))
    assert res.status_code == 401
    assert res.get_json()["error"] == "Token is no longer valid"

    assert other.get("/info", headers=_bearer(second_access)).status_code == 200


@pytest.mark.parametrize("path", ["/info", "/logout", "/file/list"])
def test_protected_routes_require_tokens(client, path):
    res = client.get(path)
    assert res.status_code == 401
    body = res.get_json()
    assert body["code"] == "unauthorized"
    assert body["status"] == 401
    assert body["request_id"]
