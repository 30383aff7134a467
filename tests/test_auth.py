"""Admin login, session cookie and token edge cases."""

import pytest

from apps.shared.auth import SESSION_COOKIE
from apps.shared.session_token import create_session_token, verify_session_token

SECRET = "test-session-secret"
DAY = 60 * 60 * 24


def test_login_sets_http_only_cookie(client):
    resp = client.post(
        "/auth/login", json={"email": "admin@example.com", "password": "correct-horse"}
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    set_cookie = resp.headers["set-cookie"]
    assert set_cookie.startswith(f"{SESSION_COOKIE}=")
    assert "HttpOnly" in set_cookie
    assert "Max-Age=86400" in set_cookie


@pytest.mark.parametrize(
    "body",
    [
        {"email": "admin@example.com", "password": "wrong"},
        {"email": "someone@example.com", "password": "correct-horse"},
        {"email": "ADMIN@example.com", "password": "correct-horse"},
    ],
)
def test_login_rejects_bad_credentials_the_same_way(client, body):
    resp = client.post("/auth/login", json=body)
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid credentials", "category": "security"}
    assert SESSION_COOKIE not in resp.cookies


def test_login_requires_both_fields(client):
    resp = client.post("/auth/login", json={"email": "admin@example.com"})
    assert resp.status_code == 400


def test_check_without_session_returns_401(client):
    assert client.get("/auth/check").status_code == 401


def test_check_with_session(admin_client):
    resp = admin_client.get("/auth/check")
    assert resp.status_code == 200
    assert resp.json() == {"authenticated": True, "email": "admin@example.com"}


def test_tampered_cookie_is_rejected(client):
    client.cookies.set(SESSION_COOKIE, "not-a-real-token")
    assert client.get("/auth/check").status_code == 401


def test_logout_clears_cookie(admin_client):
    resp = admin_client.post("/auth/logout")
    assert resp.status_code == 200
    assert f'{SESSION_COOKIE}=""' in resp.headers["set-cookie"]
    assert admin_client.get("/auth/check").status_code == 401


def test_token_round_trip_and_expiry():
    token = create_session_token("admin@example.com", SECRET, now=1_000_000)

    assert verify_session_token(token, SECRET, DAY, now=1_000_000 + 60) == "admin@example.com"
    assert verify_session_token(token, SECRET, DAY, now=1_000_000 + DAY + 1) is None


def test_token_signed_with_other_secret_is_rejected():
    token = create_session_token("admin@example.com", "another-secret")
    assert verify_session_token(token, SECRET, DAY) is None


@pytest.mark.parametrize("token", [None, "", "garbage", "gAAAAA" + "x" * 40])
def test_malformed_tokens_verify_to_none(token):
    assert verify_session_token(token, SECRET, DAY) is None


def test_missing_secret_is_a_configuration_error():
    with pytest.raises(RuntimeError):
        create_session_token("admin@example.com", "")
