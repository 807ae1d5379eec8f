from __future__ import annotations

from datetime import timedelta

from fastapi.testclient import TestClient

from restaurant_directory.auth.models import Identity
from restaurant_directory.auth.tokens import issue_token

USER = Identity(id="65f1c0ffee0000000000aaaa", role="user", email="user@example.com")
ADMIN = Identity(id="65f1c0ffee0000000000bbbb", role="admin", email="admin@example.com")


def _whoami(client, **kwargs):
    return client.get("/auth/check", **kwargs).json()


def test_no_token_means_anonymous(client):
    assert _whoami(client) == {"loggedIn": False}


def test_header_token(client, settings):
    token = issue_token(USER, settings)
    body = _whoami(client, headers={"Authorization": f"Bearer {token}"})
    assert body["loggedIn"] is True
    assert body["user"]["id"] == USER.id


def test_cookie_token(app, settings):
    c = TestClient(app, cookies={"token": issue_token(USER, settings)})
    assert _whoami(c)["user"]["email"] == "user@example.com"


def test_query_token(client, settings):
    body = _whoami(client, params={"token": issue_token(USER, settings)})
    assert body["user"]["role"] == "user"


def test_header_beats_cookie_and_query(app, settings):
    c = TestClient(app, cookies={"token": issue_token(USER, settings)})
    body = _whoami(
        c,
        headers={"Authorization": f"Bearer {issue_token(ADMIN, settings)}"},
        params={"token": issue_token(USER, settings)},
    )
    assert body["user"]["id"] == ADMIN.id


def test_cookie_beats_query(app, settings):
    c = TestClient(app, cookies={"token": issue_token(ADMIN, settings)})
    body = _whoami(c, params={"token": issue_token(USER, settings)})
    assert body["user"]["id"] == ADMIN.id


def test_sources_are_not_merged(app, settings):
    # an invalid header token does not fall back to a valid query token
    body = _whoami(
        TestClient(app),
        headers={"Authorization": "Bearer garbage"},
        params={"token": issue_token(USER, settings)},
    )
    assert body == {"loggedIn": False}


def test_non_bearer_header_is_ignored(client, settings):
    body = _whoami(
        client,
        headers={"Authorization": "Basic dXNlcjpwYXNz"},
        params={"token": issue_token(USER, settings)},
    )
    assert body["loggedIn"] is True


def test_expired_cookie_is_cleared(app, settings):
    expired = issue_token(USER, settings, expires_in=timedelta(seconds=-1))
    c = TestClient(app, cookies={"token": expired, "user": "%7B%7D"})
    resp = c.get("/auth/check")
    assert resp.json() == {"loggedIn": False}
    cleared = resp.headers.get_list("set-cookie")
    assert any(h.startswith("token=") and "Max-Age=0" in h for h in cleared)
    assert any(h.startswith("user=") and "Max-Age=0" in h for h in cleared)


def test_bad_header_token_does_not_touch_cookies(client):
    resp = client.get("/auth/check", headers={"Authorization": "Bearer garbage"})
    assert "set-cookie" not in resp.headers


def test_api_user_gets_403_on_admin_action(client, settings):
    token = issue_token(USER, settings)
    resp = client.delete(
        "/api/restaurants/65f1c0ffee0000000000cccc",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "message": "Admin access required"}


def test_api_anonymous_gets_401_on_admin_action(client):
    resp = client.delete("/api/restaurants/65f1c0ffee0000000000cccc")
    assert resp.status_code == 401
