from __future__ import annotations

from restaurant_directory.auth.tokens import verify_token


def _register(c, username="alice", email="alice@example.com", password="secret123", **extra):
    return c.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password, **extra},
    )


# ── Registration ─────────────────────────────────────────────────────────


def test_register_success(client):
    resp = _register(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["user"]["username"] == "alice"
    assert body["user"]["role"] == "user"
    assert "password" not in body["user"]
    assert body["token"]


def test_register_lowercases_email(client, store):
    _register(client, email="Alice@Example.COM")
    assert store.users.find_one({"email": "alice@example.com"}) is not None


def test_register_hashes_password(client, store):
    _register(client)
    record = store.users.find_one({"username": "alice"})
    assert record["password"] != "secret123"
    assert record["password"].startswith("$2")


def test_register_duplicate_email(client, store):
    _register(client)
    resp = _register(client, username="other")
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["errors"] == [{"field": "email", "message": "Email already registered"}]
    assert store.users.count_documents({}) == 1


def test_register_duplicate_username(client, store):
    _register(client)
    resp = _register(client, email="second@example.com")
    assert resp.status_code == 400
    assert [e["field"] for e in resp.json()["errors"]] == ["username"]
    assert store.users.count_documents({}) == 1


def test_register_validation_errors(client, store):
    resp = _register(client, username="al", email="not-an-email", password="123")
    assert resp.status_code == 400
    fields = {e["field"] for e in resp.json()["errors"]}
    assert fields == {"username", "email", "password"}
    assert store.users.count_documents({}) == 0


def test_register_rejects_password_over_72_bytes(client, store):
    # 40 characters, 80 bytes in UTF-8
    resp = _register(client, password="\u00e9" * 40)
    assert resp.status_code == 400
    assert resp.json()["errors"] == [{"field": "password", "message": "Password must be at most 72 bytes"}]
    assert store.users.count_documents({}) == 0


def test_register_rejects_unknown_role(client):
    resp = _register(client, role="superuser")
    assert resp.status_code == 400


def test_register_as_admin(client, settings):
    resp = _register(client, role="admin")
    assert resp.status_code == 201
    identity = verify_token(resp.json()["token"], settings)
    assert identity.role == "admin"


# ── Login / Logout ───────────────────────────────────────────────────────


def test_login_token_resolves_to_same_identity(client, settings):
    registered = _register(client).json()["user"]
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    identity = verify_token(body["token"], settings)
    assert identity.id == registered["id"]
    assert identity.role == "user"
    assert identity.email == "alice@example.com"


def test_login_wrong_password(client):
    _register(client)
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid email or password"}


def test_login_unknown_email(client):
    resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "x"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid email or password"}


def test_logout_requires_token(client):
    resp = client.post("/api/auth/logout")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_logout(client, user_token, auth_header):
    resp = client.post("/api/auth/logout", headers=auth_header(user_token))
    assert resp.status_code == 200
    assert resp.json()["message"] == "Logged out successfully"


# ── Profile ──────────────────────────────────────────────────────────────


def test_profile_when_logged_in(client, user_token, auth_header):
    resp = client.get("/api/auth/profile", headers=auth_header(user_token))
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["username"] == "alice"
    assert user["email"] == "alice@example.com"
    assert "password" not in user


def test_profile_not_logged_in(client):
    resp = client.get("/api/auth/profile")
    assert resp.status_code == 401


def test_profile_with_garbage_token(client, auth_header):
    resp = client.get("/api/auth/profile", headers=auth_header("not.a.jwt"))
    assert resp.status_code == 401


def test_profile_for_deleted_account(client, store, user_token, auth_header):
    store.users.delete_many({})
    resp = client.get("/api/auth/profile", headers=auth_header(user_token))
    assert resp.status_code == 404
