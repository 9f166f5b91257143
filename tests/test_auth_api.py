"""Auth endpoints: register, login, me, change-password."""

import jwt
from fastapi.testclient import TestClient

from maajod.models import User


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_unexpected_error_returns_500(app):
    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    r = TestClient(app, raise_server_exceptions=False).get("/boom")
    assert r.status_code == 500
    assert r.json() == {"detail": "伺服器錯誤"}


def test_register_lowercases_and_hashes(client, app):
    r = client.post("/api/auth/register", json={"username": "  Alice ", "password": "secret-1", "name": "Alice"})
    assert r.status_code == 201
    user = r.json()["user"]
    assert user["username"] == "alice"
    assert user["role"] == "user"

    with app.state.session_factory() as db:
        stored = db.get(User, user["id"])
        assert stored.password != "secret-1"
        assert stored.password.startswith("$pbkdf2-sha256$")


def test_register_duplicate_username(client):
    body = {"username": "alice", "password": "x1", "name": "A"}
    assert client.post("/api/auth/register", json=body).status_code == 201
    r = client.post("/api/auth/register", json={**body, "username": "ALICE"})
    assert r.status_code == 400


def test_register_missing_fields(client):
    r = client.post("/api/auth/register", json={"username": "alice"})
    assert r.status_code == 400


def test_login_returns_token_and_stores(client, make_user, make_store):
    _, headers = make_user("alice", password="pw-1")
    store = make_store(headers, "Shop1")

    r = client.post("/api/auth/login", json={"username": "ALICE", "password": "pw-1"})
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["username"] == "alice"
    assert body["defaultStoreId"] == store["id"]
    assert body["stores"][0]["userRole"] == "owner"
    assert body["stores"][0]["isDefault"] is True

    claims = jwt.decode(body["token"], "test-secret", algorithms=["HS256"])
    assert claims["sub"] == body["user"]["id"]
    assert claims["username"] == "alice"


def test_login_failures_share_message(client, make_user):
    make_user("alice", password="pw-1")
    wrong_pw = client.post("/api/auth/login", json={"username": "alice", "password": "nope"})
    no_user = client.post("/api/auth/login", json={"username": "nobody", "password": "nope"})
    assert wrong_pw.status_code == no_user.status_code == 401
    assert wrong_pw.json()["detail"] == no_user.json()["detail"]


def test_login_without_stores(client, make_user):
    make_user("bob", password="pw-1")
    body = client.post("/api/auth/login", json={"username": "bob", "password": "pw-1"}).json()
    assert body["stores"] == []
    assert body["defaultStoreId"] is None


def test_me_requires_bearer(client):
    assert client.get("/api/auth/me").status_code == 401
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


def test_me_rejects_token_signed_with_other_secret(client, make_user):
    user, _ = make_user("alice")
    forged = jwt.encode({"sub": user["id"]}, "some-other-secret", algorithm="HS256")
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {forged}"}).status_code == 401


def test_me_returns_user(client, make_user):
    user, headers = make_user("alice", name="Alice A")
    r = client.get("/api/auth/me", headers=headers)
    assert r.status_code == 200
    assert r.json()["user"] == user
    assert r.json()["user"]["name"] == "Alice A"


def test_change_password(client, make_user):
    _, headers = make_user("alice", password="old-pw")
    r = client.post("/api/auth/change-password", json={"oldPassword": "wrong", "newPassword": "new-pw"}, headers=headers)
    assert r.status_code == 400

    r = client.post("/api/auth/change-password", json={"oldPassword": "old-pw", "newPassword": "new-pw"}, headers=headers)
    assert r.status_code == 200
    assert client.post("/api/auth/login", json={"username": "alice", "password": "old-pw"}).status_code == 401
    assert client.post("/api/auth/login", json={"username": "alice", "password": "new-pw"}).status_code == 200
