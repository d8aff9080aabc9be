# tests/test_auth.py
import asyncio
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from octa_api.auth import TokenService
from octa_api.main import create_app
from conftest import SECRET, make_settings


def register_and_login(client, username="bob", password="builder"):
    r = client.post("/auth/register", json={"username": username, "password": password})
    assert r.status_code == 201
    user_id = r.json()["userId"]
    r2 = client.post("/auth/login", json={"username": username, "password": password})
    assert r2.status_code == 200
    return user_id, r2.json()["token"]


def test_login_token_is_accepted_by_session_check(client):
    user_id, token = register_and_login(client)
    r = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json() == {"userId": user_id}


def test_wrong_password_and_unknown_user_look_the_same(client):
    register_and_login(client)
    wrong = client.post("/auth/login", json={"username": "bob", "password": "nope"})
    unknown = client.post("/auth/login", json={"username": "nobody", "password": "builder"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"message": "Invalid credentials"}


def test_register_duplicate_username(client):
    register_and_login(client)
    r = client.post("/auth/register", json={"username": "bob", "password": "other"})
    assert r.status_code == 400
    assert r.json() == {"message": "Username taken"}


def test_passwords_are_not_stored_in_plaintext(client, store):
    register_and_login(client, "carol", "s3cret")
    users = asyncio.run(store.users.find({"username": "carol"}))
    assert len(users) == 1
    assert "password" not in users[0]
    assert users[0]["password_hash"] != "s3cret"
    assert users[0]["password_hash"].startswith("$2")


def test_session_without_header(client):
    r = client.get("/auth/session")
    assert r.status_code == 401
    assert r.json() == {"message": "Unauthorized"}


def test_session_with_non_bearer_header(client):
    r = client.get("/auth/session", headers={"Authorization": "Basic Ym9iOmJ1aWxkZXI="})
    assert r.status_code == 401
    assert r.json() == {"message": "Unauthorized"}


def test_session_with_garbage_token(client):
    r = client.get("/auth/session", headers={"Authorization": "Bearer not.a.token"})
    assert r.status_code == 401
    assert r.json() == {"message": "Token expired or invalid"}


def test_logout_does_not_revoke_token(client):
    _, token = register_and_login(client)
    r = client.post("/auth/logout")
    assert r.status_code == 200
    assert r.json() == {"message": "Logout successful"}
    r2 = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert r2.status_code == 200


def test_token_expires_exactly_one_hour_after_login(store):
    now = [datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)]
    tokens = TokenService({"v1": SECRET}, clock=lambda: now[0])
    app = create_app(make_settings(), store=store, tokens=tokens)
    with TestClient(app) as client:
        _, token = register_and_login(client)
        headers = {"Authorization": f"Bearer {token}"}
        now[0] += timedelta(minutes=59, seconds=59)
        assert client.get("/auth/session", headers=headers).status_code == 200
        now[0] += timedelta(seconds=1)
        r = client.get("/auth/session", headers=headers)
    assert r.status_code == 401
    assert r.json() == {"message": "Token expired or invalid"}


def test_register_rejects_password_over_72_bytes(client):
    # 40 characters, 80 bytes in UTF-8
    r = client.post("/auth/register", json={"username": "eve", "password": "\u00e9" * 40})
    assert r.status_code == 422
    assert r.json()["message"] == "Invalid request"
    r2 = client.post("/auth/register", json={"username": "eve", "password": "\u00e9" * 36})
    assert r2.status_code == 201


def test_resource_routes_require_a_token(client):
    r = client.get("/products")
    assert r.status_code == 401
    assert r.json() == {"message": "Unauthorized"}
    r2 = client.post("/categories", json={"cname": "x"}, headers={"Authorization": "Bearer junk"})
    assert r2.status_code == 401
    assert r2.json() == {"message": "Token expired or invalid"}


def test_resource_routes_open_when_auth_disabled(store):
    app = create_app(make_settings(require_auth=False), store=store)
    with TestClient(app) as client:
        r = client.get("/products")
    assert r.status_code == 200
    assert r.json() == []


def test_login_body_is_validated(client):
    r = client.post("/auth/login", json={"username": "bob"})
    assert r.status_code == 422
    assert r.json()["message"] == "Invalid request"
