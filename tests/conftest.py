# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from octa_api.config import Settings
from octa_api.database import InMemoryStore
from octa_api.main import create_app

SECRET = "test-secret-0123456789abcdef0123456789abcdef"


def make_settings(**overrides):
    values = dict(
        store_backend="memory",
        jwt_keys={"v1": SECRET},
        bcrypt_rounds=4,
        require_auth=True,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def app(store):
    return create_app(make_settings(), store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_client(client):
    client.post("/auth/register", json={"username": "alice", "password": "wonderland"})
    token = client.post("/auth/login", json={"username": "alice", "password": "wonderland"}).json()["token"]
    client.headers.update({"Authorization": f"Bearer {token}"})
    return client
