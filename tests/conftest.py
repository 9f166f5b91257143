# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from maajod.main import create_app
from maajod.utils.config import Settings


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        jwt_secret="test-secret",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        summary_cache_ttl=300,
    )


@pytest.fixture()
def app(settings):
    app = create_app(settings)
    yield app
    app.state.engine.dispose()


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def make_user(client):
    # 註冊後登入，回傳 (user, headers)
    def _make(username: str, password: str = "pw-123456", name: str = None):
        r = client.post("/api/auth/register", json={"username": username, "password": password, "name": name or username})
        assert r.status_code == 201, r.text
        r = client.post("/api/auth/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        body = r.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}
    return _make


@pytest.fixture()
def make_store(client):
    def _make(headers: dict, name: str = "Shop1", description: str = None):
        r = client.post("/api/stores", json={"name": name, "description": description}, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["store"]
    return _make
