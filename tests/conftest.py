"""Shared fixtures: every test gets its own data directory."""

import pytest
from fastapi.testclient import TestClient

from web.backend.app import state


@pytest.fixture(autouse=True)
def data_home(tmp_path, monkeypatch):
    """Point all stores at a fresh temp dir and drop cached instances."""
    monkeypatch.setenv("PINTUKERJA_HOME", str(tmp_path))
    monkeypatch.setenv("PINTUKERJA_BCRYPT_ROUNDS", "4")
    state.reset_state()
    yield tmp_path
    state.reset_state()


@pytest.fixture
def client():
    from web.backend.app.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers():
    """Create an admin through the store (admins cannot self-register) and log in."""
    store = state.get_user_store()
    admin = store.register("admin", "rahasia-admin", "admin")
    session = store.create_session(admin.id)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def register_user(client):
    """Register through the API; returns ``(user_json, auth_headers)``."""

    def _register(username, role="job_seeker", **extra):
        body = {"username": username, "password": "rahasia-123", "role": role, **extra}
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register
