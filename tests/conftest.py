import pytest
from fastapi.testclient import TestClient

from turnlist.admin import AdminControls
from turnlist.auth import AdminGuard
from turnlist.main import create_app
from turnlist.store import JsonFileStore, MemoryStore

PIN = "4321"


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def file_store(tmp_path):
    return JsonFileStore(tmp_path / "data" / "db.json")


@pytest.fixture
def guard():
    return AdminGuard(PIN, "test-secret")


@pytest.fixture
def token(guard):
    return guard.issue_trust()


@pytest.fixture
def controls(store, guard):
    return AdminControls(store, guard)


@pytest.fixture
def client(store, guard):
    with TestClient(create_app(store=store, guard=guard)) as c:
        yield c


@pytest.fixture
def admin_client(client):
    resp = client.post("/admin/login", data={"pin": PIN}, follow_redirects=False)
    assert resp.status_code == 302
    return client
