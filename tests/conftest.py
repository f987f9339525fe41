import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import pytest
from fastapi.testclient import TestClient

from pftodo.app import create_app
from pftodo.auth.session import SessionStore
from pftodo.core.config import Settings

TEST_ITERATIONS = 1000


class FakeClock:
    """Manually advanced monotonic clock for session-expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        kdf_iterations=TEST_ITERATIONS,
        secret_key="test-secret",
        log_level="WARNING",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def app(settings, clock):
    return create_app(settings, sessions=SessionStore(settings.session_ttl_seconds, clock=clock))


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def make_client(app):
    """Extra clients with their own cookie jar (one per simulated browser)."""

    def _make() -> TestClient:
        return TestClient(app)

    return _make


def register_and_login(client: TestClient, username: str, password: str) -> dict:
    r = client.post("/auth/register", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    r = client.post("/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()
