"""
Shared test fixtures for the conference backend.

Each test gets its own SQLite database file and an in-memory task queue,
so no broker or database server is needed.
"""

import pytest
from fastapi.testclient import TestClient

from conference_central.config import Settings
from conference_central.main import create_app
from conference_central.services.dispatch import InMemoryTaskQueue

AUTH_EMAIL_HEADER = "X-Goog-Authenticated-User-Email"
AUTH_USER_ID_HEADER = "X-Goog-Authenticated-User-Id"


def auth_headers(email: str = "lemoncake@example.com", user_id: str | None = "u1") -> dict:
    """Headers the identity-aware proxy would attach for this caller."""
    headers = {AUTH_EMAIL_HEADER: f"accounts.google.com:{email}"}
    if user_id is not None:
        headers[AUTH_USER_ID_HEADER] = f"accounts.google.com:{user_id}"
    return headers


def count_rows(session_factory, model) -> int:
    with session_factory() as session:
        return session.query(model).count()


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'conference.db'}",
        use_in_memory_task_queue=True,
        statsig_server_secret=None,
        transaction_retries=3,
    )


@pytest.fixture()
def task_queue():
    return InMemoryTaskQueue()


@pytest.fixture()
def app(settings, task_queue):
    return create_app(settings, task_queue=task_queue)


@pytest.fixture()
def client(app):
    # Context manager runs startup, which creates the tables
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def session_factory(app, client):
    return app.state.session_factory


@pytest.fixture()
def dispatcher(app):
    return app.state.dispatcher


@pytest.fixture()
def api(settings):
    """Prefix-aware path builder: api("/profile") -> "/api/conference/v1/profile"."""
    return lambda path: f"{settings.api_prefix}{path}"
