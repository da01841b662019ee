"""Pytest fixtures — file-backed SQLite database recreated for every test."""
import os

# Settings are read at import time; point them at the test database before the app loads.
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["OPENAI_API_KEY"] = ""

from datetime import datetime, timezone, timedelta
from typing import Optional

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from eventsync.assistant.model_client import ModelClientError
from eventsync.database import Base, get_db
from eventsync.deps import get_model_client
from eventsync.main import app

# Import all models so they register with Base.metadata
from eventsync.models.user import User                # noqa: F401
from eventsync.models.event import Event              # noqa: F401
from eventsync.models.invitation import Invitation    # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session for service-level tests."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Stub language model
# ---------------------------------------------------------------------------
class StubModelClient:
    """Returns canned text and records every prompt it was given."""

    def __init__(self, reply: str = "", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise ModelClientError("connection refused")
        return self.reply


def use_model(reply: str = "", fail: bool = False) -> StubModelClient:
    """Install a stub model client for the current test's app."""
    stub = StubModelClient(reply=reply, fail=fail)
    app.dependency_overrides[get_model_client] = lambda: stub
    return stub


# ---------------------------------------------------------------------------
# Helpers: identity headers, users and events via the API
# ---------------------------------------------------------------------------
def auth_headers(name: str = "Alice", email: Optional[str] = None) -> dict:
    """Headers the auth gateway would forward for ``name``."""
    return {
        "X-Auth-Subject": f"auth|{name.lower()}",
        "X-Auth-Email": email or f"{name.lower()}@example.com",
        "X-Auth-First-Name": name,
    }


def create_test_user(client: TestClient, name: str = "Alice", email: Optional[str] = None) -> dict:
    """Helper — sign in via GET /api/users/me and return response JSON."""
    resp = client.get("/api/users/me", headers=auth_headers(name, email))
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_test_event(client: TestClient, name: str = "Alice", title: str = "Test Event",
                      start_offset_hours: int = 24, duration_hours: Optional[int] = 1, **fields):
    """Helper — POST /api/events as ``name`` and return the response."""
    start = datetime.now(timezone.utc) + timedelta(hours=start_offset_hours)
    payload = {"title": title, "start_time_utc": start.isoformat(), **fields}
    if duration_hours is not None:
        payload["end_time_utc"] = (start + timedelta(hours=duration_hours)).isoformat()
    return client.post("/api/events/", json=payload, headers=auth_headers(name))


def invite(client: TestClient, event_id: str, email: str, name: str = "Alice"):
    """Helper — POST an invitation as ``name``."""
    return client.post(
        f"/api/events/{event_id}/invitations",
        json={"email": email},
        headers=auth_headers(name),
    )
