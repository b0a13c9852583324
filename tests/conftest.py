import os
import tempfile

# Required settings must exist before the package is imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", os.path.join(tempfile.gettempdir(), "book_catalog_test.db"))

import pytest
from fastapi.testclient import TestClient

from book_catalog_api.app.core import db
from book_catalog_api.app.core.config import settings
from book_catalog_api.app.main import app


class FakeClock:
    """Deterministic replacement for ``db.utcnow``.

    Every call advances by one microsecond unless ``frozen`` is set.
    """

    def __init__(self):
        self.tick = 0
        self.frozen = False

    def __call__(self):
        if not self.frozen:
            self.tick += 1
        return f"2024-01-01T00:00:00.{self.tick:06d}+00:00"


@pytest.fixture
def database(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "catalog.db"))
    db.init_db()
    return settings.database_url


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(db, "utcnow", fake)
    return fake


@pytest.fixture
def client(database, clock):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(client):
    """Register a user and return ``(profile_id, auth_headers)``."""

    def _make(name="Ada", email=None, password="secret123"):
        email = email or f"{name.lower()}@example.com"
        resp = client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        assert resp.status_code == 201, resp.text
        headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}
        me = client.get("/api/v1/profiles/me", headers=headers)
        assert me.status_code == 200, me.text
        return me.json()["id"], headers

    return _make


@pytest.fixture
def make_book(client):
    """Create a book as the given user and return the response body."""

    def _make(headers, **overrides):
        payload = {
            "title": "The Hobbit",
            "author": "J.R.R. Tolkien",
            "description": "There and back again.",
            "genre": "Fantasy",
            "published_year": 1937,
        }
        payload.update(overrides)
        resp = client.post("/api/v1/books/", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
