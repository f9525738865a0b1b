"""
tests/conftest.py -- Shared test fixtures for the car rental backend.

This module provides:
  - make_db(): isolated named shared-memory SQLite database
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus a user token for integration tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

Environment must be set before any api/auth/core import: DEBUG lets
get_settings() auto-generate SECRET_KEY, BCRYPT_ROUNDS keeps hashing fast, and
rate limiting is disabled so test volume never trips the limiter.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from pathlib import Path

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import ROLE_ADMIN, ROLE_USER, Principal
from auth.store import PrincipalStore
from auth.tokens import create_access_token, hash_password
from contact.store import ContactStore
from core.db import Database
from inventory.service import InventoryService
from inventory.store import CarStore
from media.store import ImageStore


def make_db(name: str) -> Database:
    """Create a named shared-memory SQLite database unique to this call."""
    return Database(f"sqlite:///file:test_{name}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(db: Database, upload_dir: Path):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.db = db
        app.state.user_store = PrincipalStore(db, ROLE_USER)
        app.state.admin_store = PrincipalStore(db, ROLE_ADMIN)
        app.state.contacts = ContactStore(db)
        app.state.images = ImageStore(upload_dir)
        app.state.inventory = InventoryService(CarStore(db), app.state.images)
        yield

    return test_lifespan


@pytest.fixture
def db() -> Generator[Database, None, None]:
    database = make_db("unit")
    yield database
    database.close()


@pytest.fixture
def image_store(tmp_path: Path) -> ImageStore:
    return ImageStore(tmp_path / "uploads")


@pytest.fixture(scope="module")
def api_client(tmp_path_factory) -> Generator[tuple[TestClient, str, Path], None, None]:
    """Yield (client, user_token, upload_dir) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers but use an isolated in-memory database and a
    temporary upload directory. One plain user (testuser@example.com /
    testpass123) exists before the client starts; the token belongs to it.
    """
    db = make_db("api")
    upload_dir = tmp_path_factory.mktemp("uploads")

    user = PrincipalStore(db, ROLE_USER).create(
        Principal(
            name="Test User",
            email="testuser@example.com",
            role=ROLE_USER,
            hashed_password=hash_password("testpass123"),
        )
    )
    token = create_access_token(user.id, user.role)

    app.router.lifespan_context = _patch_lifespan(db, upload_dir)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, upload_dir

    db.close()
