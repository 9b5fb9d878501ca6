"""
tests/conftest.py -- Shared test fixtures for Favorite Countries integration tests.

This module provides:
  - _make_test_engine(): an isolated in-memory database per test module
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient over the real app with a seeded role table
  - make_user: factory that creates a user directly in the store and returns
    x-access-token headers for it

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

ENVIRONMENT and RATE_LIMIT_ENABLED must be set before any app import so
get_settings() generates a dev SECRET_KEY and the limiter is built disabled.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any api/auth/core import -- Settings is cached on first use.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app, attach_stores
from auth.models import RoleName, User
from auth.tokens import create_access_token, hash_password
from core.db import create_db_engine

# ---------------------------------------------------------------------------
# Engine helpers
# ---------------------------------------------------------------------------


def _make_test_engine(db_suffix: str) -> Engine:
    """Create an isolated named shared-memory SQLite engine.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return create_db_engine(f"sqlite:///file:test_countries_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(engine: Engine):
    """Return an async context manager that replaces the real lifespan.

    Uses the same attach_stores() as production startup, so role seeding
    runs exactly as it does on a real first boot.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        attach_stores(app, engine)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app backed by a fresh in-memory DB."""
    engine = _make_test_engine(request.module.__name__.rsplit(".", 1)[-1])
    app.router.lifespan_context = _patch_lifespan(engine)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    engine.dispose()


@pytest.fixture(scope="module")
def make_user(api_client: TestClient) -> Callable[..., dict[str, str]]:
    """Return a factory: make_user(username, roles=("user",), password=...) -> auth headers.

    The user is written straight into the store (no HTTP round trip) and the
    returned dict is ready to pass as headers=... on any request.
    """

    def _make(username: str, roles: tuple[str, ...] = ("user",), password: str = "secret123") -> dict[str, str]:
        user_store = api_client.app.state.user_store
        role_names = [RoleName(r) for r in roles]
        uid = user_store.create_user(
            User(
                username=username,
                email=f"{username}@example.com",
                hashed_password=hash_password(password),
                roles=role_names,
            )
        )
        token = create_access_token(uid, username, role_names, expire_seconds=3600)
        return {"x-access-token": token}

    return _make
