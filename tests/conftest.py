"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; these must be in place first
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["ANTHROPIC_API_KEY"] = ""

import pytest
from collections.abc import AsyncGenerator
from httpx import ASGITransport, AsyncClient

from edunexus.access import Store, open_store
from edunexus.api.deps import get_store
from edunexus.main import app


@pytest.fixture
async def store(tmp_path) -> AsyncGenerator[Store, None]:
    """Freshly migrated and seeded store in a temporary SQLite file."""
    store = await open_store(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    yield store
    await store.close()


@pytest.fixture
async def client(store: Store) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


async def login_headers(client: AsyncClient, username: str, password: str | None = None) -> dict:
    """Sign in and return a bearer header; the session cookie is dropped."""
    response = await client.post("/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
