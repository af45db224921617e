"""Integration test fixtures: the FastAPI app over the test database."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from discipline_engine.api.app import create_app
from discipline_engine.api.dependencies import get_db_session
from discipline_engine.config import get_settings


@pytest_asyncio.fixture
async def client(session_factory, settings, world) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app()

    async def test_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = test_db_session
    app.dependency_overrides[get_settings] = lambda: settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def caller(user) -> dict[str, str]:
    """Identity headers for a seeded user."""
    return {"X-User-ID": str(user.user_id), "X-User-Role": user.role}
