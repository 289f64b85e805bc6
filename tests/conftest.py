"""Shared pytest fixtures.

Provides an in-memory SQLite database (aiosqlite, StaticPool), the FastAPI
app with the session, caller identity and Gemini client dependencies
overridden, and an httpx client driving the app in-process.

The caller is chosen per request with the X-Test-User header (default:
USER_A), which makes cross-owner scenarios one header away.
"""

from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from cryptography.fernet import Fernet
from fastapi import Request

from planner.auth import get_current_user_id
from planner.clients.gemini import GeminiClient
from planner.database import create_test_engine, get_session
from planner.main import create_app
from planner.models import Base
from planner.routes.video_projects import get_gemini_client
from planner.utils.encryption import EncryptionService
from tests.support import USER_A


@pytest.fixture
def valid_fernet_key() -> str:
    """Generate a valid Fernet key for testing."""
    return Fernet.generate_key().decode()


@pytest.fixture
def encryption_env(valid_fernet_key: str, monkeypatch: pytest.MonkeyPatch):
    """Set FERNET_KEY and reset the EncryptionService singleton around the test."""
    EncryptionService.reset_instance()
    monkeypatch.setenv("FERNET_KEY", valid_fernet_key)
    yield valid_fernet_key
    EncryptionService.reset_instance()


@pytest.fixture
def no_shared_key(monkeypatch: pytest.MonkeyPatch):
    """Make sure no shared Gemini key leaks in from the environment."""
    monkeypatch.delenv("DEFAULT_GEMINI_API_KEY", raising=False)


@pytest_asyncio.fixture
async def session_factory():
    """Session factory bound to a fresh in-memory database with all tables."""
    engine, factory = create_test_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(session_factory):
    """Async session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def gemini_client() -> AsyncMock:
    """Gemini client double returning a fixed script."""
    mock = AsyncMock(spec=GeminiClient)
    mock.generate_text.return_value = "[Hook - 3 sec]\nYou: Stop scrolling."
    return mock


@pytest.fixture
def app(session_factory, gemini_client):
    """Planner app with database, identity and Gemini dependencies overridden."""
    application = create_app()

    async def override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def override_user(request: Request) -> str:
        return request.headers.get("X-Test-User", USER_A)

    application.dependency_overrides[get_session] = override_session
    application.dependency_overrides[get_current_user_id] = override_user
    application.dependency_overrides[get_gemini_client] = lambda: gemini_client
    return application


@pytest_asyncio.fixture
async def client(app):
    """httpx client calling the app in-process on the test event loop."""
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
