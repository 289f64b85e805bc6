"""Engine, session factory and the request-scoped session dependency.

The engine is built on first use from DATABASE_URL, so importing the
package (Alembic, tests, the client layer) never needs a database.

Transaction rule for request handlers:
    one session per request, committed when the handler returns and
    rolled back when it raises. Services flush but never commit, with
    one exception: concept generation commits before calling Gemini so
    no transaction is held open across the network call.

SQLite connections get ``PRAGMA foreign_keys=ON`` so that tests enforce
the checklist -> project reference the same way PostgreSQL does.
"""

from collections.abc import AsyncGenerator
from functools import lru_cache

import structlog
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from planner.config import get_database_echo, get_database_url
from planner.exceptions import ConfigurationError

log = structlog.get_logger(__name__)


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with pool settings suited to the backend."""
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=echo)
        _enable_sqlite_foreign_keys(engine)
        return engine
    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=10,
        max_overflow=5,
        pool_pre_ping=True,
    )


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Rows are serialized after the request commits
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@lru_cache
def get_engine() -> AsyncEngine:
    """Return the process-wide engine.

    Raises:
        ConfigurationError: DATABASE_URL is not set.
    """
    try:
        database_url = get_database_url()
    except ValueError as e:
        log.error("database_not_configured")
        raise ConfigurationError("Database not configured") from e
    return build_engine(database_url, echo=get_database_echo())


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return make_session_factory(get_engine())


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding the request's session.

    Commits when the handler returns, rolls back when it raises.

    Raises:
        ConfigurationError: DATABASE_URL is not set.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Close pooled connections if the engine was ever built."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
        get_engine.cache_clear()
        get_session_factory.cache_clear()


def create_test_engine(
    database_url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an in-memory engine and session factory for tests.

    All sessions share one connection (StaticPool), which keeps the
    in-memory database alive between them.
    """
    engine = create_async_engine(database_url, poolclass=StaticPool)
    _enable_sqlite_foreign_keys(engine)
    return engine, make_session_factory(engine)
