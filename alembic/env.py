"""Alembic environment for the planner schema.

DATABASE_URL is read through planner.config, so migrations and the
application always agree on the driver (asyncpg for PostgreSQL, aiosqlite
for local SQLite files). SQLite runs in batch mode because it cannot
ALTER most column definitions in place.

Usage:
    alembic revision --autogenerate -m "description"
    alembic upgrade head
    alembic upgrade head --sql   # print SQL without connecting
"""

import asyncio
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from planner.config import get_database_url
from planner.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _configure(database_url: str, **options: Any) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=database_url.startswith("sqlite"),
        **options,
    )


def run_migrations_offline(database_url: str) -> None:
    _configure(
        database_url,
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_on_connection(connection: Connection, database_url: str) -> None:
    _configure(database_url, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online(database_url: str) -> None:
    # Migrations are one-shot; no pooled connections to keep around
    engine = create_async_engine(database_url, poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_on_connection, database_url)
    finally:
        await engine.dispose()


url = get_database_url()
if context.is_offline_mode():
    run_migrations_offline(url)
else:
    asyncio.run(run_migrations_online(url))
