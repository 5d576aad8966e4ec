"""Alembic environment for the series catalog schema.

Migrations run on a synchronous driver (psycopg2 for PostgreSQL, pysqlite
for debug databases) and are serialized across workers with a PostgreSQL
advisory lock, since every replica may run them on startup.
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import Connection, create_engine, text

# api/ must be importable when alembic is invoked from any directory
sys.path.insert(0, str(Path(__file__).parent.parent))

import models  # noqa: E402,F401
from alembic import context  # noqa: E402
from core.config import get_settings  # noqa: E402
from core.database import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic")

target_metadata = Base.metadata

MIGRATION_LOCK_KEY = 581203947
LOCK_TIMEOUT_SECONDS = 120
LOCK_POLL_SECONDS = 2

_SYNC_DRIVERS = {"+asyncpg": "+psycopg2", "+aiosqlite": ""}


def sync_database_url(url: str) -> str:
    """Swap the app's async driver for its synchronous counterpart."""
    for async_driver, sync_driver in _SYNC_DRIVERS.items():
        if async_driver in url:
            return url.replace(async_driver, sync_driver)
    return url


@contextmanager
def migration_lock(connection: Connection) -> Iterator[None]:
    """Hold the catalog's advisory lock for the duration of the block.

    A no-op on SQLite, which only ever has a single local writer.
    """
    if connection.dialect.name != "postgresql":
        yield
        return

    deadline = time.monotonic() + LOCK_TIMEOUT_SECONDS
    while not connection.execute(
        text("SELECT pg_try_advisory_lock(:key)"), {"key": MIGRATION_LOCK_KEY}
    ).scalar():
        if time.monotonic() >= deadline:
            raise RuntimeError(
                f"Could not acquire the migration lock within "
                f"{LOCK_TIMEOUT_SECONDS}s; another migrator may be stuck"
            )
        logger.debug("migration.lock.waiting")
        time.sleep(LOCK_POLL_SECONDS)

    # Session-level lock: commit so Alembic starts a clean transaction
    connection.commit()
    logger.info("migration.lock.acquired")
    try:
        yield
    finally:
        connection.execute(
            text("SELECT pg_advisory_unlock(:key)"), {"key": MIGRATION_LOCK_KEY}
        )
        connection.commit()
        logger.info("migration.lock.released")


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of applying it."""
    context.configure(
        url=sync_database_url(get_settings().database_url),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(sync_database_url(get_settings().database_url))

    with engine.connect() as connection, migration_lock(connection):
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()

    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
