"""
Alembic Migration Environment
===============================

What:  Runs the kv_entries migrations for the sql store backend.
How:   Takes DATABASE_URL from canvaskv settings (alembic.ini carries no URL)
       and drives the async engine through connection.run_sync().
Who:   `alembic upgrade head`, run from the backend/ directory. Only needed
       when KV_BACKEND=sql.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from canvaskv.config import settings
from canvaskv.database import Base
from canvaskv.models.kv_entry import KVEntry  # noqa: F401  (registers kv_entries)

alembic_config = context.config
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)


def _configure(**kwargs) -> None:
    context.configure(target_metadata=Base.metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)


async def _run_online() -> None:
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    # `alembic upgrade head --sql`: emit DDL without connecting
    _configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_run_online())
