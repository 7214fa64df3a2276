"""
CanvasKV Gateway: SQL Store
============================

What:  KVStore backed by the `kv_entries` table through async SQLAlchemy.
How:   Every operation opens its own short session from the session factory,
       so concurrent fan-out branches of one request never share a session.
Who:   Selected with KV_BACKEND=sql. PostgreSQL (asyncpg) in production,
       SQLite (aiosqlite) in tests.

Write semantics:
    put() is a single INSERT ... ON CONFLICT (key) DO UPDATE statement in the
    dialect of the engine (PostgreSQL or SQLite). Concurrent writers to the
    same key never collide on the primary key; the last statement to commit
    wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine

from canvaskv.database import Base, build_session_factory
from canvaskv.models.kv_entry import KVEntry
from canvaskv.stores.base import KVStore

logger = logging.getLogger(__name__)


class SqlKVStore(KVStore):
    backend_name = "sql"

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = build_session_factory(engine)

    async def create_schema(self) -> None:
        """
        Create kv_entries if it does not exist.

        For development databases; production schemas are managed by Alembic.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("kv_entries schema ensured on %s", self.engine.url.render_as_string(hide_password=True))

    def _upsert(self, key: str, value: str):
        insert = sqlite.insert if self.engine.dialect.name == "sqlite" else postgresql.insert
        stmt = insert(KVEntry).values(
            key=key, value=value, updated_at=datetime.now(timezone.utc)
        )
        return stmt.on_conflict_do_update(
            index_elements=[KVEntry.key],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )

    async def get(self, key: str) -> Optional[str]:
        async with self._session_factory() as session:
            entry = await session.get(KVEntry, key)
            return entry.value if entry is not None else None

    async def put(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(self._upsert(key, value))

    async def delete(self, key: str) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(delete(KVEntry).where(KVEntry.key == key))

    async def list_keys(self, prefix: str = "") -> List[Dict[str, Any]]:
        stmt = select(KVEntry.key).order_by(KVEntry.key)
        if prefix:
            # autoescape: '%' and '_' inside the prefix match literally
            stmt = stmt.where(KVEntry.key.startswith(prefix, autoescape=True))

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [{"name": key} for key in result.scalars().all()]

    async def health_check(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("SQL store health check failed: %s", str(e))
            return False

    async def close(self) -> None:
        await self.engine.dispose()
