"""
CanvasKV Gateway: KV Entry SQLAlchemy Model
============================================

What:  ORM model for the `kv_entries` table backing the sql store.
How:   One row per key; values are opaque strings (the gateway stores JSON
       text for canvas records and whatever clients send for bulk puts).
Who:   Used by SqlKVStore and by Alembic.

Table Design:
    - key: primary key; prefix listing uses `key LIKE 'prefix%'`, which the
      primary key B-tree index serves on PostgreSQL with C collation.
    - value: TEXT, no length limit (canvas documents can be large)
    - updated_at: last write time, informational only
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from canvaskv.database import Base


class KVEntry(Base):
    """A single key/value pair. Rows are overwritten in place; last write wins."""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(
        String(512),
        primary_key=True,
        comment="Store key, e.g. excalidraw-canvas-meta:<uuid>",
    )

    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Opaque string value",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this key was last written (UTC)",
    )

    def __repr__(self) -> str:
        return f"<KVEntry(key='{self.key}', updated_at='{self.updated_at}')>"
