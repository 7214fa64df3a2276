"""Create kv_entries table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `kv_entries` table backing KV_BACKEND=sql.
How:   Generic SQLAlchemy types only, so the same revision runs on PostgreSQL
       and SQLite.

Rollback: downgrade() drops the table (all stored keys are lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create kv_entries. See canvaskv/models/kv_entry.py for column docs."""
    op.create_table(
        "kv_entries",
        sa.Column(
            "key",
            sa.String(512),
            nullable=False,
            comment="Store key, e.g. excalidraw-canvas-meta:<uuid>",
        ),
        sa.Column(
            "value",
            sa.Text(),
            nullable=False,
            comment="Opaque string value",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this key was last written (UTC)",
        ),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    op.drop_table("kv_entries")
