"""SQLAlchemy ORM models (sql store backend)."""
