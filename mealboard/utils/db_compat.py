"""
Database compatibility helpers for SQLite and PostgreSQL.

Both dialects support ``INSERT ... ON CONFLICT``, but SQLAlchemy exposes it
through dialect-specific ``insert`` constructs.
"""
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_name(session: AsyncSession) -> str:
    """Name of the dialect the session is bound to ("sqlite", "postgresql")."""
    return session.get_bind().dialect.name


def upsert_insert(session: AsyncSession, table):
    """Return an insert construct supporting on_conflict_do_* for the session's dialect."""
    if dialect_name(session) == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)


def insert_or_ignore(session: AsyncSession, table, values: dict, conflict_columns: list):
    """INSERT that silently does nothing when the natural key already exists."""
    return (
        upsert_insert(session, table)
        .values(**values)
        .on_conflict_do_nothing(index_elements=conflict_columns)
    )
