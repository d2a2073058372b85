__all__ = [
    "insert",
]

import typing as t

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session


def insert(table: t.Any, session: Session) -> postgresql.Insert | sqlite.Insert:
    """Return a dialect-specific INSERT for the session's bind.

    Both PostgreSQL and SQLite inserts carry on_conflict_do_nothing() and
    on_conflict_do_update(), which is what the storage layer needs for its
    constraint-backed get-or-create and upsert statements.
    """
    name = session.get_bind().dialect.name
    match name:
        case "postgresql":
            return postgresql.insert(table)
        case "sqlite":
            return sqlite.insert(table)
        case _:
            raise ArgumentError(f"unsupported dialect for upsert: {name}")
