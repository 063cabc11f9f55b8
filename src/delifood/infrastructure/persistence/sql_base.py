"""Shared connection handling for the SQL repositories.

A repository is built either on an Engine (each call runs in its own
short transaction) or on a Connection handed out by the unit of work
(calls join the caller's transaction).  Driver errors are translated to
PersistenceError so nothing above this layer depends on SQLAlchemy.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from delifood.domain.exceptions import PersistenceError


class SqlRepository:

    def __init__(self, bind: Engine | Connection) -> None:
        self._bind = bind

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        try:
            if isinstance(self._bind, Connection):
                yield self._bind
            else:
                with self._bind.begin() as conn:
                    yield conn
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Database error: {exc}") from exc


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
