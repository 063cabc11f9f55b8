"""SQL implementation of UserDirectory (read side of the identity store)."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import Row, insert, select, update

from delifood.domain.model.user import Role, User
from delifood.domain.repository.user_directory import UserDirectory
from delifood.infrastructure.persistence.sql_base import SqlRepository
from delifood.infrastructure.persistence.tables import users


class SqlUserDirectory(SqlRepository, UserDirectory):

    def get_by_id(self, user_id: int) -> User | None:
        with self._connection() as conn:
            row = conn.execute(select(users).where(users.c.id == user_id)).first()
        return self._to_domain(row) if row is not None else None

    def get_many(self, user_ids: Iterable[int]) -> dict[int, User]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        with self._connection() as conn:
            rows = conn.execute(select(users).where(users.c.id.in_(ids))).all()
        return {row.id: self._to_domain(row) for row in rows}

    def save(self, user: User) -> None:
        """Insert or update a user. Used to seed the store."""
        values = {"name": user.name, "username": user.username, "role": user.role.value}
        with self._connection() as conn:
            exists = conn.execute(select(users.c.id).where(users.c.id == user.id)).first()
            if exists is None:
                conn.execute(insert(users).values(id=user.id, **values))
            else:
                conn.execute(update(users).where(users.c.id == user.id).values(**values))

    @staticmethod
    def _to_domain(row: Row) -> User:
        return User(id=row.id, name=row.name, username=row.username, role=Role(row.role))
