"""Abstract port onto the identity component."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from delifood.domain.model.user import User


class UserDirectory(ABC):

    @abstractmethod
    def get_by_id(self, user_id: int) -> User | None:
        """Resolve a user id, or None if nobody has it."""

    def get_many(self, user_ids: Iterable[int]) -> dict[int, User]:
        users: dict[int, User] = {}
        for user_id in set(user_ids):
            user = self.get_by_id(user_id)
            if user is not None:
                users[user_id] = user
        return users
