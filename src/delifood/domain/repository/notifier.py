"""Abstract port for user notifications.

Delivery is best-effort: implementations raise NotificationError on
failure and callers decide whether that matters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Notifier(ABC):

    @abstractmethod
    def send(self, user_id: int, message: str) -> None:
        """Deliver *message* to the user."""
