"""Notifier that stores notifications in the notifications table.

Writes in its own short transaction, strictly after the order
transaction has committed, so a failure here can never undo an order.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import Engine, insert
from sqlalchemy.exc import SQLAlchemyError

from delifood.domain.exceptions import NotificationError
from delifood.domain.repository.notifier import Notifier
from delifood.infrastructure.persistence.tables import notifications

logger = structlog.get_logger(__name__)


class SqlNotifier(Notifier):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def send(self, user_id: int, message: str) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    insert(notifications).values(
                        user_id=user_id,
                        message=message,
                        created_at=datetime.now(timezone.utc),
                    )
                )
        except SQLAlchemyError as exc:
            raise NotificationError(f"Could not store notification: {exc}") from exc
        logger.debug("Notification stored", user_id=user_id)
