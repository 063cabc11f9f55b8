"""Notification sent to a user after an order is committed."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class Notification:
    user_id: int
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def order_confirmed(user_id: int, order_id: int, eta_minutes: int) -> Notification:
        return Notification(
            user_id=user_id,
            message=(
                f"Your order #{order_id} has been confirmed. "
                f"Estimated time: {eta_minutes} min."
            ),
        )
