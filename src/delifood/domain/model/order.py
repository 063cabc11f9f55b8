"""Order aggregate — the persisted result of a successful commit.

The Order is an aggregate root that owns its lines.  It is created only
by the commit coordinator and is immutable afterwards, except for status
transitions made by restaurant and delivery actors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from delifood.domain.exceptions import ValidationError
from delifood.domain.model.quote import Quote
from delifood.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


ACTIVE_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.OUT_FOR_DELIVERY,
)

_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING: (OrderStatus.PREPARING, OrderStatus.CANCELLED),
    OrderStatus.PREPARING: (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED),
    OrderStatus.OUT_FOR_DELIVERY: (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}


@dataclass(frozen=True)
class OrderLine:
    """One accepted cart line, with the unit price frozen at commit time.

    Later catalog price changes never reach an existing line.
    """

    product_id: int
    quantity: Quantity
    unit_price: Money  # locked at commit time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Order:
    """Aggregate root for placed orders.

    Use the ``Order.place()`` factory for new orders; it only accepts a
    committable quote.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    user_id: int
    lines: list[OrderLine]
    delivery_fee: Money
    eta_minutes: int
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(user_id: int, quote: Quote, created_at: datetime | None = None) -> Order:
        """Build a pending order from a quote computed against fresh stock."""
        if not quote.is_committable:
            raise ValidationError("Cannot place an order from a quote with errors")

        lines = [
            OrderLine(
                product_id=line.product_id,
                quantity=Quantity(line.quantity),
                unit_price=line.unit_price,  # type: ignore[arg-type]
            )
            for line in quote.accepted_lines
        ]
        order = Order(
            id=None,
            user_id=user_id,
            lines=lines,
            delivery_fee=quote.delivery_fee,
            eta_minutes=quote.eta_minutes,
        )
        if created_at is not None:
            order.created_at = created_at
        return order

    # --- State transitions ----------------------------------------------------

    def transition_to(self, new_status: OrderStatus) -> None:
        """Move the order along ``pending -> preparing -> out_for_delivery
        -> delivered``, or to ``cancelled`` from any non-terminal state."""
        if self.status == new_status:
            raise ValidationError(f"Order is already {self.status.value}")
        if new_status not in _TRANSITIONS[self.status]:
            raise ValidationError(
                f"Cannot move order from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    def cancel(self) -> None:
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError("Order is already cancelled")
        if self.status == OrderStatus.DELIVERED:
            raise ValidationError("Cannot cancel order in delivered status")
        self.status = OrderStatus.CANCELLED

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero(self.delivery_fee.currency)
        for line in self.lines:
            result = result + line.line_total
        return result

    @property
    def total(self) -> Money:
        return self.subtotal + self.delivery_fee

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
