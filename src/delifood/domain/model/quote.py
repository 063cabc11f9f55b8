"""Quote — a non-persisted price and ETA estimate for a cart.

A quote is request-scoped and re-computable.  Line failures and the
service-hours gate are encoded as data so the caller can explain *why*
a cart cannot be ordered yet.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from delifood.domain.model.value_objects import Money


class LineFailure(Enum):
    PRODUCT_UNAVAILABLE = "PRODUCT_UNAVAILABLE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"


@dataclass(frozen=True)
class QuoteLine:
    """Outcome for one cart line.

    Accepted lines carry name, unit price, line total and preparation
    time.  Rejected lines carry a ``reason`` and, for stock failures,
    the quantity still ``available``.
    """

    product_id: int
    quantity: int
    ok: bool
    reason: LineFailure | None = None
    available: int | None = None
    name: str | None = None
    unit_price: Money | None = None
    line_total: Money | None = None
    preparation_time_minutes: int | None = None

    @staticmethod
    def accepted(
        product_id: int,
        quantity: int,
        name: str,
        unit_price: Money,
        preparation_time_minutes: int,
    ) -> QuoteLine:
        return QuoteLine(
            product_id=product_id,
            quantity=quantity,
            ok=True,
            name=name,
            unit_price=unit_price,
            line_total=unit_price * quantity,
            preparation_time_minutes=preparation_time_minutes,
        )

    @staticmethod
    def rejected(
        product_id: int,
        quantity: int,
        reason: LineFailure,
        available: int | None = None,
    ) -> QuoteLine:
        return QuoteLine(
            product_id=product_id,
            quantity=quantity,
            ok=False,
            reason=reason,
            available=available,
        )


@dataclass(frozen=True)
class Quote:
    """Priced, time-gated estimate.

    ``total`` and ``has_error`` are derived so that
    ``total == subtotal + delivery_fee`` and "has_error iff any line
    failed or outside service hours" cannot drift.
    """

    lines: tuple[QuoteLine, ...]
    subtotal: Money
    delivery_fee: Money
    eta_minutes: int
    within_service_hours: bool

    @property
    def total(self) -> Money:
        return self.subtotal + self.delivery_fee

    @property
    def accepted_lines(self) -> list[QuoteLine]:
        return [line for line in self.lines if line.ok]

    @property
    def rejected_lines(self) -> list[QuoteLine]:
        return [line for line in self.lines if not line.ok]

    @property
    def has_error(self) -> bool:
        return bool(self.rejected_lines) or not self.within_service_hours

    @property
    def is_committable(self) -> bool:
        return not self.has_error and not self.subtotal.is_zero
