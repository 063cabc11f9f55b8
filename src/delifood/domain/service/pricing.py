"""Pricing and service-hours rules shared by quoting and committing.

Both policies are plain values so the quote builder stays a pure
function of its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from decimal import Decimal

from delifood.domain.exceptions import ValidationError
from delifood.domain.model.value_objects import Money

FREE_DELIVERY_THRESHOLD = Money(Decimal("500"))
FLAT_DELIVERY_FEE = Money(Decimal("40"))
DELIVERY_BUFFER_MINUTES = 20

OPENING_HOUR = 9
CLOSING_HOUR = 22


@dataclass(frozen=True)
class PricingPolicy:
    """Delivery fee and ETA rules.

    Delivery is free for an empty (or all-invalid) cart and for carts at
    or above the free-delivery threshold; everything else pays the flat
    fee.
    """

    free_delivery_threshold: Money = FREE_DELIVERY_THRESHOLD
    flat_fee: Money = FLAT_DELIVERY_FEE
    delivery_buffer_minutes: int = DELIVERY_BUFFER_MINUTES

    def __post_init__(self) -> None:
        if self.delivery_buffer_minutes < 0:
            raise ValidationError("Delivery buffer cannot be negative")
        if self.free_delivery_threshold.currency != self.flat_fee.currency:
            raise ValidationError("Threshold and flat fee must share a currency")

    @property
    def currency(self) -> str:
        return self.flat_fee.currency

    def delivery_fee_for(self, subtotal: Money) -> Money:
        if subtotal.is_zero or subtotal >= self.free_delivery_threshold:
            return Money.zero(self.currency)
        return self.flat_fee

    def eta_for(self, max_preparation_minutes: int) -> int:
        return max_preparation_minutes + self.delivery_buffer_minutes


@dataclass(frozen=True)
class ServiceHours:
    """Fixed daily window, inclusive on whole hours.

    With the defaults, 09:00 through 22:59 local time are inside the
    window.  ``timezone`` is the single zone the window is evaluated in;
    when it is None the timestamp's own wall clock is used.
    """

    opening_hour: int = OPENING_HOUR
    closing_hour: int = CLOSING_HOUR
    timezone: tzinfo | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not 0 <= self.opening_hour <= 23 or not 0 <= self.closing_hour <= 23:
            raise ValidationError("Service hours must be between 0 and 23")
        if self.opening_hour > self.closing_hour:
            raise ValidationError(
                f"Opening hour {self.opening_hour} is after closing hour {self.closing_hour}"
            )

    def local_time(self, now: datetime) -> datetime:
        if self.timezone is not None and now.tzinfo is not None:
            return now.astimezone(self.timezone)
        return now

    def contains(self, now: datetime) -> bool:
        hour = self.local_time(now).hour
        return self.opening_hour <= hour <= self.closing_hour

    def describe(self) -> str:
        return f"{self.opening_hour:02d}:00-{self.closing_hour:02d}:00"
