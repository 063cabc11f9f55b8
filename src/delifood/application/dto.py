"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the application layer and its callers (CLI,
HTTP) without exposing domain internals.  Amounts stay as Decimal so
each caller can format them its own way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from delifood.domain.model.order import Order
from delifood.domain.model.quote import Quote
from delifood.domain.service.pricing import ServiceHours


@dataclass(frozen=True)
class CartItemSpec:
    """Input: what the client asked for (product id + quantity)."""

    product_id: int
    quantity: int


@dataclass(frozen=True)
class TotalsDTO:
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal


@dataclass(frozen=True)
class QuoteLineDTO:
    product_id: int
    quantity: int
    ok: bool
    reason: str | None = None
    available: int | None = None
    name: str | None = None
    unit_price: Decimal | None = None
    line_total: Decimal | None = None


@dataclass(frozen=True)
class QuoteDTO:
    """Output: a priced, time-gated quote. ``success == not has_error``."""

    has_error: bool
    lines: list[QuoteLineDTO]
    totals: TotalsDTO
    eta_minutes: int
    within_service_hours: bool
    service_hours_message: str

    @property
    def success(self) -> bool:
        return not self.has_error


@dataclass(frozen=True)
class OrderLineDTO:
    product_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class OrderDTO:
    """Output: a persisted order with its frozen line prices."""

    id: int
    user_id: int
    status: str
    lines: list[OrderLineDTO]
    totals: TotalsDTO
    eta_minutes: int
    created_at: str


@dataclass(frozen=True)
class OrderSummaryDTO:
    """Output: one row of a delivery or restaurant order list."""

    id: int
    user_id: int
    client_name: str | None
    client_username: str | None
    restaurant_id: int | None
    status: str
    total: Decimal
    delivery_fee: Decimal
    eta_minutes: int
    created_at: str


@dataclass(frozen=True)
class CartProblemDTO:
    product_id: int
    reason: str
    requested: int
    name: str | None = None
    available: int | None = None


class FailureCode(Enum):
    EMPTY_CART = "EMPTY_CART"
    MISSING_USER = "MISSING_USER"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
    NOTIFICATION_FAILED = "NOTIFICATION_FAILED"


@dataclass(frozen=True)
class CommitResult:
    """Output of a commit: either a persisted order or a structured failure.

    ``warnings`` only ever holds NOTIFICATION_FAILED, which never turns a
    successful commit into a failed one.
    """

    success: bool
    message: str
    order: OrderDTO | None = None
    failure: FailureCode | None = None
    quote: QuoteDTO | None = None
    warnings: list[FailureCode] = field(default_factory=list)

    @staticmethod
    def succeeded(
        order: OrderDTO, message: str, warnings: list[FailureCode] | None = None
    ) -> CommitResult:
        return CommitResult(
            success=True, message=message, order=order, warnings=list(warnings or [])
        )

    @staticmethod
    def failed(
        failure: FailureCode, message: str, quote: QuoteDTO | None = None
    ) -> CommitResult:
        return CommitResult(success=False, message=message, failure=failure, quote=quote)


# --- Mapping ------------------------------------------------------------------


def to_quote_dto(quote: Quote, hours: ServiceHours) -> QuoteDTO:
    if quote.within_service_hours:
        hours_message = "Within service hours"
    else:
        hours_message = f"Outside service hours ({hours.describe()})"

    return QuoteDTO(
        has_error=quote.has_error,
        lines=[
            QuoteLineDTO(
                product_id=line.product_id,
                quantity=line.quantity,
                ok=line.ok,
                reason=line.reason.value if line.reason else None,
                available=line.available,
                name=line.name,
                unit_price=line.unit_price.amount if line.unit_price else None,
                line_total=line.line_total.amount if line.line_total else None,
            )
            for line in quote.lines
        ],
        totals=TotalsDTO(
            subtotal=quote.subtotal.amount,
            delivery_fee=quote.delivery_fee.amount,
            total=quote.total.amount,
        ),
        eta_minutes=quote.eta_minutes,
        within_service_hours=quote.within_service_hours,
        service_hours_message=hours_message,
    )


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        user_id=order.user_id,
        status=order.status.value,
        lines=[
            OrderLineDTO(
                product_id=line.product_id,
                quantity=line.quantity.value,
                unit_price=line.unit_price.amount,
                line_total=line.line_total.amount,
            )
            for line in order.lines
        ],
        totals=TotalsDTO(
            subtotal=order.subtotal.amount,
            delivery_fee=order.delivery_fee.amount,
            total=order.total.amount,
        ),
        eta_minutes=order.eta_minutes,
        created_at=format_timestamp(order.created_at),
    )


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%d %H:%M UTC")
