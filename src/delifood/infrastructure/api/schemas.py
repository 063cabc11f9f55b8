"""Request and response bodies for the HTTP API.

Field names are camelCase on the wire; amounts are plain JSON numbers.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from delifood.application.dto import (
    CartItemSpec,
    CartProblemDTO,
    OrderDTO,
    OrderSummaryDTO,
    QuoteDTO,
    TotalsDTO,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _amount(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


# --- Requests -----------------------------------------------------------------


class CartItemIn(ApiModel):
    product_id: int
    quantity: int


class CartRequest(ApiModel):
    user_id: int | None = None
    items: list[CartItemIn] = Field(default_factory=list)

    def to_specs(self) -> list[CartItemSpec]:
        return [CartItemSpec(product_id=i.product_id, quantity=i.quantity) for i in self.items]


class StatusUpdateIn(ApiModel):
    status: str


# --- Responses ----------------------------------------------------------------


class TotalsOut(ApiModel):
    subtotal: float
    delivery_fee: float
    total: float

    @staticmethod
    def from_dto(dto: TotalsDTO) -> TotalsOut:
        return TotalsOut(
            subtotal=float(dto.subtotal),
            delivery_fee=float(dto.delivery_fee),
            total=float(dto.total),
        )


class LineResultOut(ApiModel):
    product_id: int
    quantity: int
    ok: bool
    reason: str | None = None
    available: int | None = None
    name: str | None = None
    unit_price: float | None = None
    line_total: float | None = None


class ServiceHoursOut(BaseModel):
    within_service_hours: bool = Field(alias="dentroHorario")
    message: str

    model_config = ConfigDict(populate_by_name=True)


class QuoteOut(ApiModel):
    success: bool
    has_error: bool
    cart: list[LineResultOut]
    totals: TotalsOut
    eta_minutes: int
    horario: ServiceHoursOut

    @staticmethod
    def from_dto(dto: QuoteDTO) -> QuoteOut:
        return QuoteOut(
            success=dto.success,
            has_error=dto.has_error,
            cart=[
                LineResultOut(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    ok=line.ok,
                    reason=line.reason,
                    available=line.available,
                    name=line.name,
                    unit_price=_amount(line.unit_price),
                    line_total=_amount(line.line_total),
                )
                for line in dto.lines
            ],
            totals=TotalsOut.from_dto(dto.totals),
            eta_minutes=dto.eta_minutes,
            horario=ServiceHoursOut(
                within_service_hours=dto.within_service_hours,
                message=dto.service_hours_message,
            ),
        )


class ConfirmOut(ApiModel):
    success: bool = True
    order_id: int
    totals: TotalsOut
    eta_minutes: int
    message: str
    warnings: list[str] = Field(default_factory=list)


class CartProblemOut(ApiModel):
    product_id: int
    reason: str
    requested: int
    name: str | None = None
    available: int | None = None

    @staticmethod
    def from_dto(dto: CartProblemDTO) -> CartProblemOut:
        return CartProblemOut(
            product_id=dto.product_id,
            reason=dto.reason,
            requested=dto.requested,
            name=dto.name,
            available=dto.available,
        )


class FailureOut(ApiModel):
    success: bool = False
    code: str | None = None
    message: str
    cart: list[LineResultOut] | None = None
    problems: list[CartProblemOut] | None = None


class OrderLineOut(ApiModel):
    product_id: int
    quantity: int
    unit_price: float
    line_total: float


class OrderOut(ApiModel):
    id: int
    user_id: int
    status: str
    lines: list[OrderLineOut]
    totals: TotalsOut
    eta_minutes: int
    created_at: str

    @staticmethod
    def from_dto(dto: OrderDTO) -> OrderOut:
        return OrderOut(
            id=dto.id,
            user_id=dto.user_id,
            status=dto.status,
            lines=[
                OrderLineOut(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=float(line.unit_price),
                    line_total=float(line.line_total),
                )
                for line in dto.lines
            ],
            totals=TotalsOut.from_dto(dto.totals),
            eta_minutes=dto.eta_minutes,
            created_at=dto.created_at,
        )


class OrderSummaryOut(ApiModel):
    id: int
    user_id: int
    client_name: str | None
    client_username: str | None
    restaurant_id: int | None
    status: str
    total: float
    delivery_fee: float
    eta_minutes: int
    created_at: str

    @staticmethod
    def from_dto(dto: OrderSummaryDTO) -> OrderSummaryOut:
        return OrderSummaryOut(
            id=dto.id,
            user_id=dto.user_id,
            client_name=dto.client_name,
            client_username=dto.client_username,
            restaurant_id=dto.restaurant_id,
            status=dto.status,
            total=float(dto.total),
            delivery_fee=float(dto.delivery_fee),
            eta_minutes=dto.eta_minutes,
            created_at=dto.created_at,
        )


class OrderListOut(ApiModel):
    success: bool = True
    orders: list[OrderSummaryOut]

