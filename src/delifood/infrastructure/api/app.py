"""HTTP API for quoting, confirming and tracking orders.

Status codes separate caller errors (4xx) from server and infrastructure
errors (5xx); the body always says ``success`` and carries a message, so
clients never have to infer the cause from the status alone.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from delifood.application.dto import CommitResult, FailureCode
from delifood.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    PersistenceError,
    ValidationError,
)
from delifood.infrastructure.api.schemas import (
    CartProblemOut,
    CartRequest,
    ConfirmOut,
    FailureOut,
    OrderListOut,
    OrderOut,
    OrderSummaryOut,
    QuoteOut,
    StatusUpdateIn,
    TotalsOut,
)
from delifood.infrastructure.bootstrap import Container
from delifood.infrastructure.logging import bind_context, clear_context

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-Id"

_FAILURE_STATUS = {
    FailureCode.EMPTY_CART: 400,
    FailureCode.MISSING_USER: 400,
    FailureCode.VALIDATION_FAILED: 409,
    FailureCode.PERSISTENCE_FAILED: 500,
}


def _failure(status_code: int, message: str, **extra) -> JSONResponse:
    body = FailureOut(message=message, **extra)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


def create_app(container: Container) -> FastAPI:
    app = FastAPI(title="delifood orders")
    app.state.container = container

    def get_container(request: Request) -> Container:
        return request.app.state.container

    # --- Middleware -----------------------------------------------------------

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        clear_context()
        bind_context(correlation_id=correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    # --- Error mapping --------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def malformed_request(request: Request, exc: RequestValidationError):
        return _failure(400, f"Malformed request: {exc.errors()[0]['msg']}")

    @app.exception_handler(EntityNotFoundError)
    async def not_found(request: Request, exc: EntityNotFoundError):
        return _failure(404, str(exc))

    @app.exception_handler(ValidationError)
    async def invalid(request: Request, exc: ValidationError):
        return _failure(400, str(exc))

    @app.exception_handler(PersistenceError)
    async def persistence_failed(request: Request, exc: PersistenceError):
        logger.error("Request failed on the store", error=str(exc))
        return _failure(500, "Server error, please retry")

    @app.exception_handler(DomainException)
    async def domain_error(request: Request, exc: DomainException):
        logger.error("Unhandled domain error", error=str(exc))
        return _failure(500, "Server error")

    # --- Routes ---------------------------------------------------------------

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "orders"}

    @app.post("/api/orders/preview")
    def preview_order(body: CartRequest, container: Container = Depends(get_container)):
        quote = container.quote_handler().handle(body.to_specs())
        return QuoteOut.from_dto(quote).model_dump(by_alias=True)

    @app.post("/api/orders/confirm")
    def confirm_order(body: CartRequest, container: Container = Depends(get_container)):
        result = container.confirm_handler().handle(body.user_id, body.to_specs())
        if not result.success:
            return _commit_failure(result)

        order = result.order
        return ConfirmOut(
            order_id=order.id,  # type: ignore[union-attr]
            totals=TotalsOut.from_dto(order.totals),  # type: ignore[union-attr]
            eta_minutes=order.eta_minutes,  # type: ignore[union-attr]
            message=result.message,
            warnings=[w.value for w in result.warnings],
        ).model_dump(by_alias=True)

    @app.post("/api/products/validate-cart")
    def validate_cart(body: CartRequest, container: Container = Depends(get_container)):
        problems = container.validate_cart_handler().handle(body.to_specs())
        if problems:
            return _failure(
                400,
                "Some products are not available",
                problems=[CartProblemOut.from_dto(p) for p in problems],
            )
        return {"success": True, "message": "Cart is valid"}

    @app.get("/api/orders/for-delivery")
    def orders_for_delivery(container: Container = Depends(get_container)):
        summaries = container.order_queries().active_for_delivery()
        return OrderListOut(
            orders=[OrderSummaryOut.from_dto(s) for s in summaries]
        ).model_dump(by_alias=True)

    @app.get("/api/orders/by-restaurant/{restaurant_id}")
    def orders_by_restaurant(restaurant_id: int, container: Container = Depends(get_container)):
        summaries = container.order_queries().for_restaurant(restaurant_id)
        return OrderListOut(
            orders=[OrderSummaryOut.from_dto(s) for s in summaries]
        ).model_dump(by_alias=True)

    @app.get("/api/orders/{order_id}")
    def show_order(order_id: int, container: Container = Depends(get_container)):
        order = container.show_order_handler().handle(order_id)
        return {"success": True, "order": OrderOut.from_dto(order).model_dump(by_alias=True)}

    @app.patch("/api/orders/{order_id}/status")
    def update_status(
        order_id: int, body: StatusUpdateIn, container: Container = Depends(get_container)
    ):
        order = container.update_status_handler().handle(order_id, body.status)
        return {"success": True, "order": OrderOut.from_dto(order).model_dump(by_alias=True)}

    return app


def _commit_failure(result: CommitResult) -> JSONResponse:
    status_code = _FAILURE_STATUS.get(result.failure, 500)  # type: ignore[arg-type]
    cart = QuoteOut.from_dto(result.quote).cart if result.quote is not None else None
    return _failure(
        status_code,
        result.message,
        code=result.failure.value if result.failure else None,
        cart=cart,
    )
