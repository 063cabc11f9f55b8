"""Application service: Confirm Order use case (the commit coordinator).

Turns a cart into a persisted order:

1. Reject caller errors (missing user, empty or malformed cart) before
   touching the catalog.
2. Re-price the cart against a *fresh* catalog snapshot with the same
   rules the quote used.  Any rejected line, an empty subtotal or a time
   outside service hours aborts with no state change.
3. Inside one unit of work: insert the order header, insert its lines
   with frozen unit prices, and conditionally decrement stock per line.
   A decrement that finds too little stock aborts the whole transaction.
4. After the transaction has committed, notify the user.  A failed
   notification is logged and reported as a warning; the order stands.
"""

from __future__ import annotations

import structlog

from delifood.application.clock import Clock, system_clock
from delifood.application.dto import (
    CartItemSpec,
    CommitResult,
    FailureCode,
    to_order_dto,
    to_quote_dto,
)
from delifood.domain.exceptions import (
    InsufficientStockError,
    InvalidCartError,
    NotificationError,
    PersistenceError,
)
from delifood.domain.model.cart import Cart
from delifood.domain.model.notification import Notification
from delifood.domain.model.order import Order
from delifood.domain.model.quote import Quote
from delifood.domain.repository.catalog_repository import CatalogRepository
from delifood.domain.repository.notifier import Notifier
from delifood.domain.repository.unit_of_work import Transaction, UnitOfWork
from delifood.domain.repository.user_directory import UserDirectory
from delifood.domain.service.pricing import PricingPolicy, ServiceHours
from delifood.domain.service.quote_builder import build_quote

logger = structlog.get_logger(__name__)

MISSING_USER_MESSAGE = "A user is required to confirm an order"
VALIDATION_FAILED_MESSAGE = "The order could not be confirmed. Check stock and service hours."
PERSISTENCE_FAILED_MESSAGE = "Server error while saving the order. Nothing was saved; please retry."


class ConfirmOrderHandler:

    def __init__(
        self,
        catalog: CatalogRepository,
        unit_of_work: UnitOfWork,
        notifier: Notifier,
        users: UserDirectory | None = None,
        policy: PricingPolicy | None = None,
        hours: ServiceHours | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self._catalog = catalog
        self._unit_of_work = unit_of_work
        self._notifier = notifier
        self._users = users
        self._policy = policy or PricingPolicy()
        self._hours = hours or ServiceHours()
        self._clock = clock

    def handle(self, user_id: int | None, item_specs: list[CartItemSpec]) -> CommitResult:
        log = logger.bind(user_id=user_id)

        # --- Caller errors: nothing has been read yet -------------------------
        if user_id is None:
            return self._reject(log, FailureCode.MISSING_USER, MISSING_USER_MESSAGE)
        try:
            cart = Cart.create((spec.product_id, spec.quantity) for spec in item_specs)
        except InvalidCartError as exc:
            return self._reject(log, FailureCode.EMPTY_CART, str(exc))
        if self._users is not None:
            try:
                user = self._users.get_by_id(user_id)
            except PersistenceError as exc:
                log.error("Identity store unavailable", error=str(exc))
                return CommitResult.failed(
                    FailureCode.PERSISTENCE_FAILED, PERSISTENCE_FAILED_MESSAGE
                )
            if user is None:
                return self._reject(log, FailureCode.MISSING_USER, f"Unknown user #{user_id}")

        # --- Re-validate against fresh stock ----------------------------------
        now = self._clock()
        try:
            snapshot = self._catalog.snapshot(cart.product_ids)
        except PersistenceError as exc:
            log.error("Catalog unavailable", error=str(exc))
            return CommitResult.failed(FailureCode.PERSISTENCE_FAILED, PERSISTENCE_FAILED_MESSAGE)

        quote = build_quote(cart, snapshot, now, self._policy, self._hours)
        if not quote.is_committable:
            return self._reject(
                log,
                FailureCode.VALIDATION_FAILED,
                self._describe_rejection(quote),
                quote=quote,
            )

        # --- Atomic step --------------------------------------------------------
        order = Order.place(user_id, quote, created_at=now)
        try:
            self._unit_of_work.run(lambda tx: self._persist(tx, order))
        except InsufficientStockError as exc:
            # Another commit took the stock between our snapshot and our update.
            return self._reject(
                log,
                FailureCode.VALIDATION_FAILED,
                f"{VALIDATION_FAILED_MESSAGE} {exc}",
            )
        except PersistenceError as exc:
            log.error("Order transaction rolled back", error=str(exc))
            return CommitResult.failed(FailureCode.PERSISTENCE_FAILED, PERSISTENCE_FAILED_MESSAGE)

        log.info(
            "Order committed",
            order_id=order.id,
            total=str(order.total.amount),
            eta_minutes=order.eta_minutes,
        )

        # --- Soft step: after commit, never rolls back ------------------------
        notification = Notification.order_confirmed(user_id, order.id, order.eta_minutes)  # type: ignore[arg-type]
        warnings: list[FailureCode] = []
        try:
            self._notifier.send(notification.user_id, notification.message)
        except NotificationError as exc:
            log.warning("Order notification failed", order_id=order.id, error=str(exc))
            warnings.append(FailureCode.NOTIFICATION_FAILED)

        return CommitResult.succeeded(to_order_dto(order), notification.message, warnings)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _persist(tx: Transaction, order: Order) -> None:
        tx.orders.add(order)
        for line in order.lines:
            if not tx.catalog.try_decrement(line.product_id, line.quantity.value):
                raise InsufficientStockError(line.product_id, line.quantity.value)

    def _reject(
        self,
        log: structlog.stdlib.BoundLogger,
        failure: FailureCode,
        message: str,
        quote: Quote | None = None,
    ) -> CommitResult:
        log.info("Order rejected", failure=failure.value, reason=message)
        quote_dto = to_quote_dto(quote, self._hours) if quote is not None else None
        return CommitResult.failed(failure, message, quote=quote_dto)

    def _describe_rejection(self, quote: Quote) -> str:
        reasons: list[str] = []
        if quote.rejected_lines:
            ids = ", ".join(f"#{line.product_id}" for line in quote.rejected_lines)
            reasons.append(f"unavailable or out of stock: {ids}")
        if not quote.within_service_hours:
            reasons.append(f"outside service hours ({self._hours.describe()})")
        if not reasons:
            reasons.append("the cart has nothing to order")
        return f"{VALIDATION_FAILED_MESSAGE} Problems: {'; '.join(reasons)}."
