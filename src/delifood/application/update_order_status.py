"""Application service: Update Order Status use case.

Restaurant and delivery actors move an order along
``pending -> preparing -> out_for_delivery -> delivered`` or cancel it.
Cancelling does not return stock to the catalog.
"""

from __future__ import annotations

import structlog

from delifood.application.dto import OrderDTO, to_order_dto
from delifood.domain.exceptions import EntityNotFoundError, ValidationError
from delifood.domain.model.order import OrderStatus
from delifood.domain.repository.unit_of_work import Transaction, UnitOfWork

logger = structlog.get_logger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, unit_of_work: UnitOfWork) -> None:
        self._unit_of_work = unit_of_work

    def handle(self, order_id: int, new_status: str) -> OrderDTO:
        status = self._parse_status(new_status)

        def work(tx: Transaction) -> OrderDTO:
            order = tx.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            previous = order.status
            if status == OrderStatus.CANCELLED:
                order.cancel()
            else:
                order.transition_to(status)
            tx.orders.update_status(order)
            logger.info(
                "Order status changed",
                order_id=order_id,
                from_status=previous.value,
                to_status=order.status.value,
            )
            return to_order_dto(order)

        return self._unit_of_work.run(work)

    @staticmethod
    def _parse_status(raw: str) -> OrderStatus:
        try:
            return OrderStatus(raw.strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise ValidationError(f"Unknown order status '{raw}' (expected one of: {allowed})")
