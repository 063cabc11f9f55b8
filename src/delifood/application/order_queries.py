"""Application service: read-only order projections.

Feeds the delivery dashboard (every active order) and the restaurant
panel (orders that touch one restaurant's products).
"""

from __future__ import annotations

from delifood.application.dto import OrderSummaryDTO, format_timestamp
from delifood.domain.exceptions import ValidationError
from delifood.domain.model.order import ACTIVE_STATUSES, Order
from delifood.domain.model.product import Product
from delifood.domain.repository.catalog_repository import CatalogRepository
from delifood.domain.repository.order_repository import OrderRepository
from delifood.domain.repository.user_directory import UserDirectory

MAX_RESTAURANT_ORDERS = 50


class OrderQueryService:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: CatalogRepository,
        users: UserDirectory,
    ) -> None:
        self._order_repo = order_repo
        self._catalog = catalog
        self._users = users

    def active_for_delivery(self) -> list[OrderSummaryDTO]:
        """Pending, preparing and out-for-delivery orders, newest first."""
        return self._summarize(self._order_repo.list_by_status(ACTIVE_STATUSES))

    def for_restaurant(
        self, restaurant_id: int, limit: int = MAX_RESTAURANT_ORDERS
    ) -> list[OrderSummaryDTO]:
        """Orders with at least one of the restaurant's products, newest first."""
        if limit <= 0:
            raise ValidationError("Limit must be positive")
        limit = min(limit, MAX_RESTAURANT_ORDERS)
        return self._summarize(self._order_repo.list_for_restaurant(restaurant_id, limit))

    # --- Internal helpers -----------------------------------------------------

    def _summarize(self, orders: list[Order]) -> list[OrderSummaryDTO]:
        users = self._users.get_many(order.user_id for order in orders)
        products = self._catalog.snapshot(
            line.product_id for order in orders for line in order.lines
        )
        summaries: list[OrderSummaryDTO] = []
        for order in orders:
            client = users.get(order.user_id)
            summaries.append(
                OrderSummaryDTO(
                    id=order.id,  # type: ignore[arg-type]
                    user_id=order.user_id,
                    client_name=client.name if client else None,
                    client_username=client.username if client else None,
                    restaurant_id=self._restaurant_of(order, products),
                    status=order.status.value,
                    total=order.total.amount,
                    delivery_fee=order.delivery_fee.amount,
                    eta_minutes=order.eta_minutes,
                    created_at=format_timestamp(order.created_at),
                )
            )
        return summaries

    @staticmethod
    def _restaurant_of(order: Order, products: dict[int, Product]) -> int | None:
        # Lowest restaurant id among the lines. Carts are assumed to hold a
        # single restaurant's products; a mixed cart reports only one of them.
        restaurant_ids = [
            products[line.product_id].restaurant_id
            for line in order.lines
            if line.product_id in products
        ]
        return min(restaurant_ids) if restaurant_ids else None
