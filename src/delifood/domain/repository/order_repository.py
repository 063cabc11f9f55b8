"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from delifood.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order with its lines and assign ``order.id``."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def update_status(self, order: Order) -> None:
        """Persist the status of an existing order. Nothing else is mutable."""

    @abstractmethod
    def list_by_status(self, statuses: Iterable[OrderStatus]) -> list[Order]:
        """Orders in any of *statuses*, newest first."""

    @abstractmethod
    def list_for_restaurant(self, restaurant_id: int, limit: int) -> list[Order]:
        """Orders with at least one line from the restaurant, newest first."""
