"""Integration tests for showing, listing and updating committed orders."""

from datetime import datetime, timedelta, timezone

import pytest

from delifood.application.confirm_order import ConfirmOrderHandler
from delifood.application.dto import CartItemSpec
from delifood.application.order_queries import MAX_RESTAURANT_ORDERS, OrderQueryService
from delifood.application.show_order import ShowOrderHandler
from delifood.application.update_order_status import UpdateOrderStatusHandler
from delifood.domain.exceptions import EntityNotFoundError, ValidationError
from delifood.domain.model.product import Product
from delifood.domain.model.user import User
from delifood.domain.model.value_objects import Money
from tests.fakes import (
    OPEN_TIME,
    FakeCatalogRepository,
    FakeNotifier,
    FakeOrderRepository,
    FakeUnitOfWork,
    FakeUserDirectory,
)


class _Env:
    """Catalog with two restaurants and a clock that ticks one minute per call."""

    def __init__(self):
        self.catalog = FakeCatalogRepository([
            Product(id=1, restaurant_id=10, name="Tacos", price=Money.of("100"), stock=100),
            Product(id=4, restaurant_id=11, name="Pizza", price=Money.of("320"), stock=100),
        ])
        self.orders = FakeOrderRepository(restaurant_of={1: 10, 4: 11})
        self.uow = FakeUnitOfWork(self.catalog, self.orders)
        self.users = FakeUserDirectory([
            User(id=7, name="Ana Torres", username="ana"),
            User(id=8, name="Luis Pérez", username="luis"),
        ])
        self._ticks = 0

    def clock(self) -> datetime:
        self._ticks += 1
        return OPEN_TIME + timedelta(minutes=self._ticks)

    def place(self, user_id: int, *items: tuple[int, int]) -> int:
        handler = ConfirmOrderHandler(
            self.catalog, self.uow, FakeNotifier(), self.users, clock=self.clock
        )
        result = handler.handle(user_id, [CartItemSpec(pid, qty) for pid, qty in items])
        assert result.success, result.message
        return result.order.id

    def queries(self) -> OrderQueryService:
        return OrderQueryService(self.orders, self.catalog, self.users)


class TestShowOrder:

    def test_show_existing(self):
        env = _Env()
        order_id = env.place(7, (1, 2))

        dto = ShowOrderHandler(env.orders).handle(order_id)

        assert dto.id == order_id
        assert dto.status == "pending"
        assert dto.created_at == "2024-05-14 13:31 UTC"

    def test_show_missing(self):
        with pytest.raises(EntityNotFoundError, match="Order #5 not found"):
            ShowOrderHandler(FakeOrderRepository()).handle(5)


class TestUpdateOrderStatus:

    def test_advance(self):
        env = _Env()
        order_id = env.place(7, (1, 1))
        handler = UpdateOrderStatusHandler(env.uow)

        assert handler.handle(order_id, "preparing").status == "preparing"
        assert handler.handle(order_id, "OUT_FOR_DELIVERY").status == "out_for_delivery"
        assert env.orders.get_by_id(order_id).status.value == "out_for_delivery"

    def test_invalid_transition_leaves_status(self):
        env = _Env()
        order_id = env.place(7, (1, 1))

        with pytest.raises(ValidationError, match="Cannot move order from pending to delivered"):
            UpdateOrderStatusHandler(env.uow).handle(order_id, "delivered")
        assert env.orders.get_by_id(order_id).status.value == "pending"

    def test_unknown_status(self):
        env = _Env()
        order_id = env.place(7, (1, 1))
        with pytest.raises(ValidationError, match="Unknown order status 'lost'"):
            UpdateOrderStatusHandler(env.uow).handle(order_id, "lost")

    def test_unknown_order(self):
        env = _Env()
        with pytest.raises(EntityNotFoundError):
            UpdateOrderStatusHandler(env.uow).handle(404, "preparing")

    def test_cancel_does_not_restock(self):
        env = _Env()
        order_id = env.place(7, (1, 3))

        UpdateOrderStatusHandler(env.uow).handle(order_id, "cancelled")

        assert env.orders.get_by_id(order_id).status.value == "cancelled"
        assert env.catalog.stock_of(1) == 97


class TestActiveForDelivery:

    def test_lists_active_orders_newest_first_with_client(self):
        env = _Env()
        first = env.place(7, (1, 1))
        second = env.place(8, (4, 1))
        delivered = env.place(7, (1, 1))
        status = UpdateOrderStatusHandler(env.uow)
        for step in ("preparing", "out_for_delivery", "delivered"):
            status.handle(delivered, step)
        cancelled = env.place(8, (1, 1))
        status.handle(cancelled, "cancelled")

        rows = env.queries().active_for_delivery()

        assert [r.id for r in rows] == [second, first]
        assert rows[0].client_name == "Luis Pérez"
        assert rows[0].client_username == "luis"
        assert rows[0].restaurant_id == 11
        assert rows[1].total == 140

    def test_empty(self):
        assert _Env().queries().active_for_delivery() == []


class TestForRestaurant:

    def test_only_orders_touching_the_restaurant(self):
        env = _Env()
        tacos = env.place(7, (1, 1))
        env.place(8, (4, 1))
        mixed = env.place(8, (4, 1), (1, 1))

        rows = env.queries().for_restaurant(10)

        assert [r.id for r in rows] == [mixed, tacos]
        # A mixed cart is attributed to its lowest restaurant id.
        assert rows[0].restaurant_id == 10

    def test_limit_is_capped(self):
        env = _Env()
        for _ in range(MAX_RESTAURANT_ORDERS + 2):
            env.place(7, (1, 1))

        assert len(env.queries().for_restaurant(10, limit=500)) == MAX_RESTAURANT_ORDERS
        assert len(env.queries().for_restaurant(10, limit=3)) == 3

    def test_non_positive_limit_rejected(self):
        with pytest.raises(ValidationError, match="Limit must be positive"):
            _Env().queries().for_restaurant(10, limit=0)
