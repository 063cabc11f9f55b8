"""Unit tests for the Order aggregate."""

from datetime import datetime, timezone

import pytest

from delifood.domain.exceptions import ValidationError
from delifood.domain.model.cart import Cart
from delifood.domain.model.order import Order, OrderStatus
from delifood.domain.model.product import Product
from delifood.domain.model.value_objects import Money
from delifood.domain.service.quote_builder import build_quote
from tests.fakes import CLOSED_TIME, OPEN_TIME


def _snapshot():
    return {
        1: Product(id=1, restaurant_id=10, name="Tacos", price=Money.of("100"), stock=5,
                   preparation_time_minutes=10),
        4: Product(id=4, restaurant_id=11, name="Pizza", price=Money.of("320"), stock=8,
                   preparation_time_minutes=25),
    }


def _placed_order() -> Order:
    quote = build_quote(Cart.create([(1, 2)]), _snapshot(), OPEN_TIME)
    return Order.place(user_id=7, quote=quote)


class TestPlace:

    def test_place_copies_accepted_lines_and_totals(self):
        quote = build_quote(Cart.create([(1, 2), (4, 1)]), _snapshot(), OPEN_TIME)
        order = Order.place(user_id=7, quote=quote)

        assert order.id is None
        assert order.status == OrderStatus.PENDING
        assert [(l.product_id, l.quantity.value) for l in order.lines] == [(1, 2), (4, 1)]
        assert order.subtotal == Money.of("520")
        assert order.delivery_fee == Money.zero()
        assert order.total == quote.total
        assert order.eta_minutes == 45

    def test_place_uses_given_timestamp(self):
        at = datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc)
        quote = build_quote(Cart.create([(1, 1)]), _snapshot(), OPEN_TIME)
        assert Order.place(7, quote, created_at=at).created_at == at

    def test_place_rejects_quote_with_errors(self):
        quote = build_quote(Cart.create([(1, 6)]), _snapshot(), OPEN_TIME)
        with pytest.raises(ValidationError, match="quote with errors"):
            Order.place(7, quote)

    def test_place_rejects_quote_outside_hours(self):
        quote = build_quote(Cart.create([(1, 1)]), _snapshot(), CLOSED_TIME)
        with pytest.raises(ValidationError):
            Order.place(7, quote)

    def test_unit_price_is_frozen(self):
        snapshot = _snapshot()
        quote = build_quote(Cart.create([(1, 1)]), snapshot, OPEN_TIME)
        order = Order.place(7, quote)

        snapshot[1].update_price(Money.of("999"))
        assert order.lines[0].unit_price == Money.of("100")


class TestStatusTransitions:

    def test_happy_path(self):
        order = _placed_order()
        order.transition_to(OrderStatus.PREPARING)
        order.transition_to(OrderStatus.OUT_FOR_DELIVERY)
        order.transition_to(OrderStatus.DELIVERED)
        assert order.status == OrderStatus.DELIVERED
        assert not order.is_active

    def test_cannot_skip_a_step(self):
        order = _placed_order()
        with pytest.raises(ValidationError, match="Cannot move order from pending to delivered"):
            order.transition_to(OrderStatus.DELIVERED)

    def test_same_status_rejected(self):
        order = _placed_order()
        with pytest.raises(ValidationError, match="already pending"):
            order.transition_to(OrderStatus.PENDING)

    def test_cannot_go_backwards(self):
        order = _placed_order()
        order.transition_to(OrderStatus.PREPARING)
        with pytest.raises(ValidationError):
            order.transition_to(OrderStatus.PENDING)

    @pytest.mark.parametrize(
        "path", [[], [OrderStatus.PREPARING], [OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY]]
    )
    def test_cancel_from_any_active_status(self, path):
        order = _placed_order()
        for status in path:
            order.transition_to(status)
        order.cancel()
        assert order.status == OrderStatus.CANCELLED
        assert order.status.is_terminal

    def test_cancel_delivered_rejected(self):
        order = _placed_order()
        for status in (OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED):
            order.transition_to(status)
        with pytest.raises(ValidationError, match="Cannot cancel order in delivered status"):
            order.cancel()

    def test_cancel_twice_rejected(self):
        order = _placed_order()
        order.cancel()
        with pytest.raises(ValidationError, match="already cancelled"):
            order.cancel()
