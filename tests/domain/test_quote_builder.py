"""Unit tests for the quote builder.

All tests pass a fixed ``now`` so the service-hours gate is deterministic.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from delifood.domain.exceptions import ValidationError
from delifood.domain.model.cart import Cart
from delifood.domain.model.product import Product
from delifood.domain.model.quote import LineFailure
from delifood.domain.model.value_objects import Money
from delifood.domain.service.pricing import PricingPolicy, ServiceHours
from delifood.domain.service.quote_builder import build_quote
from tests.fakes import CLOSED_TIME, OPEN_TIME


def _tacos(stock: int = 5, **overrides) -> Product:
    fields = dict(id=1, restaurant_id=10, name="Tacos", price=Money.of("100"), stock=stock,
                  preparation_time_minutes=10)
    fields.update(overrides)
    return Product(**fields)


def _pizza(stock: int = 8) -> Product:
    return Product(id=4, restaurant_id=11, name="Pizza", price=Money.of("320"), stock=stock,
                   preparation_time_minutes=25)


class TestPricing:

    def test_single_line_pays_flat_fee(self):
        quote = build_quote(Cart.create([(1, 2)]), {1: _tacos()}, OPEN_TIME)

        assert quote.subtotal == Money.of("200")
        assert quote.delivery_fee == Money.of("40")
        assert quote.total == Money.of("240")
        assert quote.eta_minutes == 30
        assert not quote.has_error
        line = quote.lines[0]
        assert line.ok and line.name == "Tacos"
        assert line.unit_price == Money.of("100")
        assert line.line_total == Money.of("200")

    def test_threshold_reached_delivers_free(self):
        quote = build_quote(Cart.create([(1, 2), (4, 1)]), {1: _tacos(), 4: _pizza()}, OPEN_TIME)
        assert quote.subtotal == Money.of("520")
        assert quote.delivery_fee == Money.zero()
        assert quote.total == Money.of("520")

    def test_exactly_at_threshold_delivers_free(self):
        quote = build_quote(Cart.create([(1, 5)]), {1: _tacos()}, OPEN_TIME)
        assert quote.subtotal == Money.of("500")
        assert quote.delivery_fee == Money.zero()

    def test_eta_uses_slowest_accepted_line(self):
        quote = build_quote(Cart.create([(1, 1), (4, 1)]), {1: _tacos(), 4: _pizza()}, OPEN_TIME)
        assert quote.eta_minutes == 45

    def test_custom_policy(self):
        policy = PricingPolicy(
            free_delivery_threshold=Money.of("1000"),
            flat_fee=Money.of("25"),
            delivery_buffer_minutes=5,
        )
        quote = build_quote(Cart.create([(1, 5)]), {1: _tacos()}, OPEN_TIME, policy)
        assert quote.delivery_fee == Money.of("25")
        assert quote.eta_minutes == 15


class TestRejectedLines:

    def test_insufficient_stock(self):
        quote = build_quote(Cart.create([(1, 2)]), {1: _tacos(stock=1)}, OPEN_TIME)

        line = quote.lines[0]
        assert not line.ok
        assert line.reason == LineFailure.INSUFFICIENT_STOCK
        assert line.available == 1
        assert quote.has_error
        assert quote.subtotal == Money.zero()
        assert quote.delivery_fee == Money.zero()
        assert quote.eta_minutes == 20
        assert not quote.is_committable

    def test_missing_product(self):
        quote = build_quote(Cart.create([(99, 1)]), {}, OPEN_TIME)
        assert quote.lines[0].reason == LineFailure.PRODUCT_UNAVAILABLE
        assert quote.lines[0].available is None

    def test_inactive_product(self):
        quote = build_quote(Cart.create([(1, 1)]), {1: _tacos(is_active=False)}, OPEN_TIME)
        assert quote.lines[0].reason == LineFailure.PRODUCT_UNAVAILABLE

    def test_valid_lines_still_priced_next_to_rejected_ones(self):
        quote = build_quote(
            Cart.create([(99, 1), (1, 1)]), {1: _tacos()}, OPEN_TIME
        )
        assert [line.ok for line in quote.lines] == [False, True]
        assert quote.subtotal == Money.of("100")
        assert quote.has_error

    def test_product_priced_in_another_currency(self):
        quote = build_quote(
            Cart.create([(1, 1), (4, 1)]),
            {1: _tacos(price=Money.of("100", "USD")), 4: _pizza()},
            OPEN_TIME,
        )

        assert quote.lines[0].reason == LineFailure.PRODUCT_UNAVAILABLE
        assert quote.lines[1].ok
        assert quote.subtotal == Money.of("320")
        assert quote.has_error

    def test_repeated_lines_share_stock(self):
        quote = build_quote(Cart.create([(1, 3), (1, 3)]), {1: _tacos(stock=5)}, OPEN_TIME)

        first, second = quote.lines
        assert first.ok
        assert not second.ok
        assert second.reason == LineFailure.INSUFFICIENT_STOCK
        assert second.available == 2


class TestServiceHours:

    def test_outside_hours_flags_error_but_still_prices(self):
        quote = build_quote(Cart.create([(1, 2)]), {1: _tacos()}, CLOSED_TIME)
        assert not quote.within_service_hours
        assert quote.has_error
        assert quote.total == Money.of("240")
        assert all(line.ok for line in quote.lines)

    @pytest.mark.parametrize(
        "hour, minute, inside",
        [(8, 59, False), (9, 0, True), (22, 0, True), (22, 59, True), (23, 0, False)],
    )
    def test_window_is_inclusive_on_whole_hours(self, hour, minute, inside):
        now = datetime(2024, 5, 14, hour, minute, tzinfo=timezone.utc)
        assert ServiceHours().contains(now) is inside

    def test_window_is_evaluated_in_configured_zone(self):
        hours = ServiceHours(timezone=timezone(timedelta(hours=-6)))
        # 14:00 UTC is 08:00 six hours west
        assert not hours.contains(datetime(2024, 5, 14, 14, 0, tzinfo=timezone.utc))
        assert hours.contains(datetime(2024, 5, 14, 15, 0, tzinfo=timezone.utc))

    def test_describe(self):
        assert ServiceHours().describe() == "09:00-22:00"

    def test_opening_after_closing_rejected(self):
        with pytest.raises(ValidationError, match="after closing hour"):
            ServiceHours(opening_hour=20, closing_hour=8)


class TestPurity:

    def test_same_inputs_same_quote(self):
        snapshot = {1: _tacos(), 4: _pizza()}
        cart = Cart.create([(1, 2), (4, 1), (99, 1)])
        assert build_quote(cart, snapshot, OPEN_TIME) == build_quote(cart, snapshot, OPEN_TIME)

    def test_snapshot_not_mutated(self):
        snapshot = {1: _tacos(stock=5)}
        build_quote(Cart.create([(1, 3), (1, 2)]), snapshot, OPEN_TIME)
        assert snapshot[1].stock == 5

    def test_total_is_subtotal_plus_fee(self):
        quote = build_quote(Cart.create([(1, 1), (4, 1)]), {1: _tacos(), 4: _pizza()}, OPEN_TIME)
        assert quote.total.amount == quote.subtotal.amount + quote.delivery_fee.amount
        assert quote.total.amount == Decimal("460")
