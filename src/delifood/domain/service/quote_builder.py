"""Domain service: Quote Builder.

The single source of truth for pricing and availability.  The quote
endpoint runs it against the snapshot it just read; the commit
coordinator runs it again against a fresh snapshot taken at commit time.
Same rules, two snapshots.

``build_quote`` is a pure function: it performs no I/O, does not mutate
the snapshot, and returns an identical Quote for identical inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from delifood.domain.model.cart import Cart
from delifood.domain.model.product import Product
from delifood.domain.model.quote import LineFailure, Quote, QuoteLine
from delifood.domain.model.value_objects import Money
from delifood.domain.service.pricing import PricingPolicy, ServiceHours


def build_quote(
    cart: Cart,
    catalog_snapshot: Mapping[int, Product],
    now: datetime,
    policy: PricingPolicy | None = None,
    hours: ServiceHours | None = None,
) -> Quote:
    """Price every cart line against one catalog snapshot.

    Lines for a product that is missing, inactive, or priced in a currency
    other than the policy's are rejected as PRODUCT_UNAVAILABLE.  Lines
    asking for more than the remaining stock are rejected as
    INSUFFICIENT_STOCK; repeated lines for the same product draw from the
    same stock, so the quote never promises more than one commit could
    decrement.
    """
    policy = policy or PricingPolicy()
    hours = hours or ServiceHours()

    lines: list[QuoteLine] = []
    claimed: dict[int, int] = {}
    subtotal = Money.zero(policy.currency)
    max_preparation = 0

    for cart_line in cart.lines:
        product_id = cart_line.product_id
        qty = cart_line.quantity.value
        product = catalog_snapshot.get(product_id)

        if (
            product is None
            or not product.is_active
            or product.price.currency != policy.currency
        ):
            lines.append(
                QuoteLine.rejected(product_id, qty, LineFailure.PRODUCT_UNAVAILABLE)
            )
            continue

        available = product.stock - claimed.get(product_id, 0)
        if qty > available:
            lines.append(
                QuoteLine.rejected(
                    product_id, qty, LineFailure.INSUFFICIENT_STOCK, available=available
                )
            )
            continue

        line = QuoteLine.accepted(
            product_id=product_id,
            quantity=qty,
            name=product.name,
            unit_price=product.price,
            preparation_time_minutes=product.preparation_time_minutes,
        )
        lines.append(line)
        claimed[product_id] = claimed.get(product_id, 0) + qty
        subtotal = subtotal + line.line_total  # type: ignore[operator]
        max_preparation = max(max_preparation, product.preparation_time_minutes)

    return Quote(
        lines=tuple(lines),
        subtotal=subtotal,
        delivery_fee=policy.delivery_fee_for(subtotal),
        eta_minutes=policy.eta_for(max_preparation),
        within_service_hours=hours.contains(now),
    )
