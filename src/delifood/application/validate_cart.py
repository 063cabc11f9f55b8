"""Application service: Validate Cart use case (query).

Availability-only check used by the menu before a quote is requested:
no pricing, no service-hours gate.
"""

from __future__ import annotations

from datetime import datetime

from delifood.application.dto import CartItemSpec, CartProblemDTO
from delifood.domain.model.cart import Cart
from delifood.domain.repository.catalog_repository import CatalogRepository
from delifood.domain.service.pricing import PricingPolicy, ServiceHours
from delifood.domain.service.quote_builder import build_quote

# Availability does not depend on the clock; any instant will do.
_ALWAYS_OPEN = ServiceHours(opening_hour=0, closing_hour=23)
_ANY_TIME = datetime(2000, 1, 1)


class ValidateCartHandler:

    def __init__(
        self, catalog: CatalogRepository, policy: PricingPolicy | None = None
    ) -> None:
        self._catalog = catalog
        self._policy = policy or PricingPolicy()

    def handle(self, item_specs: list[CartItemSpec]) -> list[CartProblemDTO]:
        """Return one problem per unavailable line; an empty list means valid."""
        cart = Cart.create((spec.product_id, spec.quantity) for spec in item_specs)
        snapshot = self._catalog.snapshot(cart.product_ids)
        quote = build_quote(cart, snapshot, _ANY_TIME, self._policy, _ALWAYS_OPEN)

        problems: list[CartProblemDTO] = []
        for line in quote.rejected_lines:
            product = snapshot.get(line.product_id)
            problems.append(
                CartProblemDTO(
                    product_id=line.product_id,
                    reason=line.reason.value,  # type: ignore[union-attr]
                    requested=line.quantity,
                    name=product.name if product else None,
                    available=line.available,
                )
            )
        return problems
