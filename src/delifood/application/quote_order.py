"""Application service: Quote Order use case (query).

Reads one catalog snapshot and prices the cart against it.  Nothing is
persisted; the quote can be recomputed at will.
"""

from __future__ import annotations

import structlog

from delifood.application.clock import Clock, system_clock
from delifood.application.dto import CartItemSpec, QuoteDTO, to_quote_dto
from delifood.domain.model.cart import Cart
from delifood.domain.repository.catalog_repository import CatalogRepository
from delifood.domain.service.pricing import PricingPolicy, ServiceHours
from delifood.domain.service.quote_builder import build_quote

logger = structlog.get_logger(__name__)


class QuoteOrderHandler:

    def __init__(
        self,
        catalog: CatalogRepository,
        policy: PricingPolicy | None = None,
        hours: ServiceHours | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self._catalog = catalog
        self._policy = policy or PricingPolicy()
        self._hours = hours or ServiceHours()
        self._clock = clock

    def handle(self, item_specs: list[CartItemSpec]) -> QuoteDTO:
        """Build a quote for the given items.

        Raises InvalidCartError for an empty cart or a non-positive
        quantity.  Unavailable products, missing stock and the
        service-hours gate are reported on the returned quote instead.
        """
        cart = Cart.create((spec.product_id, spec.quantity) for spec in item_specs)
        snapshot = self._catalog.snapshot(cart.product_ids)
        quote = build_quote(cart, snapshot, self._clock(), self._policy, self._hours)

        logger.info(
            "Quote built",
            line_count=len(quote.lines),
            rejected_count=len(quote.rejected_lines),
            total=str(quote.total.amount),
            within_service_hours=quote.within_service_hours,
        )
        return to_quote_dto(quote, self._hours)
