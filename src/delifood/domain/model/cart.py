"""Cart — the ephemeral, client-supplied request for an order.

A cart is never persisted.  It only lives for the duration of one quote
or commit request.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from delifood.domain.exceptions import InvalidCartError, ValidationError
from delifood.domain.model.value_objects import Quantity


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: Quantity


@dataclass(frozen=True)
class Cart:
    """A non-empty, ordered sequence of cart lines.

    Use ``Cart.create()`` to build one from raw ``(product_id, quantity)``
    pairs; it rejects empty carts and malformed lines with
    ``InvalidCartError``.
    """

    lines: tuple[CartLine, ...]

    @staticmethod
    def create(items: Iterable[tuple[int, int]]) -> Cart:
        lines: list[CartLine] = []
        for product_id, quantity in items:
            if not isinstance(product_id, int) or isinstance(product_id, bool):
                raise InvalidCartError(f"Invalid product id: {product_id!r}")
            try:
                qty = Quantity(quantity)
            except ValidationError as exc:
                raise InvalidCartError(
                    f"Invalid quantity {quantity!r} for product #{product_id}: {exc}"
                ) from exc
            lines.append(CartLine(product_id=product_id, quantity=qty))

        if not lines:
            raise InvalidCartError("Cart is empty")

        return Cart(lines=tuple(lines))

    @property
    def product_ids(self) -> list[int]:
        """Distinct product ids, in first-seen order."""
        return list(dict.fromkeys(line.product_id for line in self.lines))
