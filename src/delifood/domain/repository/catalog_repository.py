"""Abstract repository for the catalog's Product records.

Defined in the domain layer so the domain never depends on
infrastructure.  The catalog itself is owned by another component; the
ordering core reads snapshots and applies conditional stock decrements.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from delifood.domain.model.product import Product


class CatalogRepository(ABC):

    @abstractmethod
    def fetch_by_ids(self, product_ids: Iterable[int]) -> list[Product]:
        """Return the current rows for the given ids; unknown ids are skipped."""

    @abstractmethod
    def get_by_id(self, product_id: int) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    @abstractmethod
    def try_decrement(self, product_id: int, quantity: int) -> bool:
        """Atomically apply ``stock = stock - quantity`` if ``stock >= quantity``.

        Returns False, leaving stock untouched, when the condition does
        not hold or the product does not exist.  Must take part in the
        surrounding unit of work.
        """

    def snapshot(self, product_ids: Iterable[int]) -> dict[int, Product]:
        """Fetch once and index by id, so every line is priced on the same view."""
        return {product.id: product for product in self.fetch_by_ids(product_ids)}
