"""Product aggregate.

Products are owned by the catalog.  The ordering core only reads them
and, when an order is committed, decrements their stock.
"""

from __future__ import annotations

from dataclasses import dataclass

from delifood.domain.exceptions import InsufficientStockError, ValidationError
from delifood.domain.model.value_objects import Money

DEFAULT_PREPARATION_TIME_MINUTES = 15


@dataclass
class Product:
    """A product in a restaurant's menu.

    Invariants:
    - ``stock`` is never negative
    - ``preparation_time_minutes`` is positive
    """

    id: int
    restaurant_id: int
    name: str
    price: Money
    stock: int
    preparation_time_minutes: int = DEFAULT_PREPARATION_TIME_MINUTES
    is_active: bool = True

    def __post_init__(self) -> None:
        # Order lines store prices to the cent.
        self.price = self.price.to_cents()
        if self.stock < 0:
            raise ValidationError(f"Stock for {self.name} cannot be negative")
        if self.preparation_time_minutes <= 0:
            raise ValidationError(
                f"Preparation time for {self.name} must be positive"
            )

    def can_supply(self, quantity: int) -> bool:
        return quantity <= self.stock

    def decrement_stock(self, quantity: int) -> None:
        """Remove *quantity* units from stock.

        Raises InsufficientStockError and leaves stock untouched if the
        decrement would make it negative.
        """
        if quantity <= 0:
            raise ValidationError("Decrement quantity must be positive")
        if not self.can_supply(quantity):
            raise InsufficientStockError(self.id, quantity, self.stock)
        self.stock -= quantity

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because order lines
        capture a price snapshot at commit time.
        """
        self.price = new_price.to_cents()
