"""Money and Quantity, the two value objects every price calculation uses.

Both are frozen dataclasses: equal when their fields are equal, and
impossible to build in an invalid state.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from delifood.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "MXN"
CENTS = Decimal("0.01")


@total_ordering
@dataclass(frozen=True)
class Money:
    """A non-negative Decimal amount in one currency.

    Zero is legal: a cart whose every line was rejected still has a
    subtotal and a delivery fee, both zero.  Mixing currencies in
    arithmetic or comparisons raises ValidationError.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def rounded(self) -> Decimal:
        """The amount to the cent, half up, for display and storage."""
        return self.amount.quantize(CENTS, rounding=ROUND_HALF_UP)

    def to_cents(self) -> Money:
        return Money(self.rounded(), self.currency)

    def __str__(self) -> str:
        return f"${self.rounded()}"

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build from anything Decimal accepts; floats go through ``str`` first."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal(0), currency)


@dataclass(frozen=True)
class Quantity:
    """How many units of a product a line asks for; always at least one."""

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; ``True`` is not a quantity
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
