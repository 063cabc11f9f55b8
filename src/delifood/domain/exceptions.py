"""Domain-level exceptions.

All failures are expressed as subclasses of DomainException so the CLI
and HTTP layers can catch them uniformly and display user-friendly
messages.  Business-rule outcomes of a quote or commit (unavailable
product, insufficient stock, outside service hours) are *not* raised;
they travel as data on the Quote and CommitResult.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InvalidCartError(ValidationError):
    """The cart is empty or one of its lines is malformed."""


class InsufficientStockError(DomainException):
    """A conditional stock decrement could not be applied."""

    def __init__(self, product_id: int, requested: int, available: int | None = None) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        detail = f"need {requested}"
        if available is not None:
            detail += f", have {available} available"
        super().__init__(f"Insufficient stock for product #{product_id} ({detail})")


class PersistenceError(DomainException):
    """The store could not complete an operation. Nothing was persisted."""


class NotificationError(DomainException):
    """A notification could not be delivered."""
