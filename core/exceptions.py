"""Typed domain exceptions for pricing and ticket failures.

All derive from ValueError so callers that only care about "bad input"
can catch one type. api/errors.py maps each to its HTTP status.
"""


class WeighbridgeError(ValueError):
    """Base class for domain errors."""


class NotFoundError(WeighbridgeError):
    """Entity addressed by id does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class InvalidReferenceError(WeighbridgeError):
    """
    A ticket references a vehicle, vendor or product that does not exist.

    Distinct from NotFoundError: the addressed resource exists (or is being
    created), one of its foreign keys is what's wrong.
    """

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"Unknown {entity} {entity_id}")


class OverlappingIntervalError(WeighbridgeError):
    """Price interval date range intersects another interval of the same product."""

    def __init__(self, product_id: int, conflicting_price_id: int):
        self.product_id = product_id
        self.conflicting_price_id = conflicting_price_id
        super().__init__(
            f"Price range for product {product_id} overlaps existing "
            f"price interval {conflicting_price_id}"
        )


class PricingUnavailableError(WeighbridgeError):
    """No price is in force for the product on the ticket's date."""

    def __init__(self, product_id: int, as_of):
        self.product_id = product_id
        self.as_of = as_of
        super().__init__(
            f"No active price for product {product_id} on {as_of.isoformat()}"
        )


class InvalidStatusTransitionError(WeighbridgeError):
    """Ticket lifecycle does not allow the requested transition."""

    def __init__(self, ticket_id: int, current: str, action: str):
        self.ticket_id = ticket_id
        self.current = current
        self.action = action
        super().__init__(f"Ticket {ticket_id} cannot {action} - status is {current}")


class InvalidPriceRangeError(WeighbridgeError):
    """Interval would end before it starts."""

    def __init__(self, effective_date, to_date):
        self.effective_date = effective_date
        self.to_date = to_date
        super().__init__(
            f"to_date cannot be before effective_date "
            f"({to_date.isoformat()} < {effective_date.isoformat()})"
        )
