"""Error taxonomy for the order-processing engine.

Validation errors are rejected before any write and reuse Protean's
ValidationError so they carry the same ``{field: [messages]}`` shape as
field-level validation. Conflicts are rejected after a read-check and carry
enough detail for the caller to refresh and retry. Partial failures and
transport failures are raised only by the persistence paths.
"""

from protean.exceptions import ValidationError


# ---------------------------------------------------------------------------
# Validation (HTTP 400)
# ---------------------------------------------------------------------------
class InvalidUnitError(ValidationError):
    """The measurement unit does not apply to the item's unit kind."""


class EmptyCartError(ValidationError):
    """Checkout was attempted on a cart without lines."""


class NotAuthenticatedError(ValidationError):
    """No buyer identity is attached to the request."""


class PriceMismatchError(ValidationError):
    """Submitted total does not match the sum of the line subtotals."""


# ---------------------------------------------------------------------------
# Conflicts (HTTP 409)
# ---------------------------------------------------------------------------
class ConflictError(Exception):
    """A request that was valid in shape but clashes with current state."""

    def __init__(self, messages: dict):
        self.messages = messages
        super().__init__(messages)


class InsufficientStockError(ConflictError):
    pass


class InvalidTransitionError(ConflictError):
    pass


class AlreadyDeliveredError(ConflictError):
    """The order is already delivered; its invoice exists."""


class RiderUnavailableError(ConflictError):
    pass


class ReservationNotFoundError(ConflictError):
    pass


class ItemInUseError(ConflictError):
    """The catalog item still backs active stock reservations."""


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------
class PartialFailureError(Exception):
    """An order header was written but its lines were not.

    ``repaired`` tells whether the compensating cleanup succeeded. When it is
    False the header is left behind as an orphan for ``repair_orphaned_order``.
    """

    def __init__(self, order_id: str, repaired: bool, reason: str):
        self.order_id = order_id
        self.repaired = repaired
        self.reason = reason
        self.messages = {
            "order": [f"Order {order_id} was not fully written: {reason}"],
            "repaired": [str(repaired).lower()],
        }
        super().__init__(self.messages)


class TransportError(Exception):
    """The backing store could not be reached."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        self.messages = {"source": [f"{source} unreachable: {reason}"]}
        super().__init__(self.messages)
