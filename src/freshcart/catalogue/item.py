"""CatalogItem aggregate (CQRS) — a sellable product and its stock.

Stock is held in the item's canonical unit (pounds for weighted items, a
count otherwise). Every debit against an order is recorded as a
StockReservation so it can be reversed exactly when the order is cancelled,
or made final when the order is delivered.

Reservation lifecycle:
    ACTIVE → RELEASED   (order cancelled)
    ACTIVE → COMMITTED  (order delivered)

Only active reservations stay on the aggregate. Closing one removes it,
and the StockReleased or StockCommitted event is the lasting record.
"""

import json
import math
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, String, Text

from freshcart.catalogue.events import (
    CatalogItemAdded,
    CatalogItemUpdated,
    LowStockDetected,
    StockAdjusted,
    StockCommitted,
    StockReleased,
    StockReserved,
)
from freshcart.catalogue.units import UnitKind, parse_unit_kind
from freshcart.domain import freshcart
from freshcart.errors import InsufficientStockError, ReservationNotFoundError

# Float noise from kilogram → pound conversions must not block an exact fit
STOCK_TOLERANCE = 1e-9

# Fields the store operator may edit through update_details()
EDITABLE_FIELDS = (
    "name",
    "description",
    "category",
    "image_url",
    "unit_kind",
    "price_unit",
    "price_kilogram",
    "price_pound",
    "reorder_threshold",
    "cost_basis",
    "expiry_date",
    "is_listed",
)


class ReservationStatus(Enum):
    ACTIVE = "Active"
    RELEASED = "Released"
    COMMITTED = "Committed"


def _round_stock(quantity: float) -> float:
    return round(max(quantity, 0.0), 6)


@freshcart.entity(part_of="CatalogItem", limit=None)
class StockReservation:
    """A debit of canonical stock held for one order line."""

    order_id = Identifier(required=True)
    quantity = Float(required=True, min_value=0.0)
    status = String(
        choices=ReservationStatus,
        default=ReservationStatus.ACTIVE.value,
    )
    reserved_at = DateTime(required=True)
    closed_at = DateTime()


@freshcart.aggregate
class CatalogItem:
    name = String(required=True, max_length=255)
    description = Text()
    category = String(max_length=100)
    image_url = String(max_length=1000)
    unit_kind = String(
        required=True,
        choices=UnitKind,
        default=UnitKind.DISCRETE.value,
    )
    price_unit = Float(default=0.0, min_value=0.0)
    price_kilogram = Float(default=0.0, min_value=0.0)
    price_pound = Float(default=0.0, min_value=0.0)
    stock_quantity = Float(default=0.0, min_value=0.0)
    reorder_threshold = Float(default=5.0, min_value=0.0)
    cost_basis = Float(default=0.0, min_value=0.0)
    expiry_date = DateTime()
    is_listed = Boolean(default=True)
    reservations = HasMany(StockReservation)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, unit_kind=UnitKind.DISCRETE.value, stock_quantity=0.0, **details):
        now = datetime.now(UTC)
        item = cls(
            name=name,
            unit_kind=parse_unit_kind(unit_kind).value,
            stock_quantity=_round_stock(stock_quantity),
            created_at=now,
            updated_at=now,
            **details,
        )
        item.raise_(
            CatalogItemAdded(
                item_id=str(item.id),
                name=item.name,
                unit_kind=item.unit_kind,
                stock_quantity=item.stock_quantity,
                added_at=now,
            )
        )
        return item

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def active_reservations(self):
        return [r for r in self.reservations if r.status == ReservationStatus.ACTIVE.value]

    @property
    def is_low_on_stock(self) -> bool:
        return self.stock_quantity <= self.reorder_threshold

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply operator edits. Unknown fields are rejected, stock goes through the ledger."""
        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError({"fields": [f"Cannot edit: {', '.join(unknown)}"]})
        if "unit_kind" in changes and changes["unit_kind"] is not None:
            if self.active_reservations and parse_unit_kind(changes["unit_kind"]).value != self.unit_kind:
                raise ValidationError({"unit_kind": ["Unit kind cannot change while stock is reserved"]})
            changes["unit_kind"] = parse_unit_kind(changes["unit_kind"]).value

        changed = []
        for field_name, value in changes.items():
            if getattr(self, field_name) != value:
                setattr(self, field_name, value)
                changed.append(field_name)

        if not changed:
            return

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            CatalogItemUpdated(
                item_id=str(self.id),
                changed_fields=json.dumps(changed),
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def _check_low_stock(self, now):
        if self.is_low_on_stock:
            self.raise_(
                LowStockDetected(
                    item_id=str(self.id),
                    name=self.name,
                    stock_quantity=self.stock_quantity,
                    reorder_threshold=self.reorder_threshold,
                    detected_at=now,
                )
            )

    def adjust_stock(self, new_quantity):
        """Overwrite stock unconditionally (operator correction)."""
        if new_quantity is None or new_quantity < 0:
            raise ValidationError({"stock_quantity": ["Stock cannot be negative"]})

        previous = self.stock_quantity
        now = datetime.now(UTC)
        self.stock_quantity = _round_stock(new_quantity)
        self.updated_at = now

        self.raise_(
            StockAdjusted(
                item_id=str(self.id),
                previous_quantity=previous,
                new_quantity=self.stock_quantity,
                adjusted_at=now,
            )
        )
        self._check_low_stock(now)

    def reserve_stock(self, order_id, quantity):
        """Debit ``quantity`` canonical units for an order, or fail without touching stock."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Reserved quantity must be positive"]})
        if quantity > self.stock_quantity + STOCK_TOLERANCE:
            raise InsufficientStockError(
                {
                    "stock_quantity": [
                        f"Only {self.stock_quantity:.2f} available for {self.name}, requested {quantity:.2f}"
                    ],
                    "item_id": [str(self.id)],
                }
            )

        now = datetime.now(UTC)
        self.stock_quantity = _round_stock(self.stock_quantity - quantity)
        self.updated_at = now
        self.add_reservations(
            StockReservation(
                order_id=str(order_id),
                quantity=quantity,
                reserved_at=now,
            )
        )

        self.raise_(
            StockReserved(
                item_id=str(self.id),
                order_id=str(order_id),
                quantity=quantity,
                remaining=self.stock_quantity,
                reserved_at=now,
            )
        )
        self._check_low_stock(now)

    def release_stock(self, order_id, quantity):
        """Return the stock of one active reservation held by ``order_id``."""
        reservation = next(
            (
                r
                for r in self.active_reservations
                if str(r.order_id) == str(order_id) and math.isclose(r.quantity, quantity, abs_tol=STOCK_TOLERANCE)
            ),
            None,
        )
        if reservation is None:
            raise ReservationNotFoundError(
                {"reservation": [f"No active reservation of {quantity} on {self.id} for order {order_id}"]}
            )

        now = datetime.now(UTC)
        reservation.status = ReservationStatus.RELEASED.value
        reservation.closed_at = now
        self.stock_quantity = _round_stock(self.stock_quantity + reservation.quantity)
        self.remove_reservations(reservation)
        self.updated_at = now

        self.raise_(
            StockReleased(
                item_id=str(self.id),
                order_id=str(order_id),
                quantity=reservation.quantity,
                remaining=self.stock_quantity,
                released_at=now,
            )
        )

    def commit_reservations(self, order_id) -> int:
        """Make every active reservation of ``order_id`` final. Returns how many were committed."""
        committed = [r for r in self.active_reservations if str(r.order_id) == str(order_id)]
        if not committed:
            return 0

        now = datetime.now(UTC)
        for reservation in committed:
            reservation.status = ReservationStatus.COMMITTED.value
            reservation.closed_at = now
        self.remove_reservations(committed)
        self.updated_at = now

        self.raise_(
            StockCommitted(
                item_id=str(self.id),
                order_id=str(order_id),
                quantity=sum(r.quantity for r in committed),
                committed_at=now,
            )
        )
        return len(committed)
