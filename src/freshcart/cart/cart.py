"""ShoppingCart aggregate (CQRS) — a buyer's basket of priced catalogue items.

Each line is keyed by ``(item_id, measurement unit)``: one kilogram and one
pound of the same item are separate lines. A line's unit price is captured
when it is first added and never follows later catalogue price changes.

The stock check in ``add`` is advisory. It is run against the item snapshot
just read, and the inventory ledger re-checks at order placement.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from freshcart.cart.events import CartCleared, CartLineAdded, CartLineRemoved
from freshcart.catalogue.item import STOCK_TOLERANCE
from freshcart.catalogue.pricing import resolve_price
from freshcart.catalogue.units import MeasurementUnit, UnitKind, ensure_compatible, to_canonical
from freshcart.domain import freshcart
from freshcart.errors import EmptyCartError, InsufficientStockError, NotAuthenticatedError
from freshcart.order.request import OrderRequest, OrderRequestLine


@freshcart.value_object(part_of="ShoppingCart")
class LineMeasure:
    """How a line is measured: discrete and bundle lines by unit, weighted lines by kilogram or pound."""

    kind = String(required=True, choices=UnitKind)
    unit = String(required=True, choices=MeasurementUnit)

    @invariant.post
    def unit_must_fit_kind(self):
        if self.kind is not None and self.unit is not None:
            ensure_compatible(self.kind, self.unit)

    def to_canonical(self, quantity) -> float:
        return to_canonical(self.kind, self.unit, quantity)


@freshcart.entity(part_of="ShoppingCart")
class CartLine:
    item_id = Identifier(required=True)
    item_name = String(required=True, max_length=255)
    measure = ValueObject(LineMeasure, required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    added_at = DateTime()

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity


@freshcart.aggregate
class ShoppingCart:
    buyer_id = Identifier()  # Nullable for guest baskets
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, buyer_id=None):
        now = datetime.now(UTC)
        return cls(buyer_id=buyer_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def _find_line(self, item_id, unit: MeasurementUnit):
        return next(
            (
                line
                for line in self.lines
                if str(line.item_id) == str(item_id) and line.measure.unit == unit.value
            ),
            None,
        )

    def reserved_quantity(self, item_id) -> float:
        """Canonical quantity of ``item_id`` already in the cart, across every unit."""
        return sum(
            line.measure.to_canonical(line.quantity) for line in self.lines if str(line.item_id) == str(item_id)
        )

    def total(self) -> float:
        return sum(line.subtotal for line in self.lines)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add(self, priced_item, measurement_unit):
        """Add one ``measurement_unit`` of ``priced_item``.

        Raises InvalidUnitError for a unit the item is not sold by, and
        InsufficientStockError when the cart would hold more than the item's
        current stock.
        """
        unit = ensure_compatible(priced_item.unit_kind, measurement_unit)
        requested = to_canonical(priced_item.unit_kind, unit, 1)
        reserved = self.reserved_quantity(priced_item.id)
        if reserved + requested > priced_item.stock_quantity + STOCK_TOLERANCE:
            raise InsufficientStockError(
                {
                    "stock_quantity": [
                        f"Only {priced_item.stock_quantity:.2f} available for {priced_item.name}, "
                        f"cart would hold {reserved + requested:.2f}"
                    ],
                    "item_id": [str(priced_item.id)],
                }
            )

        now = datetime.now(UTC)
        line = self._find_line(priced_item.id, unit)
        if line is not None:
            line.quantity += 1
        else:
            line = CartLine(
                item_id=str(priced_item.id),
                item_name=priced_item.name,
                measure=LineMeasure(kind=priced_item.unit_kind, unit=unit.value),
                quantity=1,
                unit_price=resolve_price(priced_item, unit),
                added_at=now,
            )
            self.add_lines(line)
        self.updated_at = now

        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                item_id=str(priced_item.id),
                measurement_unit=unit.value,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
        )

    def remove(self, item_id, measurement_unit) -> bool:
        """Take one unit off the matching line. Returns False when there is no such line."""
        try:
            unit = MeasurementUnit(measurement_unit)
        except ValueError:
            return False
        line = self._find_line(item_id, unit)
        if line is None:
            return False

        if line.quantity > 1:
            line.quantity -= 1
            remaining = line.quantity
        else:
            self.remove_lines(line)
            remaining = 0
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                measurement_unit=unit.value,
                remaining_quantity=remaining,
            )
        )
        return True

    def clear(self):
        removed = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id), lines_removed=removed))

    # -------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------
    def submit(self, buyer_id=None, payment_method_id=None) -> OrderRequest:
        """Freeze the cart into an OrderRequest. The cart itself is left as is."""
        if not self.lines:
            raise EmptyCartError({"cart": ["Cannot submit an empty cart"]})
        buyer = buyer_id or self.buyer_id
        if not buyer:
            raise NotAuthenticatedError({"buyer_id": ["Sign in to place an order"]})
        if self.buyer_id and buyer_id and str(self.buyer_id) != str(buyer_id):
            raise ValidationError({"buyer_id": ["Cart belongs to another buyer"]})

        lines = tuple(
            OrderRequestLine(
                item_id=str(line.item_id),
                item_name=line.item_name,
                measurement_unit=line.measure.unit,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for line in self.lines
        )
        return OrderRequest(
            buyer_id=str(buyer),
            lines=lines,
            total=round(self.total(), 2),
            payment_method_id=str(payment_method_id) if payment_method_id else None,
        )
