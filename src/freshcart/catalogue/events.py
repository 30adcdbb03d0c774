"""Domain events for the CatalogItem aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from freshcart.domain import freshcart


@freshcart.event(part_of="CatalogItem")
class CatalogItemAdded:
    """The store operator put a new item in the catalogue."""

    __version__ = 1

    item_id = Identifier(required=True)
    name = String(required=True)
    unit_kind = String(required=True)
    stock_quantity = Float(required=True)
    added_at = DateTime(required=True)


@freshcart.event(part_of="CatalogItem")
class CatalogItemUpdated:
    """Display, pricing or listing fields of an item were edited."""

    __version__ = 1

    item_id = Identifier(required=True)
    changed_fields = Text(required=True)  # JSON list of field names
    updated_at = DateTime(required=True)


@freshcart.event(part_of="CatalogItem")
class StockAdjusted:
    """Stock was corrected manually by the store operator."""

    __version__ = 1

    item_id = Identifier(required=True)
    previous_quantity = Float(required=True)
    new_quantity = Float(required=True)
    adjusted_at = DateTime(required=True)


@freshcart.event(part_of="CatalogItem")
class StockReserved:
    """Stock was debited against an order line."""

    __version__ = 1

    item_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Float(required=True)
    remaining = Float(required=True)
    reserved_at = DateTime(required=True)


@freshcart.event(part_of="CatalogItem")
class StockReleased:
    """A reservation was reversed and its stock returned."""

    __version__ = 1

    item_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Float(required=True)
    remaining = Float(required=True)
    released_at = DateTime(required=True)


@freshcart.event(part_of="CatalogItem")
class StockCommitted:
    """Reservations for a delivered order became final."""

    __version__ = 1

    item_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Float(required=True)
    committed_at = DateTime(required=True)


@freshcart.event(part_of="CatalogItem")
class LowStockDetected:
    """Stock fell to or below the item's reorder threshold."""

    __version__ = 1

    item_id = Identifier(required=True)
    name = String(required=True)
    stock_quantity = Float(required=True)
    reorder_threshold = Float(required=True)
    detected_at = DateTime(required=True)
