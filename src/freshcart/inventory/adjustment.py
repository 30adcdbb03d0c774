"""Operator stock corrections."""

from protean import handle
from protean.fields import Float, Identifier

from freshcart.catalogue.item import CatalogItem
from freshcart.domain import freshcart
from freshcart.inventory.ledger import inventory_ledger


@freshcart.command(part_of="CatalogItem")
class AdjustStock:
    """Overwrite the stock of an item after a physical count."""

    item_id = Identifier(required=True)
    new_quantity = Float(required=True)


@freshcart.command_handler(part_of=CatalogItem)
class StockAdjustmentHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        inventory_ledger.adjust(command.item_id, command.new_quantity)
