"""Store-operator commands for the catalogue."""

import structlog
from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from freshcart.catalogue.item import CatalogItem
from freshcart.domain import freshcart
from freshcart.errors import ItemInUseError
from freshcart.inventory.ledger import inventory_ledger

logger = structlog.get_logger(__name__)


@freshcart.command(part_of="CatalogItem")
class AddCatalogItem:
    name = String(required=True, max_length=255)
    description = Text()
    category = String(max_length=100)
    image_url = String(max_length=1000)
    unit_kind = String(required=True, max_length=20)
    price_unit = Float(default=0.0)
    price_kilogram = Float(default=0.0)
    price_pound = Float(default=0.0)
    stock_quantity = Float(default=0.0)
    reorder_threshold = Float(default=5.0)
    cost_basis = Float(default=0.0)
    expiry_date = DateTime()
    is_listed = Boolean(default=True)


@freshcart.command(part_of="CatalogItem")
class UpdateCatalogItem:
    """Partial update; fields left as None are untouched."""

    item_id = Identifier(required=True)
    name = String(max_length=255)
    description = Text()
    category = String(max_length=100)
    image_url = String(max_length=1000)
    unit_kind = String(max_length=20)
    price_unit = Float()
    price_kilogram = Float()
    price_pound = Float()
    stock_quantity = Float()
    reorder_threshold = Float()
    cost_basis = Float()
    expiry_date = DateTime()
    is_listed = Boolean()


@freshcart.command(part_of="CatalogItem")
class RemoveCatalogItem:
    item_id = Identifier(required=True)


@freshcart.command_handler(part_of=CatalogItem)
class CatalogManagementHandler:
    @handle(AddCatalogItem)
    def add_item(self, command):
        item = CatalogItem.create(
            name=command.name,
            unit_kind=command.unit_kind,
            stock_quantity=command.stock_quantity or 0.0,
            description=command.description,
            category=command.category,
            image_url=command.image_url,
            price_unit=command.price_unit or 0.0,
            price_kilogram=command.price_kilogram or 0.0,
            price_pound=command.price_pound or 0.0,
            reorder_threshold=command.reorder_threshold if command.reorder_threshold is not None else 5.0,
            cost_basis=command.cost_basis or 0.0,
            expiry_date=command.expiry_date,
            is_listed=command.is_listed if command.is_listed is not None else True,
        )
        current_domain.repository_for(CatalogItem).add(item)
        logger.info("Catalog item added", item_id=str(item.id), name=item.name)
        return str(item.id)

    @handle(UpdateCatalogItem)
    def update_item(self, command):
        payload = command.to_dict()
        stock_quantity = payload.pop("stock_quantity", None)
        payload.pop("item_id", None)
        changes = {key: value for key, value in payload.items() if value is not None and key != "_metadata"}

        repo = current_domain.repository_for(CatalogItem)
        with inventory_ledger.locked():
            item = repo.get(command.item_id)
            item.update_details(**changes)
            if stock_quantity is not None:
                inventory_ledger.apply_adjustment(item, stock_quantity)
            repo.add(item)
        logger.info(
            "Catalog item updated",
            item_id=str(item.id),
            fields=sorted(changes),
            stock_adjusted=stock_quantity is not None,
        )

    @handle(RemoveCatalogItem)
    def remove_item(self, command):
        repo = current_domain.repository_for(CatalogItem)
        item = repo.get(command.item_id)
        if item.active_reservations:
            raise ItemInUseError(
                {"item_id": [f"{item.name} backs {len(item.active_reservations)} active reservation(s)"]}
            )
        repo._dao.delete(item)
        logger.info("Catalog item removed", item_id=str(command.item_id))
