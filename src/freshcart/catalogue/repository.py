"""Repository for the CatalogItem aggregate."""

from freshcart.catalogue.item import CatalogItem
from freshcart.domain import freshcart


@freshcart.repository(part_of=CatalogItem)
class CatalogItemRepository:
    """Catalogue queries on top of the standard CRUD operations."""

    def all_by_name(self, include_unlisted: bool = False) -> list[CatalogItem]:
        items = self._dao.query.order_by("name").limit(None).all().items
        if include_unlisted:
            return list(items)
        return [item for item in items if item.is_listed]

    def low_on_stock(self) -> list[CatalogItem]:
        return [item for item in self.all_by_name(include_unlisted=True) if item.is_low_on_stock]
