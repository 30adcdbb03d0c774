"""Fallback catalog source serving the last catalogue read that succeeded.

Snapshots hold undiscounted items, so the freshness discount is still
computed against the current time when the snapshot is served.
"""

from datetime import UTC, datetime

from freshcart.catalogue.pricing import PricedCatalogItem
from freshcart.catalogue.source.port import CatalogSource
from freshcart.errors import TransportError


class SnapshotCatalogSource(CatalogSource):
    name = "snapshot"

    def __init__(self) -> None:
        self._items: list[PricedCatalogItem] | None = None
        self.taken_at: datetime | None = None

    def remember(self, items: list[PricedCatalogItem]) -> None:
        self._items = list(items)
        self.taken_at = datetime.now(UTC)

    def fetch_items(self) -> list[PricedCatalogItem]:
        if self._items is None:
            raise TransportError(self.name, "no catalogue snapshot has been taken yet")
        return list(self._items)
