"""Catalogue read side: priced listings for buyers and the store dashboard."""

from datetime import datetime

import structlog
from protean.utils.globals import current_domain

from freshcart.catalogue.item import CatalogItem
from freshcart.catalogue.pricing import PricedCatalogItem, apply_freshness_discount
from freshcart.catalogue.source import get_catalog_sources
from freshcart.errors import TransportError

logger = structlog.get_logger(__name__)


def list_catalog(include_unlisted: bool = False, now: datetime | None = None) -> list[PricedCatalogItem]:
    """All catalogue items ordered by name, with freshness discounts applied.

    Reads the primary source and refreshes the fallback snapshot. When the
    primary is unreachable the last snapshot is served instead; if there is
    no snapshot either, the TransportError propagates.
    """
    primary, fallback = get_catalog_sources()
    try:
        items = primary.fetch_items()
    except TransportError as exc:
        logger.warning("Catalog primary source failed, serving snapshot", source=exc.source, reason=exc.reason)
        items = fallback.fetch_items()
    else:
        fallback.remember(items)

    if not include_unlisted:
        items = [item for item in items if item.is_listed]
    items = sorted(items, key=lambda item: item.name.lower())
    return [apply_freshness_discount(item, now) for item in items]


def get_priced_item(item_id, now: datetime | None = None) -> PricedCatalogItem:
    """A single item as currently listed. Raises ObjectNotFoundError if unknown."""
    item = current_domain.repository_for(CatalogItem).get(item_id)
    return apply_freshness_discount(item, now)


def low_stock_items() -> list[PricedCatalogItem]:
    """Items at or below their reorder threshold, for the store dashboard."""
    items = current_domain.repository_for(CatalogItem).low_on_stock()
    return [PricedCatalogItem.from_item(item) for item in items]
