"""Primary catalog source backed by the CatalogItem repository."""

import structlog
from protean.utils.globals import current_domain
from sqlalchemy.exc import DBAPIError

from freshcart.catalogue.item import CatalogItem
from freshcart.catalogue.pricing import PricedCatalogItem
from freshcart.catalogue.source.port import CatalogSource
from freshcart.errors import TransportError

logger = structlog.get_logger(__name__)


class RepositoryCatalogSource(CatalogSource):
    name = "repository"

    def fetch_items(self) -> list[PricedCatalogItem]:
        try:
            items = current_domain.repository_for(CatalogItem).all_by_name(include_unlisted=True)
        except (ConnectionError, TimeoutError, DBAPIError) as exc:
            logger.error("Catalog repository unreachable", error=str(exc))
            raise TransportError(self.name, str(exc)) from exc
        return [PricedCatalogItem.from_item(item) for item in items]
