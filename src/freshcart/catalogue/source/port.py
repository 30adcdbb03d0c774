"""Catalog source port (abstract interface).

The catalogue read path asks a primary source first and falls back to a
secondary one when the primary raises TransportError. Adapters never return
partial results: they either return the whole catalogue or raise.
"""

from abc import ABC, abstractmethod

from freshcart.catalogue.pricing import PricedCatalogItem


class CatalogSource(ABC):
    """Abstract catalogue source."""

    name: str = "catalog"

    @abstractmethod
    def fetch_items(self) -> list[PricedCatalogItem]:
        """Return every catalogue item, listed or not, undiscounted.

        Raises TransportError when the backing store cannot be reached.
        """
        ...
