"""Catalog source factory.

Provides get_catalog_sources() / set_catalog_sources() to swap the
primary and fallback sources:
- RepositoryCatalogSource reads the CatalogItem repository (primary)
- SnapshotCatalogSource serves the last good read (fallback)
"""

from freshcart.catalogue.source.port import CatalogSource
from freshcart.catalogue.source.repository_adapter import RepositoryCatalogSource
from freshcart.catalogue.source.snapshot_adapter import SnapshotCatalogSource

_primary: CatalogSource | None = None
_fallback: SnapshotCatalogSource | None = None


def get_catalog_sources() -> tuple[CatalogSource, SnapshotCatalogSource]:
    """Return ``(primary, fallback)``, creating the defaults on first use."""
    global _primary, _fallback
    if _primary is None:
        _primary = RepositoryCatalogSource()
    if _fallback is None:
        _fallback = SnapshotCatalogSource()
    return _primary, _fallback


def set_catalog_sources(
    primary: CatalogSource | None = None,
    fallback: SnapshotCatalogSource | None = None,
) -> None:
    """Override either source (useful for tests)."""
    global _primary, _fallback
    if primary is not None:
        _primary = primary
    if fallback is not None:
        _fallback = fallback


def reset_catalog_sources() -> None:
    """Reset to the default sources and forget any snapshot."""
    global _primary, _fallback
    _primary = None
    _fallback = None
