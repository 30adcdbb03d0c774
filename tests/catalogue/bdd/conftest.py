"""Shared BDD fixtures and step definitions for the Catalogue domain."""

from datetime import UTC, datetime

import pytest
from freshcart.catalogue.item import CatalogItem
from protean import current_domain
from pytest_bdd import parsers, then


@pytest.fixture()
def now():
    return datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


@then(parsers.cfparse("the stored price is {price:f}"))
def stored_price(item_id, price):
    item = current_domain.repository_for(CatalogItem).get(item_id)
    assert item.price_unit == price
