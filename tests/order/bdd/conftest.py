"""Shared BDD fixtures and step definitions for the Order domain."""

import pytest
from freshcart.catalogue.item import CatalogItem
from freshcart.order.order import Order
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def catalogue():
    """Item ids by name."""
    return {}


@pytest.fixture()
def error():
    """Container for the error raised by the last step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the catalogue holds "{name}" at {price:f} with {stock:d} in stock'))
def catalogue_item(catalogue, name, price, stock):
    item = CatalogItem.create(name=name, unit_kind="discrete", price_unit=price, stock_quantity=float(stock))
    current_domain.repository_for(CatalogItem).add(item)
    catalogue[name] = str(item.id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def item_stock(catalogue, name, stock):
    item = current_domain.repository_for(CatalogItem).get(catalogue[name])
    assert item.stock_quantity == pytest.approx(stock)


@then(parsers.cfparse('the order is "{status}"'))
def order_status(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status
