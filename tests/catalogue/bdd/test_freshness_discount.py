"""BDD tests for the perishable freshness discount."""

from datetime import timedelta

import pytest
from freshcart.catalogue.item import CatalogItem
from freshcart.catalogue.listing import list_catalog
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/freshness_discount.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("a discrete item priced at {price:f} expiring in {days:d} day"),
    target_fixture="item_id",
)
@given(
    parsers.cfparse("a discrete item priced at {price:f} expiring in {days:d} days"),
    target_fixture="item_id",
)
def _(now, price, days):
    item = CatalogItem.create(
        name="Strawberries",
        unit_kind="discrete",
        price_unit=price,
        stock_quantity=20.0,
        expiry_date=now + timedelta(days=days),
    )
    current_domain.repository_for(CatalogItem).add(item)
    return str(item.id)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the catalogue is listed", target_fixture="listing")
def _(now):
    return list_catalog(now=now)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the item is listed at {price:f}"))
def _(listing, item_id, price):
    listed = next(item for item in listing if item.id == item_id)
    assert listed.price_unit == pytest.approx(price)


@then(parsers.cfparse("the listed discount is {fraction:f}"))
def _(listing, item_id, fraction):
    listed = next(item for item in listing if item.id == item_id)
    assert listed.discount_fraction == pytest.approx(fraction)


@then(parsers.cfparse("the reference price is {price:f}"))
def _(listing, item_id, price):
    listed = next(item for item in listing if item.id == item_id)
    assert listed.reference_price == pytest.approx(price)


@then("the item is not discounted")
def _(listing, item_id):
    listed = next(item for item in listing if item.id == item_id)
    assert listed.discount_fraction is None
    assert not listed.is_discounted
