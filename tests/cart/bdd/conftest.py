"""Shared BDD fixtures and step definitions for the Cart domain."""

import pytest
from pytest_bdd import parsers, then


@pytest.fixture()
def error():
    """Container for the error raised by the last step."""
    return {"exc": None}


@then(parsers.cfparse("the cart holds {quantity:d} {unit} of the item"))
def cart_holds(cart, priced_item, quantity, unit):
    line = next(line for line in cart.lines if line.measure.unit == unit)
    assert str(line.item_id) == priced_item.id
    assert line.quantity == quantity


@then("the cart is empty")
def cart_is_empty(cart):
    assert len(cart.lines) == 0
