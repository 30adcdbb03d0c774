"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from freshcart.domain import freshcart


@freshcart.event(part_of="ShoppingCart")
class CartLineAdded:
    """One measurement unit of an item was added to the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    measurement_unit = String(required=True)
    quantity = Integer(required=True)
    unit_price = Float(required=True)


@freshcart.event(part_of="ShoppingCart")
class CartLineRemoved:
    """One measurement unit of an item was taken out of the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    measurement_unit = String(required=True)
    remaining_quantity = Integer(required=True)


@freshcart.event(part_of="ShoppingCart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)
    lines_removed = Integer(required=True)
