"""Cart commands and their handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from freshcart.cart.cart import ShoppingCart
from freshcart.catalogue.item import CatalogItem
from freshcart.catalogue.pricing import apply_freshness_discount
from freshcart.domain import freshcart


@freshcart.command(part_of="ShoppingCart")
class CreateCart:
    buyer_id = Identifier()


@freshcart.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    measurement_unit = String(required=True, max_length=20)


@freshcart.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    measurement_unit = String(required=True, max_length=20)


@freshcart.command(part_of="ShoppingCart")
class ClearCart:
    cart_id = Identifier(required=True)


@freshcart.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = ShoppingCart.create(buyer_id=command.buyer_id)
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(AddToCart)
    def add_to_cart(self, command):
        item = current_domain.repository_for(CatalogItem).get(command.item_id)
        if not item.is_listed:
            raise ValidationError({"item_id": [f"{item.name} is not for sale"]})

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.add(apply_freshness_discount(item), command.measurement_unit)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        if cart.remove(command.item_id, command.measurement_unit):
            repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.clear()
        repo.add(cart)
