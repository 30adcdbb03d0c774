"""Checkout — turn a cart into a placed order.

The cart is cleared only after the order is fully placed. Any failure
leaves the cart untouched so the buyer can adjust it and retry.
"""

import structlog
from protean.utils.globals import current_domain

from freshcart.cart.cart import ShoppingCart
from freshcart.cart.items import ClearCart
from freshcart.order.order import Order
from freshcart.order.placement import order_placement

logger = structlog.get_logger(__name__)


def checkout(cart_id, buyer_id=None, payment_method_id=None) -> Order:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    request = cart.submit(buyer_id=buyer_id, payment_method_id=payment_method_id)

    try:
        order = order_placement.place(request)
    except Exception as exc:
        logger.warning("Checkout failed, cart kept", cart_id=str(cart_id), error=str(exc))
        raise

    current_domain.process(ClearCart(cart_id=str(cart_id)), asynchronous=False)
    logger.info("Checkout complete", cart_id=str(cart_id), order_id=str(order.id))
    return order
