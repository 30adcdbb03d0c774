"""Order read side."""

from protean.utils.globals import current_domain

from freshcart.invoice.invoice import Invoice
from freshcart.order.order import Order, OrderLine


def list_orders(buyer_id=None, status=None, rider_id=None) -> list[Order]:
    return current_domain.repository_for(Order).list_orders(buyer_id=buyer_id, status=status, rider_id=rider_id)


def get_order(order_id) -> tuple[Order, list[OrderLine]]:
    """The order header with its lines in position order. Raises ObjectNotFoundError if unknown."""
    order = current_domain.repository_for(Order).get(order_id)
    return order, current_domain.repository_for(OrderLine).for_order(order.id)


def invoice_for(order_id) -> Invoice | None:
    return current_domain.repository_for(Invoice).for_order(order_id)
