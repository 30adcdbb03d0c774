"""Rider-facing order queries."""

from protean.utils.globals import current_domain

from freshcart.order.order import Order


def available_orders() -> list[Order]:
    """Pending orders without a rider, oldest first."""
    return current_domain.repository_for(Order).available_orders()


def active_deliveries(rider_id) -> list[Order]:
    """Orders the rider is currently delivering."""
    return current_domain.repository_for(Order).active_deliveries(rider_id)
