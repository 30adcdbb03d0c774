"""FreshCart HTTP API package."""

from freshcart.api.errors import register_error_handlers
from freshcart.api.routes import (
    cart_router,
    catalog_router,
    order_router,
    payment_method_router,
    rider_router,
)

routers = [catalog_router, cart_router, order_router, rider_router, payment_method_router]

__all__ = [
    "cart_router",
    "catalog_router",
    "order_router",
    "payment_method_router",
    "register_error_handlers",
    "rider_router",
    "routers",
]
