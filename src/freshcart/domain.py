"""FreshCart domain — catalogue, carts, orders, riders and invoices.

A single bounded context around a perishable-goods store: buyers build carts
from a priced catalogue, the store operator and riders drive orders from
placement to delivery, and invoices are issued for delivered orders.
"""

import structlog
from protean.domain import Domain
from protean.utils.globals import current_domain

freshcart = Domain(name="freshcart")

logger = structlog.get_logger(__name__)


def custom_setting(key: str, default: float) -> float:
    """Numeric value of ``key`` from the ``[custom]`` config table, or ``default``.

    A missing key (or no active domain) is normal and silent. A value that is
    present but not a number is logged and ignored.
    """
    try:
        raw = current_domain.config["custom"][key]
    except (AttributeError, KeyError, TypeError):
        return default

    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("Malformed custom setting, using default", key=key, value=repr(raw), default=default)
        return default
