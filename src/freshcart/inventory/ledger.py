"""Inventory ledger — the authoritative stock check at order placement.

Cart-side stock checks are advisory. The ledger re-reads each item and
performs check-and-decrement under a process-wide re-entrant lock, so two
orders racing for the last units cannot both succeed.

Demands against the same item are applied to one loaded aggregate and
persisted once, so a multi-line order never overwrites its own earlier
reservation with a stale copy of the item.
"""

import threading
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from freshcart.catalogue.item import CatalogItem

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockDemand:
    """Canonical quantity of one item needed by one order line."""

    item_id: str
    quantity: float


def _group_by_item(demands) -> "OrderedDict[str, list[float]]":
    grouped: OrderedDict[str, list[float]] = OrderedDict()
    for demand in demands:
        grouped.setdefault(str(demand.item_id), []).append(demand.quantity)
    return grouped


class InventoryLedger:
    _lock = threading.RLock()

    @contextmanager
    def locked(self):
        """Hold the stock lock across a caller's own load, change and save of an item."""
        with self._lock:
            yield

    # -------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------
    def reserve(self, item_id, canonical_quantity: float, order_id) -> None:
        self.reserve_all(order_id, [StockDemand(str(item_id), canonical_quantity)])

    def reserve_all(self, order_id, demands) -> None:
        """Reserve every demand for ``order_id`` or none of them.

        A failure on any item releases what was already reserved for the
        order and re-raises the original error.
        """
        with self._lock:
            repo = current_domain.repository_for(CatalogItem)
            reserved: list[StockDemand] = []
            try:
                for item_id, quantities in _group_by_item(demands).items():
                    item = repo.get(item_id)
                    for quantity in quantities:
                        item.reserve_stock(order_id, quantity)
                    repo.add(item)
                    reserved.extend(StockDemand(item_id, quantity) for quantity in quantities)
            except Exception:
                if reserved:
                    logger.warning(
                        "Rolling back partial reservation",
                        order_id=str(order_id),
                        released_lines=len(reserved),
                    )
                    self.release_all(order_id, reserved)
                raise

            logger.info("Stock reserved", order_id=str(order_id), lines=len(reserved))

    def release(self, item_id, canonical_quantity: float, order_id) -> None:
        self.release_all(order_id, [StockDemand(str(item_id), canonical_quantity)])

    def release_all(self, order_id, demands) -> None:
        """Reverse active reservations of ``order_id``.

        Raises ReservationNotFoundError when a demand has no matching active
        reservation; items processed before it stay released.
        """
        with self._lock:
            repo = current_domain.repository_for(CatalogItem)
            for item_id, quantities in _group_by_item(demands).items():
                item = repo.get(item_id)
                for quantity in quantities:
                    item.release_stock(order_id, quantity)
                repo.add(item)
                logger.info(
                    "Stock released",
                    order_id=str(order_id),
                    item_id=item_id,
                    quantity=sum(quantities),
                    stock_quantity=item.stock_quantity,
                )

    def release_order(self, order_id) -> int:
        """Release every active reservation held by ``order_id``, wherever it is.

        Used to repair orders whose line records are missing, so the demands
        are recovered from the reservations themselves.
        """
        released = 0
        with self._lock:
            repo = current_domain.repository_for(CatalogItem)
            for item in repo.all_by_name(include_unlisted=True):
                held = [r for r in item.active_reservations if str(r.order_id) == str(order_id)]
                if not held:
                    continue
                for reservation in held:
                    item.release_stock(order_id, reservation.quantity)
                repo.add(item)
                released += len(held)
        logger.info("Order reservations released", order_id=str(order_id), count=released)
        return released

    def commit(self, order_id, item_ids) -> int:
        """Make the order's reservations final. Returns the number committed."""
        committed = 0
        with self._lock:
            repo = current_domain.repository_for(CatalogItem)
            for item_id in dict.fromkeys(str(i) for i in item_ids):
                item = repo.get(item_id)
                count = item.commit_reservations(order_id)
                if count:
                    repo.add(item)
                    committed += count
        logger.info("Reservations committed", order_id=str(order_id), count=committed)
        return committed

    # -------------------------------------------------------------------
    # Manual correction
    # -------------------------------------------------------------------
    def adjust(self, item_id, new_quantity: float) -> None:
        with self._lock:
            repo = current_domain.repository_for(CatalogItem)
            item = repo.get(item_id)
            self.apply_adjustment(item, new_quantity)
            repo.add(item)

    def apply_adjustment(self, item, new_quantity: float) -> None:
        """Overwrite the stock of an already loaded item. The caller saves it."""
        with self._lock:
            previous = item.stock_quantity
            item.adjust_stock(new_quantity)
        logger.info(
            "Stock adjusted",
            item_id=str(item.id),
            previous_quantity=previous,
            new_quantity=item.stock_quantity,
        )


inventory_ledger = InventoryLedger()
