"""Order placement: validate, reserve stock, write the header, then its lines.

The header and the lines are separate writes with no enclosing transaction.
When a line write fails the placement compensates: it deletes whatever was
written, releases the order's reservations and raises PartialFailureError.
If the compensation fails too, the header stays behind as an orphan that
``find_orphaned_orders`` reports and ``repair_orphaned_order`` removes.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from freshcart.catalogue.item import CatalogItem
from freshcart.catalogue.units import ensure_compatible, native_unit, to_canonical
from freshcart.errors import EmptyCartError, NotAuthenticatedError, PartialFailureError, PriceMismatchError
from freshcart.inventory.ledger import InventoryLedger, StockDemand, inventory_ledger
from freshcart.order.order import Order, OrderLine
from freshcart.order.request import OrderRequest, OrderRequestLine
from freshcart.payments.method import PaymentMethod

logger = structlog.get_logger(__name__)

# Submitted totals must match the line subtotals to the cent
PRICE_TOLERANCE = 0.005


class OrderPlacement:
    def __init__(self, ledger: InventoryLedger | None = None) -> None:
        self.ledger = ledger or inventory_ledger

    # -------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------
    def create_order(self, buyer_id, items, total_price, payment_method_id=None) -> Order:
        """Place an order from raw line dicts ``{item_id, quantity, unit_price, measurement_unit?}``.

        A missing measurement unit defaults to the item's native unit.
        """
        if not buyer_id:
            raise NotAuthenticatedError({"buyer_id": ["Sign in to place an order"]})
        if not items:
            raise EmptyCartError({"items": ["An order needs at least one line"]})

        catalog = current_domain.repository_for(CatalogItem)
        lines = []
        for entry in items:
            item = catalog.get(entry["item_id"])
            lines.append(
                OrderRequestLine(
                    item_id=str(item.id),
                    item_name=item.name,
                    measurement_unit=entry.get("measurement_unit") or native_unit(item.unit_kind).value,
                    quantity=entry["quantity"],
                    unit_price=entry["unit_price"],
                )
            )

        request = OrderRequest(
            buyer_id=str(buyer_id),
            lines=tuple(lines),
            total=total_price,
            payment_method_id=str(payment_method_id) if payment_method_id else None,
        )
        return self.place(request)

    def place(self, request: OrderRequest) -> Order:
        demands = self._validate(request)

        order = Order.place(
            buyer_id=request.buyer_id,
            total_price=request.computed_total,
            line_count=len(request.lines),
            payment_method_id=request.payment_method_id,
        )
        log = logger.bind(order_id=str(order.id), buyer_id=request.buyer_id)

        self.ledger.reserve_all(order.id, demands)

        try:
            current_domain.repository_for(Order).add(order)
        except Exception:
            log.error("Order header write failed, releasing stock")
            self.ledger.release_all(order.id, demands)
            raise

        try:
            self._persist_lines(order, request, demands)
        except Exception as exc:
            log.error("Order line write failed", error=str(exc))
            repaired = self._compensate(order, demands, log)
            raise PartialFailureError(str(order.id), repaired, str(exc)) from exc

        log.info("Order placed", total_price=order.total_price, line_count=order.line_count)
        return order

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------
    def _validate(self, request: OrderRequest) -> list[StockDemand]:
        """Check the request before any write. Returns the canonical stock demands."""
        if not request.buyer_id:
            raise NotAuthenticatedError({"buyer_id": ["Sign in to place an order"]})
        if not request.lines:
            raise EmptyCartError({"items": ["An order needs at least one line"]})

        for line in request.lines:
            if not isinstance(line.quantity, int) or line.quantity < 1:
                raise ValidationError({"quantity": [f"Quantity of {line.item_name} must be a whole number of at least 1"]})
            if line.unit_price is None or line.unit_price < 0:
                raise ValidationError({"unit_price": [f"Price of {line.item_name} cannot be negative"]})

        expected = round(request.computed_total, 2)
        if request.total is None or abs(request.total - expected) >= PRICE_TOLERANCE:
            raise PriceMismatchError(
                {"total_price": [f"Submitted total {request.total} does not match line subtotals {expected:.2f}"]}
            )

        if request.payment_method_id:
            try:
                method = current_domain.repository_for(PaymentMethod).get(request.payment_method_id)
            except ObjectNotFoundError:
                raise ValidationError(
                    {"payment_method_id": [f"Unknown payment method {request.payment_method_id}"]}
                ) from None
            if not method.is_enabled:
                raise ValidationError({"payment_method_id": [f"{method.name} is not accepted at the moment"]})

        catalog = current_domain.repository_for(CatalogItem)
        demands = []
        for line in request.lines:
            item = catalog.get(line.item_id)
            ensure_compatible(item.unit_kind, line.measurement_unit)
            demands.append(
                StockDemand(
                    item_id=str(item.id),
                    quantity=to_canonical(item.unit_kind, line.measurement_unit, line.quantity),
                )
            )
        return demands

    # -------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------
    def _persist_lines(self, order: Order, request: OrderRequest, demands: list[StockDemand]) -> None:
        repo = current_domain.repository_for(OrderLine)
        for position, (line, demand) in enumerate(zip(request.lines, demands, strict=True), start=1):
            repo.add(
                OrderLine.record(
                    order_id=str(order.id),
                    position=position,
                    item_id=line.item_id,
                    item_name=line.item_name,
                    measurement_unit=line.measurement_unit,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    canonical_quantity=demand.quantity,
                )
            )

    def _delete_order(self, order: Order) -> None:
        line_repo = current_domain.repository_for(OrderLine)
        for line in line_repo.for_order(order.id):
            line_repo._dao.delete(line)
        current_domain.repository_for(Order)._dao.delete(order)

    def _compensate(self, order: Order, demands: list[StockDemand], log) -> bool:
        """Undo a partially written order. Returns False when the undo itself failed."""
        try:
            self._delete_order(order)
            self.ledger.release_all(order.id, demands)
        except Exception as exc:
            log.error("Compensation failed, order left orphaned", error=str(exc))
            return False
        log.warning("Partially written order removed and stock released")
        return True

    # -------------------------------------------------------------------
    # Orphans
    # -------------------------------------------------------------------
    def find_orphaned_orders(self) -> list[Order]:
        """Orders whose persisted lines are fewer than their ``line_count``."""
        written = current_domain.repository_for(OrderLine).counts_by_order()
        orders = current_domain.repository_for(Order).list_orders()
        return [order for order in orders if written[str(order.id)] < order.line_count]

    def repair_orphaned_order(self, order_id) -> int:
        """Remove an orphaned order and release its stock. Returns the reservations released."""
        order = current_domain.repository_for(Order).get(order_id)
        written = len(current_domain.repository_for(OrderLine).for_order(order.id))
        if written >= order.line_count:
            raise ValidationError({"order_id": [f"Order {order_id} is complete and cannot be repaired"]})

        released = self.ledger.release_order(order.id)
        self._delete_order(order)
        logger.warning("Orphaned order repaired", order_id=str(order_id), released=released)
        return released


order_placement = OrderPlacement()
