"""Order lifecycle — rider assignment, status transitions and payment.

Side effects of a transition run in the same handler:
- Cancelled releases every line's stock reservation
- Delivered commits the reservations and issues the invoice
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from freshcart.domain import freshcart
from freshcart.inventory.ledger import StockDemand, inventory_ledger
from freshcart.invoice.invoice import generate_invoice
from freshcart.order.order import Order, OrderLine, OrderStatus
from freshcart.rider.registration import ensure_rider_available

logger = structlog.get_logger(__name__)


@freshcart.command(part_of="Order")
class AssignRider:
    order_id = Identifier(required=True)
    rider_id = Identifier(required=True)


@freshcart.command(part_of="Order")
class TransitionOrder:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    rider_id = Identifier()
    reason = String(max_length=500)


@freshcart.command(part_of="Order")
class UpdateOrder:
    """Partial update as sent by the store and rider screens."""

    order_id = Identifier(required=True)
    status = String(max_length=20)
    rider_id = Identifier()
    reason = String(max_length=500)


@freshcart.command(part_of="Order")
class MarkOrderPaid:
    order_id = Identifier(required=True)


@freshcart.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(AssignRider)
    def assign_rider(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        self._assign(order, command.rider_id)
        repo.add(order)
        return str(order.id)

    @handle(TransitionOrder)
    def transition_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        self._transition(order, command.status, command.rider_id, command.reason)
        repo.add(order)
        return str(order.id)

    @handle(UpdateOrder)
    def update_order(self, command):
        if not command.status and not command.rider_id:
            raise ValidationError({"order": ["Nothing to update: give a status, a rider or both"]})

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not command.status or (command.status == order.status and command.rider_id):
            self._assign(order, command.rider_id)
        else:
            self._transition(order, command.status, command.rider_id, command.reason)
        repo.add(order)
        return str(order.id)

    @handle(MarkOrderPaid)
    def mark_order_paid(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_paid()
        repo.add(order)
        logger.info("Order marked paid", order_id=str(order.id))
        return str(order.id)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _assign(self, order, rider_id):
        ensure_rider_available(rider_id)
        order.assign_rider(rider_id)
        logger.info("Rider assigned", order_id=str(order.id), rider_id=str(rider_id))

    def _transition(self, order, status, rider_id=None, reason=None):
        if rider_id:
            ensure_rider_available(rider_id)

        previous = order.status
        target = order.transition(status, rider_id=rider_id, reason=reason)

        if target in (OrderStatus.CANCELLED, OrderStatus.DELIVERED):
            lines = current_domain.repository_for(OrderLine).for_order(order.id)
            if target == OrderStatus.CANCELLED:
                inventory_ledger.release_all(
                    order.id,
                    [StockDemand(str(line.item_id), line.canonical_quantity) for line in lines],
                )
            else:
                inventory_ledger.commit(order.id, [line.item_id for line in lines])
                generate_invoice(order, lines)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
            rider_id=str(order.rider_id) if order.rider_id else None,
        )
