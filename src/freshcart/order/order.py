"""Order aggregate (CQRS) — the order header and its delivery lifecycle.

Line records live in the separate OrderLine aggregate and are written after
the header, so ``line_count`` is kept on the header to detect orders whose
lines were never fully written.

State Machine:
    PENDING → EN_ROUTE → DELIVERED
    PENDING → CANCELLED
    EN_ROUTE → CANCELLED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, Integer, String

from freshcart.domain import freshcart
from freshcart.errors import AlreadyDeliveredError, InvalidTransitionError
from freshcart.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderDispatched,
    OrderLineRecorded,
    OrderPaid,
    OrderPlaced,
    RiderAssigned,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    EN_ROUTE = "EnRoute"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.EN_ROUTE, OrderStatus.CANCELLED},
    OrderStatus.EN_ROUTE: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# States in which a rider may be (re)assigned
_ASSIGNABLE_STATES = {OrderStatus.PENDING, OrderStatus.EN_ROUTE}


@freshcart.aggregate
class Order:
    buyer_id = Identifier(required=True)
    total_price = Float(required=True, min_value=0.0)
    line_count = Integer(required=True, min_value=1)
    status = String(
        max_length=20,
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    rider_id = Identifier()
    payment_method_id = Identifier()
    payment_status = String(
        max_length=20,
        choices=PaymentStatus,
        default=PaymentStatus.PENDING.value,
    )
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    dispatched_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    paid_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, buyer_id, total_price, line_count, payment_method_id=None):
        now = datetime.now(UTC)
        order = cls(
            buyer_id=buyer_id,
            total_price=round(total_price, 2),
            line_count=line_count,
            status=OrderStatus.PENDING.value,
            payment_method_id=payment_method_id,
            payment_status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                buyer_id=str(buyer_id),
                total_price=order.total_price,
                line_count=line_count,
                payment_method_id=str(payment_method_id) if payment_method_id else None,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    @staticmethod
    def _parse_status(value) -> OrderStatus:
        try:
            return OrderStatus(value)
        except ValueError:
            raise InvalidTransitionError({"status": [f"Unknown order status: {value}"]}) from None

    def can_transition_to(self, target_status) -> bool:
        return self._parse_status(target_status) in _VALID_TRANSITIONS[OrderStatus(self.status)]

    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if current == OrderStatus.DELIVERED and target_status == OrderStatus.DELIVERED:
            raise AlreadyDeliveredError({"status": [f"Order {self.id} is already delivered"]})
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidTransitionError(
                {"status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    # -------------------------------------------------------------------
    # Rider
    # -------------------------------------------------------------------
    def assign_rider(self, rider_id):
        """Attach a rider without changing status. Allowed while Pending or EnRoute."""
        current = OrderStatus(self.status)
        if current not in _ASSIGNABLE_STATES:
            raise InvalidTransitionError({"rider_id": [f"Cannot assign a rider to a {current.value} order"]})
        if self.rider_id and str(self.rider_id) == str(rider_id):
            return

        previous = self.rider_id
        now = datetime.now(UTC)
        self.rider_id = rider_id
        self.updated_at = now
        self.raise_(
            RiderAssigned(
                order_id=str(self.id),
                rider_id=str(rider_id),
                previous_rider_id=str(previous) if previous else None,
                assigned_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def transition(self, target_status, rider_id=None, reason=None) -> OrderStatus:
        """Move to ``target_status`` along a legal edge. Returns the new status.

        Illegal requests raise before anything on the order changes.
        """
        target = self._parse_status(target_status)
        self._assert_can_transition(target)

        if target == OrderStatus.EN_ROUTE:
            if not (rider_id or self.rider_id):
                raise InvalidTransitionError({"rider_id": ["A rider must be assigned before dispatch"]})
            if rider_id:
                self.assign_rider(rider_id)
            self._dispatch()
        elif target == OrderStatus.DELIVERED:
            self._deliver()
        else:
            self._cancel(reason)
        return target

    def _dispatch(self):
        now = datetime.now(UTC)
        self.status = OrderStatus.EN_ROUTE.value
        self.dispatched_at = now
        self.updated_at = now
        self.raise_(OrderDispatched(order_id=str(self.id), rider_id=str(self.rider_id), dispatched_at=now))

    def _deliver(self):
        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.delivered_at = now
        self.updated_at = now
        self.raise_(OrderDelivered(order_id=str(self.id), rider_id=str(self.rider_id), delivered_at=now))

    def _cancel(self, reason):
        previous = self.status
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=previous,
                reason=reason,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def mark_paid(self):
        """Record that the buyer paid. No money is captured here."""
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise InvalidTransitionError({"payment_status": ["Cannot record payment for a cancelled order"]})
        if self.payment_status == PaymentStatus.PAID.value:
            return

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.PAID.value
        self.paid_at = now
        self.updated_at = now
        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_method_id=str(self.payment_method_id) if self.payment_method_id else None,
                paid_at=now,
            )
        )


@freshcart.aggregate
class OrderLine:
    """One purchased item of an order, as priced when the order was placed."""

    order_id = Identifier(required=True)
    position = Integer(required=True, min_value=1)
    item_id = Identifier(required=True)
    item_name = String(required=True, max_length=255)
    measurement_unit = String(required=True, max_length=20)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    canonical_quantity = Float(required=True, min_value=0.0)

    @classmethod
    def record(cls, order_id, position, item_id, item_name, measurement_unit, quantity, unit_price, canonical_quantity):
        line = cls(
            order_id=order_id,
            position=position,
            item_id=item_id,
            item_name=item_name,
            measurement_unit=measurement_unit,
            quantity=quantity,
            unit_price=unit_price,
            canonical_quantity=canonical_quantity,
        )
        line.raise_(
            OrderLineRecorded(
                order_id=str(order_id),
                line_id=str(line.id),
                position=position,
                item_id=str(item_id),
                quantity=quantity,
                unit_price=unit_price,
            )
        )
        return line

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity
