"""Repositories for the Order and OrderLine aggregates."""

from collections import Counter

from protean.exceptions import ValidationError

from freshcart.domain import freshcart
from freshcart.order.order import Order, OrderLine, OrderStatus


@freshcart.repository(part_of=Order)
class OrderRepository:
    def list_orders(self, buyer_id=None, status=None, rider_id=None) -> list[Order]:
        """Orders matching every given filter, newest first."""
        filters = {}
        if buyer_id:
            filters["buyer_id"] = str(buyer_id)
        if status:
            try:
                filters["status"] = OrderStatus(status).value
            except ValueError:
                raise ValidationError({"status": [f"Unknown order status: {status}"]}) from None
        if rider_id:
            filters["rider_id"] = str(rider_id)

        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        return list(query.order_by("-created_at").limit(None).all().items)

    def available_orders(self) -> list[Order]:
        """Pending orders no rider has picked up yet, oldest first."""
        pending = (
            self._dao.query.filter(status=OrderStatus.PENDING.value).order_by("created_at").limit(None).all().items
        )
        return [order for order in pending if not order.rider_id]

    def active_deliveries(self, rider_id) -> list[Order]:
        return list(
            self._dao.query.filter(status=OrderStatus.EN_ROUTE.value, rider_id=str(rider_id))
            .order_by("dispatched_at")
            .limit(None)
            .all()
            .items
        )


@freshcart.repository(part_of=OrderLine)
class OrderLineRepository:
    def for_order(self, order_id) -> list[OrderLine]:
        return list(
            self._dao.query.filter(order_id=str(order_id)).order_by("position").limit(None).all().items
        )

    def counts_by_order(self) -> Counter:
        """Number of persisted lines per order id, across every order."""
        lines = self._dao.query.limit(None).all().items
        return Counter(str(line.order_id) for line in lines)
