"""Domain events for the Order and OrderLine aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from freshcart.domain import freshcart


@freshcart.event(part_of="Order")
class OrderPlaced:
    """An order header was accepted with its stock reserved."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    total_price = Float(required=True)
    line_count = Integer(required=True)
    payment_method_id = Identifier()
    placed_at = DateTime(required=True)


@freshcart.event(part_of="Order")
class RiderAssigned:
    __version__ = 1

    order_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    previous_rider_id = Identifier()
    assigned_at = DateTime(required=True)


@freshcart.event(part_of="Order")
class OrderDispatched:
    """The assigned rider picked the order up."""

    __version__ = 1

    order_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    dispatched_at = DateTime(required=True)


@freshcart.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@freshcart.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)


@freshcart.event(part_of="Order")
class OrderPaid:
    """Payment was recorded against the order. Nothing was captured."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_method_id = Identifier()
    paid_at = DateTime(required=True)


@freshcart.event(part_of="OrderLine")
class OrderLineRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    position = Integer(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)
    unit_price = Float(required=True)
