"""The immutable hand-off from a submitted cart to order placement."""

from dataclasses import dataclass, field

from freshcart.order.order import OrderStatus, PaymentStatus


@dataclass(frozen=True)
class OrderRequestLine:
    item_id: str
    item_name: str
    measurement_unit: str
    quantity: int
    unit_price: float

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderRequest:
    """What the buyer asked for, priced at submission time."""

    buyer_id: str
    lines: tuple[OrderRequestLine, ...]
    total: float
    payment_method_id: str | None = None
    status: str = field(default=OrderStatus.PENDING.value)
    payment_status: str = field(default=PaymentStatus.PENDING.value)

    @property
    def computed_total(self) -> float:
        return sum(line.subtotal for line in self.lines)
