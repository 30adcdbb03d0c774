"""Invoices, computed once when an order is delivered.

Invoices are never edited: subtotal equals the order's total price, tax is
the configured rate applied to the subtotal.
"""

from datetime import UTC, datetime
from uuid import uuid4

import structlog
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String
from protean.utils.globals import current_domain

from freshcart.domain import custom_setting, freshcart
from freshcart.invoice.events import InvoiceIssued

logger = structlog.get_logger(__name__)

DEFAULT_TAX_RATE = 0.0


@freshcart.entity(part_of="Invoice")
class InvoiceLine:
    description = String(required=True, max_length=500)
    measurement_unit = String(max_length=20)
    quantity = Integer(required=True)
    unit_price = Float(required=True)
    total = Float(required=True)


@freshcart.aggregate
class Invoice:
    invoice_number = String(required=True, max_length=50)
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    lines = HasMany(InvoiceLine)
    subtotal = Float(default=0.0)
    tax_rate = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0)
    total = Float(default=0.0)
    issued_at = DateTime()

    @classmethod
    def issue(cls, order, order_lines, tax_rate: float = DEFAULT_TAX_RATE):
        """Build the invoice of a delivered ``order``."""
        now = datetime.now(UTC)
        subtotal = round(order.total_price, 2)
        tax = round(subtotal * tax_rate, 2)
        invoice = cls(
            invoice_number=f"INV-{uuid4().hex[:8].upper()}",
            order_id=str(order.id),
            buyer_id=str(order.buyer_id),
            subtotal=subtotal,
            tax_rate=tax_rate,
            tax=tax,
            total=round(subtotal + tax, 2),
            issued_at=now,
        )
        for line in order_lines:
            invoice.add_lines(
                InvoiceLine(
                    description=line.item_name,
                    measurement_unit=line.measurement_unit,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total=round(line.unit_price * line.quantity, 2),
                )
            )

        invoice.raise_(
            InvoiceIssued(
                invoice_id=str(invoice.id),
                order_id=invoice.order_id,
                buyer_id=invoice.buyer_id,
                invoice_number=invoice.invoice_number,
                total=invoice.total,
                issued_at=now,
            )
        )
        return invoice


@freshcart.repository(part_of=Invoice)
class InvoiceRepository:
    def for_order(self, order_id) -> Invoice | None:
        invoices = self._dao.query.filter(order_id=str(order_id)).all().items
        return invoices[0] if invoices else None


def configured_tax_rate() -> float:
    return custom_setting("TAX_RATE", DEFAULT_TAX_RATE)


def generate_invoice(order, order_lines) -> Invoice:
    """Issue the order's invoice, or return the one already issued."""
    repo = current_domain.repository_for(Invoice)
    existing = repo.for_order(order.id)
    if existing is not None:
        logger.info("Invoice already issued", order_id=str(order.id), invoice_number=existing.invoice_number)
        return existing

    invoice = Invoice.issue(order, order_lines, tax_rate=configured_tax_rate())
    repo.add(invoice)
    logger.info(
        "Invoice issued",
        order_id=str(order.id),
        invoice_number=invoice.invoice_number,
        total=invoice.total,
    )
    return invoice
