"""Domain events for the Invoice aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from freshcart.domain import freshcart


@freshcart.event(part_of="Invoice")
class InvoiceIssued:
    """An invoice was issued for a delivered order."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    invoice_number = String(required=True)
    total = Float(required=True)
    issued_at = DateTime(required=True)
