"""Pydantic request/response schemas for the FreshCart API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class CatalogItemResponse(BaseModel):
    id: str
    name: str
    unit_kind: str
    price_unit: float
    price_kilogram: float
    price_pound: float
    stock_quantity: float
    reorder_threshold: float
    cost_basis: float
    is_listed: bool
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    expiry_date: datetime | None = None
    discount_fraction: float | None = None
    reference_price: float | None = None
    reference_price_kilogram: float | None = None
    reference_price_pound: float | None = None
    # Store views only: selling price minus cost per unit sold
    margins: dict[str, float] | None = None


class CreateCatalogItemRequest(BaseModel):
    name: str
    unit_kind: str = "discrete"
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    price_unit: float = Field(ge=0, default=0.0)
    price_kilogram: float = Field(ge=0, default=0.0)
    price_pound: float = Field(ge=0, default=0.0)
    stock_quantity: float = Field(ge=0, default=0.0)
    reorder_threshold: float = Field(ge=0, default=5.0)
    cost_basis: float = Field(ge=0, default=0.0)
    expiry_date: datetime | None = None
    is_listed: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Tomatoes",
                    "unit_kind": "weighted",
                    "price_kilogram": 4.0,
                    "price_pound": 1.81,
                    "stock_quantity": 40.0,
                    "category": "Vegetables",
                }
            ]
        }
    }


class UpdateCatalogItemRequest(BaseModel):
    """Every field is optional; only the ones sent are changed."""

    name: str | None = None
    unit_kind: str | None = None
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    price_unit: float | None = Field(ge=0, default=None)
    price_kilogram: float | None = Field(ge=0, default=None)
    price_pound: float | None = Field(ge=0, default=None)
    stock_quantity: float | None = Field(ge=0, default=None)
    reorder_threshold: float | None = Field(ge=0, default=None)
    cost_basis: float | None = Field(ge=0, default=None)
    expiry_date: datetime | None = None
    is_listed: bool | None = None


class AdjustStockRequest(BaseModel):
    new_quantity: float = Field(ge=0)


# ---------------------------------------------------------------------------
# Carts
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    buyer_id: str | None = None


class CartItemRequest(BaseModel):
    item_id: str
    measurement_unit: str = "unit"


class CartLineResponse(BaseModel):
    item_id: str
    item_name: str
    unit_kind: str
    measurement_unit: str
    quantity: int
    unit_price: float
    subtotal: float


class CartResponse(BaseModel):
    id: str
    buyer_id: str | None = None
    lines: list[CartLineResponse]
    total: float


class CheckoutRequest(BaseModel):
    buyer_id: str | None = None
    payment_method_id: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    item_id: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    measurement_unit: str | None = None


class CreateOrderRequest(BaseModel):
    buyer_id: str
    items: list[OrderItemSchema]
    total_price: float = Field(ge=0)
    payment_method_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "buyer_id": "buyer-001",
                    "items": [
                        {"item_id": "item-001", "quantity": 2, "unit_price": 5.0},
                        {"item_id": "item-002", "quantity": 1, "unit_price": 3.0},
                    ],
                    "total_price": 13.0,
                }
            ]
        }
    }


class UpdateOrderRequest(BaseModel):
    status: str | None = None
    rider_id: str | None = None
    reason: str | None = None


class OrderLineResponse(BaseModel):
    position: int
    item_id: str
    item_name: str
    measurement_unit: str
    quantity: int
    unit_price: float
    subtotal: float


class OrderResponse(BaseModel):
    id: str
    buyer_id: str
    total_price: float
    line_count: int
    status: str
    payment_status: str
    rider_id: str | None = None
    payment_method_id: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    dispatched_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    lines: list[OrderLineResponse] = []


class InvoiceLineResponse(BaseModel):
    description: str
    measurement_unit: str | None = None
    quantity: int
    unit_price: float
    total: float


class InvoiceResponse(BaseModel):
    invoice_number: str
    order_id: str
    buyer_id: str
    subtotal: float
    tax_rate: float
    tax: float
    total: float
    issued_at: datetime | None = None
    lines: list[InvoiceLineResponse]


# ---------------------------------------------------------------------------
# Riders
# ---------------------------------------------------------------------------
class RegisterRiderRequest(BaseModel):
    rider_id: str | None = None
    full_name: str
    id_number: str
    phone: str | None = None
    email: str | None = None
    vehicle_kind: str
    plate_number: str | None = None


class RiderStatusRequest(BaseModel):
    status: str


class RiderResponse(BaseModel):
    id: str
    full_name: str
    id_number: str
    phone: str | None = None
    email: str | None = None
    vehicle_kind: str
    plate_number: str | None = None
    status: str


# ---------------------------------------------------------------------------
# Payment methods
# ---------------------------------------------------------------------------
class AddPaymentMethodRequest(BaseModel):
    name: str
    is_enabled: bool = True


class PaymentMethodResponse(BaseModel):
    id: str
    name: str
    is_enabled: bool
