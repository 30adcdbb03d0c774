"""FastAPI routes for the catalogue, carts, orders, riders and payment methods."""

from fastapi import APIRouter, HTTPException
from protean.utils.globals import current_domain

from freshcart.api.schemas import (
    AddPaymentMethodRequest,
    AdjustStockRequest,
    CartItemRequest,
    CartLineResponse,
    CartResponse,
    CatalogItemResponse,
    CheckoutRequest,
    CreateCartRequest,
    CreateCatalogItemRequest,
    CreateOrderRequest,
    IdResponse,
    InvoiceLineResponse,
    InvoiceResponse,
    OrderLineResponse,
    OrderResponse,
    PaymentMethodResponse,
    RegisterRiderRequest,
    RiderResponse,
    RiderStatusRequest,
    StatusResponse,
    UpdateCatalogItemRequest,
    UpdateOrderRequest,
)
from freshcart.cart.cart import ShoppingCart
from freshcart.cart.checkout import checkout
from freshcart.cart.items import AddToCart, CreateCart, RemoveFromCart
from freshcart.catalogue.listing import get_priced_item, list_catalog, low_stock_items
from freshcart.catalogue.management import AddCatalogItem, RemoveCatalogItem, UpdateCatalogItem
from freshcart.catalogue.pricing import unit_margins
from freshcart.inventory.adjustment import AdjustStock
from freshcart.order.lifecycle import MarkOrderPaid, UpdateOrder
from freshcart.order.placement import order_placement
from freshcart.order.queries import get_order, invoice_for, list_orders
from freshcart.payments.method import AddPaymentMethod, list_payment_methods
from freshcart.rider.deliveries import active_deliveries, available_orders
from freshcart.rider.registration import ChangeRiderStatus, RegisterRider, list_riders
from freshcart.rider.rider import Rider


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------
def _order_response(order, lines=None) -> OrderResponse:
    if lines is None:
        order, lines = get_order(order.id)
    return OrderResponse(
        id=str(order.id),
        buyer_id=str(order.buyer_id),
        total_price=order.total_price,
        line_count=order.line_count,
        status=order.status,
        payment_status=order.payment_status,
        rider_id=str(order.rider_id) if order.rider_id else None,
        payment_method_id=str(order.payment_method_id) if order.payment_method_id else None,
        cancellation_reason=order.cancellation_reason,
        created_at=order.created_at,
        updated_at=order.updated_at,
        dispatched_at=order.dispatched_at,
        delivered_at=order.delivered_at,
        cancelled_at=order.cancelled_at,
        lines=[
            OrderLineResponse(
                position=line.position,
                item_id=str(line.item_id),
                item_name=line.item_name,
                measurement_unit=line.measurement_unit,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.subtotal,
            )
            for line in lines
        ],
    )


def _cart_response(cart) -> CartResponse:
    return CartResponse(
        id=str(cart.id),
        buyer_id=str(cart.buyer_id) if cart.buyer_id else None,
        lines=[
            CartLineResponse(
                item_id=str(line.item_id),
                item_name=line.item_name,
                unit_kind=line.measure.kind,
                measurement_unit=line.measure.unit,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.subtotal,
            )
            for line in cart.lines
        ],
        total=cart.total(),
    )


def _store_item_response(item) -> CatalogItemResponse:
    return CatalogItemResponse(**item.to_dict(), margins=unit_margins(item))


def _rider_response(rider) -> RiderResponse:
    return RiderResponse(
        id=str(rider.id),
        full_name=rider.full_name,
        id_number=rider.id_number,
        phone=rider.phone,
        email=rider.email,
        vehicle_kind=rider.vehicle_kind,
        plate_number=rider.plate_number,
        status=rider.status,
    )


# ---------------------------------------------------------------------------
# Catalogue Router
# ---------------------------------------------------------------------------
catalog_router = APIRouter(prefix="/catalog", tags=["catalog"])


@catalog_router.get("", response_model=list[CatalogItemResponse])
async def get_catalog(include_unlisted: bool = False) -> list[CatalogItemResponse]:
    """Buyer listing. With ``include_unlisted`` it is the store view and carries margins."""
    items = list_catalog(include_unlisted=include_unlisted)
    if include_unlisted:
        return [_store_item_response(item) for item in items]
    return [CatalogItemResponse(**item.to_dict()) for item in items]


@catalog_router.get("/low-stock", response_model=list[CatalogItemResponse])
async def get_low_stock() -> list[CatalogItemResponse]:
    return [_store_item_response(item) for item in low_stock_items()]


@catalog_router.get("/{item_id}", response_model=CatalogItemResponse)
async def get_catalog_item(item_id: str) -> CatalogItemResponse:
    return CatalogItemResponse(**get_priced_item(item_id).to_dict())


@catalog_router.post("", status_code=201, response_model=IdResponse)
async def create_catalog_item(body: CreateCatalogItemRequest) -> IdResponse:
    command = AddCatalogItem(**body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@catalog_router.patch("/{item_id}", response_model=StatusResponse)
async def update_catalog_item(item_id: str, body: UpdateCatalogItemRequest) -> StatusResponse:
    command = UpdateCatalogItem(item_id=item_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@catalog_router.put("/{item_id}/stock", response_model=StatusResponse)
async def adjust_stock(item_id: str, body: AdjustStockRequest) -> StatusResponse:
    command = AdjustStock(item_id=item_id, new_quantity=body.new_quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@catalog_router.delete("/{item_id}", response_model=StatusResponse)
async def delete_catalog_item(item_id: str) -> StatusResponse:
    current_domain.process(RemoveCatalogItem(item_id=item_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=IdResponse)
async def create_cart(body: CreateCartRequest) -> IdResponse:
    result = current_domain.process(CreateCart(buyer_id=body.buyer_id), asynchronous=False)
    return IdResponse(id=result)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str) -> CartResponse:
    return _cart_response(current_domain.repository_for(ShoppingCart).get(cart_id))


@cart_router.post("/{cart_id}/items", response_model=CartResponse)
async def add_cart_item(cart_id: str, body: CartItemRequest) -> CartResponse:
    command = AddToCart(
        cart_id=cart_id,
        item_id=body.item_id,
        measurement_unit=body.measurement_unit,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(current_domain.repository_for(ShoppingCart).get(cart_id))


@cart_router.delete("/{cart_id}/items", response_model=CartResponse)
async def remove_cart_item(cart_id: str, item_id: str, measurement_unit: str = "unit") -> CartResponse:
    command = RemoveFromCart(
        cart_id=cart_id,
        item_id=item_id,
        measurement_unit=measurement_unit,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(current_domain.repository_for(ShoppingCart).get(cart_id))


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=OrderResponse)
async def checkout_cart(cart_id: str, body: CheckoutRequest) -> OrderResponse:
    order = checkout(cart_id, buyer_id=body.buyer_id, payment_method_id=body.payment_method_id)
    return _order_response(order)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest) -> OrderResponse:
    order = order_placement.create_order(
        buyer_id=body.buyer_id,
        items=[item.model_dump() for item in body.items],
        total_price=body.total_price,
        payment_method_id=body.payment_method_id,
    )
    return _order_response(order)


@order_router.get("", response_model=list[OrderResponse])
async def get_orders(
    buyer_id: str | None = None,
    status: str | None = None,
    rider_id: str | None = None,
) -> list[OrderResponse]:
    return [_order_response(order) for order in list_orders(buyer_id=buyer_id, status=status, rider_id=rider_id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_detail(order_id: str) -> OrderResponse:
    order, lines = get_order(order_id)
    return _order_response(order, lines)


@order_router.get("/{order_id}/invoice", response_model=InvoiceResponse)
async def get_order_invoice(order_id: str) -> InvoiceResponse:
    invoice = invoice_for(order_id)
    if invoice is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} has no invoice")
    return InvoiceResponse(
        invoice_number=invoice.invoice_number,
        order_id=str(invoice.order_id),
        buyer_id=str(invoice.buyer_id),
        subtotal=invoice.subtotal,
        tax_rate=invoice.tax_rate,
        tax=invoice.tax,
        total=invoice.total,
        issued_at=invoice.issued_at,
        lines=[
            InvoiceLineResponse(
                description=line.description,
                measurement_unit=line.measurement_unit,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total=line.total,
            )
            for line in invoice.lines
        ],
    )


@order_router.patch("/{order_id}", response_model=OrderResponse)
async def update_order(order_id: str, body: UpdateOrderRequest) -> OrderResponse:
    command = UpdateOrder(
        order_id=order_id,
        status=body.status,
        rider_id=body.rider_id,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    order, lines = get_order(order_id)
    return _order_response(order, lines)


@order_router.put("/{order_id}/payment", response_model=OrderResponse)
async def mark_order_paid(order_id: str) -> OrderResponse:
    current_domain.process(MarkOrderPaid(order_id=order_id), asynchronous=False)
    order, lines = get_order(order_id)
    return _order_response(order, lines)


# ---------------------------------------------------------------------------
# Rider Router
# ---------------------------------------------------------------------------
rider_router = APIRouter(prefix="/riders", tags=["riders"])


@rider_router.get("", response_model=list[RiderResponse])
async def get_riders(status: str | None = None) -> list[RiderResponse]:
    return [_rider_response(rider) for rider in list_riders(status=status)]


@rider_router.post("", status_code=201, response_model=IdResponse)
async def register_rider(body: RegisterRiderRequest) -> IdResponse:
    result = current_domain.process(RegisterRider(**body.model_dump(exclude_none=True)), asynchronous=False)
    return IdResponse(id=result)


@rider_router.get("/available-orders", response_model=list[OrderResponse])
async def get_available_orders() -> list[OrderResponse]:
    return [_order_response(order) for order in available_orders()]


@rider_router.put("/{rider_id}/status", response_model=RiderResponse)
async def change_rider_status(rider_id: str, body: RiderStatusRequest) -> RiderResponse:
    current_domain.process(ChangeRiderStatus(rider_id=rider_id, status=body.status), asynchronous=False)
    return _rider_response(current_domain.repository_for(Rider).get(rider_id))


@rider_router.get("/{rider_id}/deliveries", response_model=list[OrderResponse])
async def get_active_deliveries(rider_id: str) -> list[OrderResponse]:
    return [_order_response(order) for order in active_deliveries(rider_id)]


# ---------------------------------------------------------------------------
# Payment Method Router
# ---------------------------------------------------------------------------
payment_method_router = APIRouter(prefix="/payment-methods", tags=["payment-methods"])


@payment_method_router.get("", response_model=list[PaymentMethodResponse])
async def get_payment_methods() -> list[PaymentMethodResponse]:
    return [
        PaymentMethodResponse(id=str(method.id), name=method.name, is_enabled=method.is_enabled)
        for method in list_payment_methods()
    ]


@payment_method_router.post("", status_code=201, response_model=IdResponse)
async def add_payment_method(body: AddPaymentMethodRequest) -> IdResponse:
    result = current_domain.process(AddPaymentMethod(**body.model_dump()), asynchronous=False)
    return IdResponse(id=result)
