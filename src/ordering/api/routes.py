"""FastAPI routes for the Ordering domain: carts, checkout and orders."""

import json

from fastapi import APIRouter, BackgroundTasks
from payments.gateway import get_gateway
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddToCartRequest,
    CartAdjustmentSchema,
    CartLineResponse,
    CartLineSchema,
    CartResponse,
    CartSummaryLineSchema,
    CartSummaryResponse,
    CheckoutRequest,
    CheckoutResponse,
    OrderItemSchema,
    OrderResponse,
    OrderStatusResponse,
    ReconcileResponse,
    RemoveCartItemsRequest,
    RemovedResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
)
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, RemoveManyFromCart, UpdateCartQuantity
from ordering.cart.management import find_cart
from ordering.cart.reconciliation import ReconcileCart
from ordering.cart.summary import summarize_cart
from ordering.checkout.coordinator import CheckoutCoordinator
from ordering.order.queries import order_for_customer, orders_for_customer
from ordering.order.status import UpdateOrderStatus

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{customer_id}", response_model=CartResponse)
async def get_cart(customer_id: str) -> CartResponse:
    cart = find_cart(customer_id)
    lines = cart.lines() if cart else []
    return CartResponse(
        customer_id=customer_id,
        items=[CartLineSchema(product_id=product_id, quantity=quantity) for product_id, quantity in lines],
    )


@cart_router.get("/{customer_id}/summary", response_model=CartSummaryResponse)
async def get_cart_summary(customer_id: str) -> CartSummaryResponse:
    summary = summarize_cart(customer_id)
    return CartSummaryResponse(
        customer_id=summary.customer_id,
        line_count=summary.line_count,
        total_quantity=summary.total_quantity,
        total_amount=str(summary.total_amount),
        has_unavailable_items=summary.has_unavailable_items,
        lines=[
            CartSummaryLineSchema(
                product_id=line.product_id,
                name=line.name,
                quantity=line.quantity,
                unit_price=str(line.unit_price) if line.unit_price is not None else None,
                line_total=str(line.line_total),
                available_stock=line.available_stock,
                is_available=line.is_available,
            )
            for line in summary.lines
        ],
    )


@cart_router.post("/{customer_id}/items", response_model=CartLineResponse)
async def add_cart_item(customer_id: str, body: AddToCartRequest) -> CartLineResponse:
    command = AddToCart(
        customer_id=customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    line_quantity = current_domain.process(command, asynchronous=False)
    return CartLineResponse(product_id=body.product_id, quantity=line_quantity)


@cart_router.put("/{customer_id}/items/{product_id}", response_model=CartLineResponse)
async def update_cart_item(customer_id: str, product_id: str, body: UpdateCartQuantityRequest) -> CartLineResponse:
    command = UpdateCartQuantity(
        customer_id=customer_id,
        product_id=product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartLineResponse(product_id=product_id, quantity=body.quantity)


@cart_router.delete("/{customer_id}/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(customer_id: str, product_id: str) -> StatusResponse:
    command = RemoveFromCart(customer_id=customer_id, product_id=product_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.post("/{customer_id}/items/remove", response_model=RemovedResponse)
async def remove_cart_items(customer_id: str, body: RemoveCartItemsRequest) -> RemovedResponse:
    command = RemoveManyFromCart(customer_id=customer_id, product_ids=json.dumps(body.product_ids))
    removed = current_domain.process(command, asynchronous=False)
    return RemovedResponse(removed=removed)


@cart_router.delete("/{customer_id}/items", response_model=RemovedResponse)
async def clear_cart(customer_id: str) -> RemovedResponse:
    removed = current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False)
    return RemovedResponse(removed=removed)


@cart_router.post("/{customer_id}/reconcile", response_model=ReconcileResponse)
async def reconcile_cart(customer_id: str) -> ReconcileResponse:
    adjustments = current_domain.process(ReconcileCart(customer_id=customer_id), asynchronous=False)
    return ReconcileResponse(adjustments=[CartAdjustmentSchema(**a.to_dict()) for a in adjustments])


@cart_router.post("/{customer_id}/checkout", status_code=201, response_model=CheckoutResponse)
async def checkout_cart(customer_id: str, body: CheckoutRequest, background_tasks: BackgroundTasks) -> CheckoutResponse:
    """Convert the cart into a pending order.

    Responds 409 with every line short of stock, 400 for an empty cart and
    503 when a store or the payment gateway failed (safe to retry). The
    confirmation email is sent after the response has gone out.
    """
    coordinator = CheckoutCoordinator(gateway=get_gateway(), dispatch=background_tasks.add_task)
    result = coordinator.checkout(
        customer_id,
        shipping_address=body.shipping_address,
        currency=body.currency,
    )
    return CheckoutResponse(
        order_id=result.order_id,
        order_number=result.order_number,
        total_amount=str(result.total_amount),
        currency=result.currency,
        payment_reference=result.payment_reference,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        status=order.status,
        total_amount=order.total_amount,
        currency=order.currency,
        shipping_address=order.shipping_address,
        payment_reference=order.payment_reference,
        items=[OrderItemSchema(**line) for line in order.line_items()],
        created_at=order.created_at.isoformat() if order.created_at else None,
    )


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(customer_id: str) -> list[OrderResponse]:
    return [_order_response(order) for order in orders_for_customer(customer_id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, customer_id: str) -> OrderResponse:
    return _order_response(order_for_customer(order_id, customer_id))


@order_router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderStatusResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status)
    status = current_domain.process(command, asynchronous=False)
    return OrderStatusResponse(order_id=order_id, status=status)
