"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. Money leaves the API as decimal strings.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


class RemoveCartItemsRequest(BaseModel):
    product_ids: list[str]


class CheckoutRequest(BaseModel):
    shipping_address: str = Field(min_length=1, max_length=500)
    currency: str = Field(default="USD", min_length=3, max_length=3)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": "221B Baker Street, London NW1 6XE",
                    "currency": "USD",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    quantity: int


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartLineSchema]


class CartLineResponse(BaseModel):
    product_id: str
    quantity: int


class CartSummaryLineSchema(BaseModel):
    product_id: str
    name: str | None
    quantity: int
    unit_price: str | None
    line_total: str
    available_stock: int
    is_available: bool


class CartSummaryResponse(BaseModel):
    customer_id: str
    line_count: int
    total_quantity: int
    total_amount: str
    has_unavailable_items: bool
    lines: list[CartSummaryLineSchema]


class CartAdjustmentSchema(BaseModel):
    product_id: str
    action: str
    previous_quantity: int
    new_quantity: int


class ReconcileResponse(BaseModel):
    adjustments: list[CartAdjustmentSchema]


class RemovedResponse(BaseModel):
    removed: int


class CheckoutResponse(BaseModel):
    order_id: str
    order_number: str
    total_amount: str
    currency: str
    payment_reference: str | None = None


class OrderItemSchema(BaseModel):
    product_id: str
    product_name: str | None
    quantity: int
    unit_price: str


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    status: str
    total_amount: str
    currency: str
    shipping_address: str
    payment_reference: str | None
    items: list[OrderItemSchema]
    created_at: str | None


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str


class StatusResponse(BaseModel):
    status: str = "ok"
