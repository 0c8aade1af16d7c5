"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), kept apart from
internal Protean commands. Input is validated here before any command is
built, so malformed requests never reach storage.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PaymentMethodChoice(str, Enum):
    PAYPAL = "PayPal"
    STRIPE = "Stripe"
    CASH_ON_DELIVERY = "Cash on Delivery"
    BANK_TRANSFER = "Bank Transfer"


class OrderStatusChoice(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=30)


class PaymentResultSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(min_length=1)
    status: str = Field(min_length=1)
    update_time: str | None = None
    email_address: str | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    shipping_address: ShippingAddressSchema
    payment_method: PaymentMethodChoice
    notes: str | None = Field(default=None, max_length=500)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "full_name": "Jane Doe",
                        "address": "123 Main St",
                        "city": "Springfield",
                        "postal_code": "62701",
                        "country": "US",
                        "phone": "+1-217-555-0100",
                    },
                    "payment_method": "Cash on Delivery",
                    "notes": "Leave at the back door",
                }
            ]
        }
    }


class PayOrderRequest(BaseModel):
    payment_result: PaymentResultSchema


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatusChoice


# ---------------------------------------------------------------------------
# Catalogue Request Schemas
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    image: str | None = None


class AdjustStockRequest(BaseModel):
    delta: int


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartItemResponse(BaseModel):
    product_id: str
    name: str | None = None
    image: str | None = None
    stock: int | None = None
    is_active: bool = False
    quantity: int
    price: float
    subtotal: float


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartItemResponse]
    total_items: int
    total_amount: float


class CartCountResponse(BaseModel):
    count: int


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    image: str | None = None
    price: float
    quantity: int


class PaymentResultResponse(BaseModel):
    id: str
    status: str
    update_time: str | None = None
    email_address: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    items: list[OrderItemResponse]
    shipping_address: ShippingAddressSchema
    payment_method: str
    payment_result: PaymentResultResponse | None = None
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    is_paid: bool
    paid_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    status: str
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PaginationResponse(BaseModel):
    current_page: int
    total_pages: int
    total_orders: int
    has_next: bool
    has_prev: bool


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    pagination: PaginationResponse


class OrderStatsResponse(BaseModel):
    total_orders: int
    total_spent: float
    average_order_value: float
    status_counts: dict[str, int]


class ProductResponse(BaseModel):
    product_id: str
    name: str
    image: str | None = None
    price: float
    stock: int
    is_active: bool


class ProductIdResponse(BaseModel):
    product_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
