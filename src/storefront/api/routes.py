"""FastAPI routes for the Storefront: cart, orders, products and admin."""

import json

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.auth import Requester, get_current_user, require_admin
from storefront.api.schemas import (
    AddProductRequest,
    AddToCartRequest,
    AdjustStockRequest,
    CartCountResponse,
    CartItemResponse,
    CartResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatsResponse,
    OrderStatusChoice,
    PaginationResponse,
    PaymentResultResponse,
    PayOrderRequest,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductResponse,
    ShippingAddressSchema,
    StatusResponse,
    UpdateCartRequest,
    UpdateOrderStatusRequest,
)
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, ClearCart, RefreshCart, RemoveFromCart, UpdateCartQuantity
from storefront.catalogue.management import AddProduct, AdjustProductStock, DeactivateProduct
from storefront.catalogue.product import Product
from storefront.order.cancellation import CancelOrder
from storefront.order.checkout import PlaceOrder
from storefront.order.order import Order
from storefront.order.payment import MarkOrderPaid
from storefront.order.status import UpdateOrderStatus


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------
def _cart_line(item) -> CartItemResponse:
    """A cart line with the product's current catalogue details, when it still exists."""
    try:
        product = current_domain.repository_for(Product).get(item.product_id)
    except ObjectNotFoundError:
        product = None

    return CartItemResponse(
        product_id=str(item.product_id),
        name=product.name if product else None,
        image=product.image if product else None,
        stock=product.stock if product else None,
        is_active=bool(product and product.is_active),
        quantity=item.quantity,
        price=item.price,
        subtotal=round(item.price * item.quantity, 2),
    )


def _cart_response(cart: ShoppingCart) -> CartResponse:
    return CartResponse(
        customer_id=str(cart.customer_id),
        items=[_cart_line(item) for item in cart.items],
        total_items=cart.total_items or 0,
        total_amount=cart.total_amount or 0.0,
    )


def _order_response(order: Order) -> OrderResponse:
    address = order.shipping_address
    payment = order.payment_result
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                name=item.name,
                image=item.image,
                price=item.price,
                quantity=item.quantity,
            )
            for item in order.items
        ],
        shipping_address=ShippingAddressSchema(
            full_name=address.full_name,
            address=address.address,
            city=address.city,
            postal_code=address.postal_code,
            country=address.country,
            phone=address.phone,
        ),
        payment_method=order.payment_method,
        payment_result=(
            PaymentResultResponse(
                id=payment.payment_id,
                status=payment.status,
                update_time=payment.update_time,
                email_address=payment.email_address,
            )
            if payment
            else None
        ),
        items_price=order.items_price,
        tax_price=order.tax_price,
        shipping_price=order.shipping_price,
        total_price=order.total_price,
        is_paid=order.is_paid,
        paid_at=order.paid_at,
        is_delivered=order.is_delivered,
        delivered_at=order.delivered_at,
        status=order.status,
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        product_id=str(product.id),
        name=product.name,
        image=product.image,
        price=product.price,
        stock=product.stock,
        is_active=product.is_active,
    )


def _load_cart(customer_id) -> ShoppingCart:
    return current_domain.repository_for(ShoppingCart).for_customer(customer_id)


def _load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError({"order": ["Order not found"]}) from None


def _load_product(product_id) -> Product:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError({"product": ["Product not found"]}) from None


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(requester: Requester = Depends(get_current_user)) -> CartResponse:
    """The caller's cart, with lines for inactive or deleted products dropped."""
    current_domain.process(RefreshCart(customer_id=requester.user_id), asynchronous=False)
    return _cart_response(_load_cart(requester.user_id))


@cart_router.get("/count", response_model=CartCountResponse)
async def get_cart_count(requester: Requester = Depends(get_current_user)) -> CartCountResponse:
    cart = current_domain.repository_for(ShoppingCart).find_for_customer(requester.user_id)
    return CartCountResponse(count=(cart.total_items or 0) if cart else 0)


@cart_router.post("/add", response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, requester: Requester = Depends(get_current_user)) -> CartResponse:
    command = AddToCart(
        customer_id=requester.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(_load_cart(requester.user_id))


@cart_router.put("/update", response_model=CartResponse)
async def update_cart_item(body: UpdateCartRequest, requester: Requester = Depends(get_current_user)) -> CartResponse:
    command = UpdateCartQuantity(
        customer_id=requester.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(_load_cart(requester.user_id))


@cart_router.delete("/remove/{product_id}", response_model=CartResponse)
async def remove_from_cart(product_id: str, requester: Requester = Depends(get_current_user)) -> CartResponse:
    command = RemoveFromCart(customer_id=requester.user_id, product_id=product_id)
    current_domain.process(command, asynchronous=False)
    return _cart_response(_load_cart(requester.user_id))


@cart_router.delete("/clear", response_model=CartResponse)
async def clear_cart(requester: Requester = Depends(get_current_user)) -> CartResponse:
    current_domain.process(ClearCart(customer_id=requester.user_id), asynchronous=False)
    return _cart_response(_load_cart(requester.user_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, requester: Requester = Depends(get_current_user)) -> OrderResponse:
    """Check out the caller's cart.

    1. Re-validate every cart line against current stock
    2. Create the order with server-computed prices
    3. Decrement stock and clear the cart
    """
    command = PlaceOrder(
        customer_id=requester.user_id,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method.value,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(_load_order(order_id))


@order_router.get("", response_model=OrderListResponse)
async def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    requester: Requester = Depends(get_current_user),
) -> OrderListResponse:
    orders, pagination = current_domain.repository_for(Order).for_customer(requester.user_id, page=page, limit=limit)
    return OrderListResponse(
        orders=[_order_response(order) for order in orders],
        pagination=PaginationResponse(**pagination),
    )


@order_router.get("/stats", response_model=OrderStatsResponse)
async def my_order_stats(requester: Requester = Depends(get_current_user)) -> OrderStatsResponse:
    stats = current_domain.repository_for(Order).stats_for_customer(requester.user_id)
    return OrderStatsResponse(**stats)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, requester: Requester = Depends(get_current_user)) -> OrderResponse:
    order = _load_order(order_id)
    order.assert_owned_by(requester.user_id, action="view")
    return _order_response(order)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, requester: Requester = Depends(get_current_user)) -> OrderResponse:
    _load_order(order_id)
    current_domain.process(CancelOrder(order_id=order_id, requester_id=requester.user_id), asynchronous=False)
    return _order_response(_load_order(order_id))


@order_router.put("/{order_id}/pay", response_model=OrderResponse)
async def pay_order(
    order_id: str, body: PayOrderRequest, requester: Requester = Depends(get_current_user)
) -> OrderResponse:
    _load_order(order_id)
    command = MarkOrderPaid(
        order_id=order_id,
        requester_id=requester.user_id,
        payment_result=json.dumps(body.payment_result.model_dump()),
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(_load_order(order_id))


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return _product_response(_load_product(product_id))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_router.get("/orders", response_model=OrderListResponse)
async def list_all_orders(
    status: OrderStatusChoice | None = None,
    is_paid: bool | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> OrderListResponse:
    orders, pagination = current_domain.repository_for(Order).search(
        status=status.value if status else None,
        is_paid=is_paid,
        page=page,
        limit=limit,
    )
    return OrderListResponse(
        orders=[_order_response(order) for order in orders],
        pagination=PaginationResponse(**pagination),
    )


@admin_router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    _load_order(order_id)
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=body.status.value), asynchronous=False)
    return _order_response(_load_order(order_id))


@admin_router.post("/products", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest) -> ProductIdResponse:
    command = AddProduct(
        name=body.name,
        price=body.price,
        stock=body.stock,
        image=body.image,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@admin_router.put("/products/{product_id}/stock", response_model=ProductResponse)
async def adjust_product_stock(product_id: str, body: AdjustStockRequest) -> ProductResponse:
    _load_product(product_id)
    current_domain.process(AdjustProductStock(product_id=product_id, delta=body.delta), asynchronous=False)
    return _product_response(_load_product(product_id))


@admin_router.put("/products/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str) -> StatusResponse:
    _load_product(product_id)
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()
