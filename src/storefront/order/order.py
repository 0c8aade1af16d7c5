"""Order aggregate: an immutable purchase snapshot with a mutable status overlay.

Line items copy the product name, image and price at checkout time so later
catalogue edits never rewrite order history. Prices are computed once at
creation and never recomputed.

State Machine:
    Pending → Processing → Shipped → Delivered
    Pending / Processing / Shipped → Cancelled
    Delivered and Cancelled are terminal for customers. Administrators may set
    any status except that a Cancelled order cannot be revived.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import AuthorizationError, InvalidStatusTransitionError
from storefront.order.events import OrderCancelled, OrderPaid, OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(Enum):
    PAYPAL = "PayPal"
    STRIPE = "Stripe"
    CASH_ON_DELIVERY = "Cash on Delivery"
    BANK_TRANSFER = "Bank Transfer"


_TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# States in which a payment may still be recorded
_PAYABLE_STATES = {OrderStatus.PENDING, OrderStatus.PROCESSING}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout and never updated afterwards."""

    full_name = String(required=True, max_length=255)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)

    @classmethod
    def from_dict(cls, data):
        """Build an address with every field stripped of surrounding whitespace."""
        return cls(**{key: value.strip() if isinstance(value, str) else value for key, value in data.items()})


@storefront.value_object(part_of="Order")
class PaymentResult:
    """What the payment provider reported back."""

    payment_id = String(required=True, max_length=255)
    status = String(required=True, max_length=50)
    update_time = String(max_length=50)
    email_address = String(max_length=255)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    image = String(max_length=1024)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    order_number = String(max_length=50, unique=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress, required=True)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_result = ValueObject(PaymentResult)
    items_price = Float(default=0.0, min_value=0.0)
    tax_price = Float(default=0.0, min_value=0.0)
    shipping_price = Float(default=0.0, min_value=0.0)
    total_price = Float(default=0.0, min_value=0.0)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    notes = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_price_must_equal_its_components(self):
        expected = round((self.items_price or 0.0) + (self.tax_price or 0.0) + (self.shipping_price or 0.0), 2)
        if abs((self.total_price or 0.0) - expected) > 0.005:
            raise ValidationError({"total_price": ["Total price must equal items, tax and shipping combined"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        order_number,
        items_data,
        shipping_address,
        payment_method,
        pricing,
        notes=None,
    ):
        """Create a Pending order from checked-out cart lines.

        Args:
            customer_id: The customer placing the order.
            order_number: Human-readable unique number, e.g. ``ORD-1718000000000-042``.
            items_data: List of dicts with product_id, name, image, price, quantity.
            shipping_address: Dict with full_name, address, city, postal_code, country, phone.
            payment_method: One of the ``PaymentMethod`` values.
            pricing: Dict with items_price, tax_price, shipping_price, total_price.
            notes: Optional free text, at most 500 characters.
        """
        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            order_number=order_number,
            shipping_address=ShippingAddress.from_dict(shipping_address),
            payment_method=payment_method,
            items_price=pricing["items_price"],
            tax_price=pricing["tax_price"],
            shipping_price=pricing["shipping_price"],
            total_price=pricing["total_price"],
            is_paid=False,
            is_delivered=False,
            status=OrderStatus.PENDING.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for item in items_data:
            order.add_items(OrderItem(**item))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item["product_id"]),
                            "name": item["name"],
                            "price": item["price"],
                            "quantity": item["quantity"],
                        }
                        for item in items_data
                    ]
                ),
                payment_method=payment_method,
                items_price=order.items_price,
                tax_price=order.tax_price,
                shipping_price=order.shipping_price,
                total_price=order.total_price,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    def is_owned_by(self, requester_id):
        return str(self.customer_id) == str(requester_id)

    def assert_owned_by(self, requester_id, action="access"):
        if not self.is_owned_by(requester_id):
            raise AuthorizationError({"order": [f"Not authorized to {action} this order"]})

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def cancel(self, requester_id=None):
        """Customer cancellation. Delivered and Cancelled orders are closed to it."""
        if requester_id is not None:
            self.assert_owned_by(requester_id, action="cancel")

        current = OrderStatus(self.status)
        if current in _TERMINAL_STATES:
            raise InvalidStatusTransitionError(f"Cannot cancel order with status: {current.value}")

        self._mark_cancelled(current)

    def _mark_cancelled(self, current):
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                previous_status=current.value,
                items=json.dumps([{"product_id": str(i.product_id), "quantity": i.quantity} for i in self.items]),
                cancelled_at=now,
            )
        )

    def mark_paid(self, requester_id, payment_result):
        """Record a successful payment and move the order into Processing."""
        self.assert_owned_by(requester_id, action="update")

        current = OrderStatus(self.status)
        if self.is_paid:
            raise InvalidStatusTransitionError("Order is already paid")
        if current not in _PAYABLE_STATES:
            raise InvalidStatusTransitionError(f"Cannot record payment for order with status: {current.value}")

        now = datetime.now(UTC)
        result = PaymentResult(
            payment_id=payment_result["id"],
            status=payment_result["status"],
            update_time=payment_result.get("update_time"),
            email_address=payment_result.get("email_address"),
        )

        self.is_paid = True
        self.paid_at = now
        self.payment_result = result
        self.status = OrderStatus.PROCESSING.value
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                payment_id=result.payment_id,
                payment_status=result.status,
                amount=self.total_price,
                paid_at=now,
            )
        )

    def update_status(self, status):
        """Administrative status change to any status. Only a Cancelled order is frozen."""
        try:
            target = OrderStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Invalid status: {status}"]}) from None

        current = OrderStatus(self.status)
        if current == OrderStatus.CANCELLED:
            raise InvalidStatusTransitionError("Cannot change the status of a cancelled order")
        if target == OrderStatus.CANCELLED:
            self._mark_cancelled(current)
            return

        now = datetime.now(UTC)
        self.status = target.value
        if target == OrderStatus.DELIVERED:
            self.is_delivered = True
            self.delivered_at = now
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )
