"""Checkout: converts a customer's cart into a Pending order.

The handler runs inside a single unit of work: cart read, stock
re-validation, order creation, stock decrement and cart clearing either all
commit or all roll back. Every line is re-validated against a fresh product
read before anything is mutated, and the decrement itself is conditional
(``Product.reserve_stock``), so a product can never be oversold. A concurrent
checkout that read the same product loses on the aggregate version check when
its unit of work commits.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.domain import logger, storefront
from storefront.errors import EmptyCartError, InsufficientStockError, ProductUnavailableError
from storefront.order.order import Order, PaymentMethod
from storefront.order.pricing import price_order


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True, choices=PaymentMethod)
    notes = String(max_length=500)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(ShoppingCart)
        product_repo = current_domain.repository_for(Product)
        order_repo = current_domain.repository_for(Order)

        cart = cart_repo.for_customer(command.customer_id)
        if not cart.items:
            raise EmptyCartError()

        # Validate every line before mutating anything
        lines = []
        for item in cart.items:
            try:
                product = product_repo.get(item.product_id)
            except ObjectNotFoundError:
                raise ProductUnavailableError(item.product_id) from None

            if not product.is_active:
                raise ProductUnavailableError(product.name)
            if product.stock < item.quantity:
                raise InsufficientStockError(product.stock, product_name=product.name)

            lines.append((product, item.quantity))

        items_data = [
            {
                "product_id": str(product.id),
                "name": product.name,
                "image": product.image or "",
                "price": product.price,
                "quantity": quantity,
            }
            for product, quantity in lines
        ]
        pricing = price_order([(product.price, quantity) for product, quantity in lines])

        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )

        order = Order.place(
            customer_id=command.customer_id,
            order_number=order_repo.next_order_number(),
            items_data=items_data,
            shipping_address=shipping_address,
            payment_method=command.payment_method,
            pricing=pricing,
            notes=command.notes,
        )
        order_repo.add(order)

        for product, quantity in lines:
            product.reserve_stock(quantity)
            product_repo.add(product)

        cart.clear()
        cart_repo.add(cart)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total_price=order.total_price,
        )
        return str(order.id)
