"""Cart item management: commands and handler.

Each handler loads the customer's cart (creating it on first access), checks
the referenced product against the catalogue and persists the mutated cart.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.domain import logger, storefront


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=0)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class RefreshCart:
    """Drop lines whose products are inactive or deleted, creating the cart if needed."""

    customer_id = Identifier(required=True)


def _product_on_sale(product_id) -> Product:
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        product = None

    if product is None or not product.is_active:
        raise ObjectNotFoundError({"product_id": ["Product not found or not available"]})
    return product


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = _product_on_sale(command.product_id)

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_customer(command.customer_id)
        cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity,
            price=product.price,
            available=product.stock,
        )
        repo.add(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_customer(command.customer_id)
        if cart is None:
            raise ObjectNotFoundError({"cart": ["Cart not found"]})

        available = None
        if command.quantity > 0:
            available = _product_on_sale(command.product_id).stock

        cart.update_quantity(
            product_id=command.product_id,
            quantity=command.quantity,
            available=available,
        )
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_customer(command.customer_id)
        if cart is None:
            raise ObjectNotFoundError({"cart": ["Cart not found"]})

        cart.remove_item(product_id=command.product_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_customer(command.customer_id)
        if cart is None:
            raise ObjectNotFoundError({"cart": ["Cart not found"]})

        cart.clear()
        repo.add(cart)

    @handle(RefreshCart)
    def refresh_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_customer(command.customer_id)

        product_repo = current_domain.repository_for(Product)
        on_sale = []
        for item in cart.items:
            try:
                product = product_repo.get(item.product_id)
            except ObjectNotFoundError:
                continue
            if product.is_active:
                on_sale.append(item.product_id)

        removed = cart.prune(on_sale)
        if removed:
            logger.info("cart_pruned", customer_id=str(command.customer_id), removed=removed)
        repo.add(cart)
