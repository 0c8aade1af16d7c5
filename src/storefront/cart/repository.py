"""Repository for the ShoppingCart aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_customer(self, customer_id) -> ShoppingCart:
        """Return the customer's cart, or a new empty (unsaved) one on first access."""
        try:
            return self.get(customer_id)
        except ObjectNotFoundError:
            return ShoppingCart.create(customer_id=customer_id)

    def find_for_customer(self, customer_id) -> ShoppingCart | None:
        try:
            return self.get(customer_id)
        except ObjectNotFoundError:
            return None
