"""Shopping Cart aggregate: a customer's staging area before checkout.

One cart per customer, identified by the customer id. Each product appears on
at most one line, and the line keeps the price captured when it was added; the
cart is never repriced when the catalogue changes. ``total_items`` and
``total_amount`` are recomputed on every mutation.
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartPruned,
    CartQuantityUpdated,
)
from storefront.domain import storefront
from storefront.errors import InsufficientStockError


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    total_items = Integer(default=0)
    total_amount = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def totals_must_match_items(self):
        expected_items = sum(item.quantity for item in self.items)
        expected_amount = round(sum(item.price * item.quantity for item in self.items), 2)
        if (self.total_items or 0) != expected_items or abs((self.total_amount or 0.0) - expected_amount) > 0.005:
            raise ValidationError({"cart": ["Cart totals are out of step with its items"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            total_items=0,
            total_amount=0.0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def _recalculate_totals(self):
        self.total_items = sum(item.quantity for item in self.items)
        self.total_amount = round(sum(item.price * item.quantity for item in self.items), 2)
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, price, available):
        """Add a product, or increase its line, as long as stock covers the new total."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.line_for(product_id)
        requested = quantity + (existing.quantity if existing else 0)
        if requested > available:
            raise InsufficientStockError(available)

        with atomic_change(self):
            if existing:
                existing.quantity = requested
            else:
                self.add_items(
                    CartItem(
                        product_id=product_id,
                        quantity=quantity,
                        price=price,
                        added_at=datetime.now(UTC),
                    )
                )
            self._recalculate_totals()

        self.raise_(
            CartItemAdded(
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=requested,
                price=existing.price if existing else price,
            )
        )

    def update_quantity(self, product_id, quantity, available=None):
        """Overwrite a line's quantity; zero removes the line."""
        if quantity == 0:
            self.remove_item(product_id)
            return
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity must be 0 or greater"]})

        item = self.line_for(product_id)
        if item is None:
            raise ObjectNotFoundError({"product_id": ["Item not found in cart"]})
        if available is not None and quantity > available:
            raise InsufficientStockError(available)

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = quantity
            self._recalculate_totals()

        self.raise_(
            CartQuantityUpdated(
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        item = self.line_for(product_id)
        if item is None:
            raise ObjectNotFoundError({"product_id": ["Item not found in cart"]})

        with atomic_change(self):
            self.remove_items(item)
            self._recalculate_totals()

        self.raise_(
            CartItemRemoved(
                customer_id=str(self.customer_id),
                product_id=str(product_id),
            )
        )

    def clear(self):
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self._recalculate_totals()

        self.raise_(
            CartCleared(
                customer_id=str(self.customer_id),
                cleared_at=datetime.now(UTC),
            )
        )

    def prune(self, available_product_ids):
        """Drop lines whose product is no longer on sale. Returns the removed product ids."""
        available = {str(pid) for pid in available_product_ids}
        stale = [item for item in self.items if str(item.product_id) not in available]
        if not stale:
            return []

        with atomic_change(self):
            for item in stale:
                self.remove_items(item)
            self._recalculate_totals()

        removed = [str(item.product_id) for item in stale]
        self.raise_(
            CartPruned(
                customer_id=str(self.customer_id),
                product_ids=json.dumps(removed),
            )
        )
        return removed
