"""Product aggregate: the slice of the catalogue that checkout depends on.

Only price, stock and availability live here. Stock never goes negative:
``reserve_stock`` is a conditional decrement that refuses to oversell.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from storefront.catalogue.events import ProductAdded, ProductDeactivated, ProductStockChanged
from storefront.domain import storefront
from storefront.errors import InsufficientStockError


class StockChangeReason(Enum):
    CHECKOUT = "Checkout"
    CANCELLATION = "Cancellation"
    ADJUSTMENT = "Adjustment"


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    image = String(max_length=1024)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, price, stock=0, image=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=price,
            stock=stock,
            image=image,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                price=price,
                stock=stock,
                added_at=now,
            )
        )
        return product

    def _change_stock(self, new_stock, reason):
        previous = self.stock
        self.stock = new_stock
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductStockChanged(
                product_id=str(self.id),
                previous_stock=previous,
                new_stock=new_stock,
                reason=reason.value,
            )
        )

    def reserve_stock(self, quantity):
        """Decrement stock for a sale, refusing to go below zero."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if self.stock < quantity:
            raise InsufficientStockError(self.stock, product_name=self.name)

        self._change_stock(self.stock - quantity, StockChangeReason.CHECKOUT)

    def restore_stock(self, quantity):
        """Return units to stock, e.g. when an order is cancelled."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        self._change_stock(self.stock + quantity, StockChangeReason.CANCELLATION)

    def adjust_stock(self, delta):
        if self.stock + delta < 0:
            raise ValidationError({"stock": [f"Cannot remove {-delta} units, only {self.stock} in stock"]})

        self._change_stock(self.stock + delta, StockChangeReason.ADJUSTMENT)

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(ProductDeactivated(product_id=str(self.id), deactivated_at=now))
