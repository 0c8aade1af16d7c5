"""Storefront error taxonomy.

Malformed input and business-rule violations are both ``ValidationError``s so
they travel through Protean's unit of work and surface as HTTP 400. Missing
records use Protean's ``ObjectNotFoundError``. Ownership and role mismatches
raise ``AuthorizationError``.
"""

from protean.exceptions import ValidationError


class BusinessRuleError(ValidationError):
    """The request was well-formed but violates a storefront rule."""


class EmptyCartError(BusinessRuleError):
    def __init__(self):
        super().__init__({"cart": ["Cart is empty"]})


class InsufficientStockError(BusinessRuleError):
    def __init__(self, available, product_name=None):
        if product_name:
            message = f"Insufficient stock for {product_name}. Only {available} available"
        else:
            message = f"Only {available} items available in stock"
        super().__init__({"quantity": [message]})
        self.available = available
        self.product_name = product_name


class ProductUnavailableError(BusinessRuleError):
    def __init__(self, product):
        super().__init__({"product_id": [f"Product {product} is no longer available"]})
        self.product = product


class InvalidStatusTransitionError(BusinessRuleError):
    def __init__(self, message):
        super().__init__({"status": [message]})


class AuthorizationError(Exception):
    """The requester does not own the resource or lacks the required role."""

    def __init__(self, messages):
        super().__init__(messages)
        self.messages = messages


def summarize(messages) -> str:
    """Return the first human-readable message from an error payload."""
    if isinstance(messages, dict):
        for value in messages.values():
            if isinstance(value, list | tuple) and value:
                return str(value[0])
            if value:
                return str(value)
        return "Validation failed"
    return str(messages)
