"""Storefront HTTP API package."""

from storefront.api.errors import register_error_handlers
from storefront.api.routes import admin_router, cart_router, order_router, product_router

__all__ = ["cart_router", "order_router", "product_router", "admin_router", "register_error_handlers"]
