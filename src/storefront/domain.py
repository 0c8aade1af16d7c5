"""Storefront bounded context: catalogue stock, shopping cart, checkout and orders.

A single domain keeps the cart, the products it references and the orders
created from it inside one transactional boundary, so checkout can validate
stock, create the order, decrement stock and clear the cart in one unit of work.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
