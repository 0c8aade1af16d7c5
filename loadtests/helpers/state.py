"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state, never shared across users.
State tracks ids returned by the API so follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks one simulated customer from browsing to checkout."""

    customer_id: str | None = None
    headers: dict = field(default_factory=dict)
    cart_product_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    current_status: str | None = None


@dataclass
class CatalogueState:
    """Products created by the admin user, shared with that user's shoppers."""

    product_ids: list[str] = field(default_factory=list)
