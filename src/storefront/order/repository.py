"""Repository for the Order aggregate: order numbering and history queries."""

import random
import time

from protean.exceptions import InvalidOperationError

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus

ORDER_NUMBER_PREFIX = "ORD"
ORDER_NUMBER_ATTEMPTS = 5
_PAGE_SIZE = 100


def generate_order_number() -> str:
    """``ORD-<millisecond timestamp>-<3 random digits>``"""
    timestamp = int(time.time() * 1000)
    return f"{ORDER_NUMBER_PREFIX}-{timestamp}-{random.randint(0, 999):03d}"


def paginate(total, page, limit) -> dict:
    total_pages = (total + limit - 1) // limit if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_orders": total,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


@storefront.repository(part_of=Order)
class OrderRepository:
    def next_order_number(self) -> str:
        """Generate an order number not already held by a stored order.

        The ``unique`` constraint on ``Order.order_number`` remains the final guard.
        """
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            candidate = generate_order_number()
            if not self._dao.query.filter(order_number=candidate).all().items:
                return candidate
        raise InvalidOperationError(f"Could not allocate a unique order number after {ORDER_NUMBER_ATTEMPTS} attempts")

    def _page(self, query, page, limit):
        results = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return results.items, paginate(results.total, page, limit)

    def _everything(self, query):
        items, offset = [], 0
        while True:
            results = query.offset(offset).limit(_PAGE_SIZE).all()
            items.extend(results.items)
            offset += _PAGE_SIZE
            if offset >= results.total:
                return items

    def for_customer(self, customer_id, page=1, limit=10):
        """One page of a customer's orders, newest first, plus pagination metadata."""
        return self._page(self._dao.query.filter(customer_id=str(customer_id)), page, limit)

    def search(self, status=None, is_paid=None, page=1, limit=10):
        """One page of all orders, optionally filtered by status and payment flag."""
        criteria = {}
        if status is not None:
            criteria["status"] = OrderStatus(status).value
        if is_paid is not None:
            criteria["is_paid"] = is_paid
        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        return self._page(query, page, limit)

    def stats_for_customer(self, customer_id) -> dict:
        orders = self._everything(self._dao.query.filter(customer_id=str(customer_id)))

        total_spent = round(sum(order.total_price for order in orders), 2)
        status_counts = {}
        for order in orders:
            status_counts[order.status] = status_counts.get(order.status, 0) + 1

        return {
            "total_orders": len(orders),
            "total_spent": total_spent,
            "average_order_value": round(total_spent / len(orders), 2) if orders else 0.0,
            "status_counts": status_counts,
        }
