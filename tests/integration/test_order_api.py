"""Integration tests for Order API endpoints via TestClient."""

import pytest

SHIPPING = {
    "full_name": "Jane Doe",
    "address": "123 Main St",
    "city": "Springfield",
    "postal_code": "62701",
    "country": "US",
    "phone": "+1-217-555-0100",
}

PAYMENT = {"id": "PAY-123", "status": "COMPLETED", "update_time": "2024-06-01T10:00:00Z"}


@pytest.fixture()
def checkout(client, auth_headers, stocked_product):
    """Return a function that fills the caller's cart with one product and checks out."""

    def _checkout(user_id="cust-api-001", price=60.0, quantity=1, stock=10, payment_method="Cash on Delivery"):
        product_id = stocked_product(price=price, stock=stock)
        client.post(
            "/cart/add",
            json={"product_id": product_id, "quantity": quantity},
            headers=auth_headers(user_id),
        )
        response = client.post(
            "/orders",
            json={"shipping_address": SHIPPING, "payment_method": payment_method},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 201, response.json()
        return response.json(), product_id

    return _checkout


class TestPlaceOrderAPI:
    def test_place_order_returns_201_with_order(self, checkout):
        order, _ = checkout(price=60.0)
        assert order["status"] == "Pending"
        assert order["items_price"] == 60.0
        assert order["tax_price"] == 6.0
        assert order["shipping_price"] == 10.0
        assert order["total_price"] == 76.0
        assert order["is_paid"] is False
        assert order["is_delivered"] is False
        assert order["order_number"].startswith("ORD-")
        assert order["shipping_address"] == SHIPPING

    def test_free_shipping_above_threshold(self, checkout):
        order, _ = checkout(price=150.0)
        assert order["shipping_price"] == 0.0
        assert order["total_price"] == 165.0

    def test_stock_is_decremented_and_cart_cleared(self, client, auth_headers, checkout):
        _, product_id = checkout(quantity=3, stock=10)
        assert client.get(f"/products/{product_id}").json()["stock"] == 7
        assert client.get("/cart/count", headers=auth_headers()).json() == {"count": 0}

    def test_empty_cart_is_400(self, client, auth_headers):
        response = client.post(
            "/orders",
            json={"shipping_address": SHIPPING, "payment_method": "PayPal"},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Cart is empty"

    def test_missing_address_field_is_400(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        client.post("/cart/add", json={"product_id": product_id, "quantity": 1}, headers=auth_headers())
        address = {**SHIPPING, "city": "   "}

        response = client.post(
            "/orders",
            json={"shipping_address": address, "payment_method": "PayPal"},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert "shipping_address.city" in response.json()["errors"]

    def test_unknown_payment_method_is_400(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        client.post("/cart/add", json={"product_id": product_id, "quantity": 1}, headers=auth_headers())

        response = client.post(
            "/orders",
            json={"shipping_address": SHIPPING, "payment_method": "Bitcoin"},
            headers=auth_headers(),
        )
        assert response.status_code == 400

    def test_last_unit_sells_once(self, client, auth_headers, stocked_product):
        product_id = stocked_product(stock=1)
        for user in ("alice", "bob"):
            client.post("/cart/add", json={"product_id": product_id, "quantity": 1}, headers=auth_headers(user))

        first = client.post(
            "/orders",
            json={"shipping_address": SHIPPING, "payment_method": "Stripe"},
            headers=auth_headers("alice"),
        )
        second = client.post(
            "/orders",
            json={"shipping_address": SHIPPING, "payment_method": "Stripe"},
            headers=auth_headers("bob"),
        )
        assert first.status_code == 201
        assert second.status_code == 400
        assert "Insufficient stock" in second.json()["message"]
        assert client.get(f"/products/{product_id}").json()["stock"] == 0


class TestReadOrdersAPI:
    def test_get_own_order(self, client, auth_headers, checkout):
        order, _ = checkout()
        response = client.get(f"/orders/{order['order_id']}", headers=auth_headers())
        assert response.status_code == 200
        assert response.json()["order_number"] == order["order_number"]

    def test_get_someone_elses_order_is_403(self, client, auth_headers, checkout):
        order, _ = checkout()
        response = client.get(f"/orders/{order['order_id']}", headers=auth_headers("intruder"))
        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized to view this order"

    def test_unknown_order_is_404(self, client, auth_headers):
        response = client.get("/orders/does-not-exist", headers=auth_headers())
        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"

    def test_list_own_orders_with_pagination(self, client, auth_headers, checkout):
        for _ in range(3):
            checkout()
        checkout(user_id="someone-else")

        response = client.get("/orders?page=1&limit=2", headers=auth_headers())
        assert response.status_code == 200
        data = response.json()
        assert len(data["orders"]) == 2
        assert data["pagination"] == {
            "current_page": 1,
            "total_pages": 2,
            "total_orders": 3,
            "has_next": True,
            "has_prev": False,
        }

    def test_stats(self, client, auth_headers, checkout):
        checkout(price=60.0)
        checkout(price=150.0)

        response = client.get("/orders/stats", headers=auth_headers())
        assert response.status_code == 200
        assert response.json() == {
            "total_orders": 2,
            "total_spent": 241.0,
            "average_order_value": 120.5,
            "status_counts": {"Pending": 2},
        }


class TestCancelOrderAPI:
    def test_cancel_restores_stock(self, client, auth_headers, checkout):
        order, product_id = checkout(quantity=2, stock=5)

        response = client.put(f"/orders/{order['order_id']}/cancel", headers=auth_headers())
        assert response.status_code == 200
        assert response.json()["status"] == "Cancelled"
        assert client.get(f"/products/{product_id}").json()["stock"] == 5

    def test_cancel_twice_is_400(self, client, auth_headers, checkout):
        order, _ = checkout()
        client.put(f"/orders/{order['order_id']}/cancel", headers=auth_headers())

        response = client.put(f"/orders/{order['order_id']}/cancel", headers=auth_headers())
        assert response.status_code == 400
        assert response.json()["message"] == "Cannot cancel order with status: Cancelled"

    def test_cancel_someone_elses_order_is_403(self, client, auth_headers, checkout):
        order, _ = checkout()
        response = client.put(f"/orders/{order['order_id']}/cancel", headers=auth_headers("intruder"))
        assert response.status_code == 403

    def test_cancel_unknown_order_is_404(self, client, auth_headers):
        response = client.put("/orders/does-not-exist/cancel", headers=auth_headers())
        assert response.status_code == 404


class TestPayOrderAPI:
    def test_pay(self, client, auth_headers, checkout):
        order, _ = checkout()
        response = client.put(
            f"/orders/{order['order_id']}/pay",
            json={"payment_result": PAYMENT},
            headers=auth_headers(),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["is_paid"] is True
        assert data["paid_at"] is not None
        assert data["status"] == "Processing"
        assert data["payment_result"]["id"] == "PAY-123"

    def test_pay_someone_elses_order_is_403(self, client, auth_headers, checkout):
        order, _ = checkout()
        response = client.put(
            f"/orders/{order['order_id']}/pay",
            json={"payment_result": PAYMENT},
            headers=auth_headers("intruder"),
        )
        assert response.status_code == 403

    def test_pay_twice_is_400(self, client, auth_headers, checkout):
        order, _ = checkout()
        client.put(f"/orders/{order['order_id']}/pay", json={"payment_result": PAYMENT}, headers=auth_headers())

        response = client.put(
            f"/orders/{order['order_id']}/pay",
            json={"payment_result": PAYMENT},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Order is already paid"
