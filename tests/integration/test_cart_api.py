"""Integration tests for Cart API endpoints via TestClient."""


class TestCartAuth:
    def test_missing_token_is_401(self, client):
        response = client.get("/cart")
        assert response.status_code == 401
        assert response.json() == {"message": "Not authorized, no token"}

    def test_bad_token_is_401(self, client):
        response = client.get("/cart", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, token failed"


class TestGetCart:
    def test_first_access_returns_empty_cart(self, client, auth_headers):
        response = client.get("/cart", headers=auth_headers())
        assert response.status_code == 200
        assert response.json() == {
            "customer_id": "cust-api-001",
            "items": [],
            "total_items": 0,
            "total_amount": 0.0,
        }

    def test_count_without_cart_is_zero(self, client, auth_headers):
        response = client.get("/cart/count", headers=auth_headers())
        assert response.status_code == 200
        assert response.json() == {"count": 0}

    def test_deactivated_products_are_dropped(self, client, auth_headers, admin_headers, stocked_product):
        kept = stocked_product(name="Kept", price=5.0)
        dropped = stocked_product(name="Dropped", price=7.0)
        client.post("/cart/add", json={"product_id": kept, "quantity": 1}, headers=auth_headers())
        client.post("/cart/add", json={"product_id": dropped, "quantity": 1}, headers=auth_headers())
        client.put(f"/admin/products/{dropped}/deactivate", headers=admin_headers)

        data = client.get("/cart", headers=auth_headers()).json()
        assert [item["product_id"] for item in data["items"]] == [kept]
        assert data["total_amount"] == 5.0


class TestAddToCart:
    def test_add_returns_updated_cart(self, client, auth_headers, stocked_product):
        product_id = stocked_product(price=25.0)
        response = client.post(
            "/cart/add",
            json={"product_id": product_id, "quantity": 2},
            headers=auth_headers(),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_items"] == 2
        assert data["total_amount"] == 50.0
        assert data["items"][0]["subtotal"] == 50.0

    def test_lines_carry_product_details(self, client, auth_headers, stocked_product):
        product_id = stocked_product(name="Lamp", price=30.0, stock=4)
        client.post("/cart/add", json={"product_id": product_id, "quantity": 1}, headers=auth_headers())

        line = client.get("/cart", headers=auth_headers()).json()["items"][0]
        assert line == {
            "product_id": product_id,
            "name": "Lamp",
            "image": None,
            "stock": 4,
            "is_active": True,
            "quantity": 1,
            "price": 30.0,
            "subtotal": 30.0,
        }

    def test_count_after_add(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        client.post("/cart/add", json={"product_id": product_id, "quantity": 3}, headers=auth_headers())
        assert client.get("/cart/count", headers=auth_headers()).json() == {"count": 3}

    def test_unknown_product_is_404(self, client, auth_headers):
        response = client.post(
            "/cart/add",
            json={"product_id": "prod-404", "quantity": 1},
            headers=auth_headers(),
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found or not available"

    def test_over_stock_is_400(self, client, auth_headers, stocked_product):
        product_id = stocked_product(stock=2)
        response = client.post(
            "/cart/add",
            json={"product_id": product_id, "quantity": 3},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only 2 items available in stock"

    def test_zero_quantity_is_400(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        response = client.post(
            "/cart/add",
            json={"product_id": product_id, "quantity": 0},
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert "quantity" in response.json()["errors"]


class TestUpdateRemoveClear:
    def test_update_quantity(self, client, auth_headers, stocked_product):
        product_id = stocked_product(price=10.0)
        client.post("/cart/add", json={"product_id": product_id, "quantity": 1}, headers=auth_headers())

        response = client.put(
            "/cart/update",
            json={"product_id": product_id, "quantity": 4},
            headers=auth_headers(),
        )
        assert response.status_code == 200
        assert response.json()["total_amount"] == 40.0

    def test_update_to_zero_removes(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        client.post("/cart/add", json={"product_id": product_id, "quantity": 1}, headers=auth_headers())

        response = client.put(
            "/cart/update",
            json={"product_id": product_id, "quantity": 0},
            headers=auth_headers(),
        )
        assert response.json()["items"] == []

    def test_update_without_cart_is_404(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        response = client.put(
            "/cart/update",
            json={"product_id": product_id, "quantity": 1},
            headers=auth_headers(),
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Cart not found"

    def test_remove(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        client.post("/cart/add", json={"product_id": product_id, "quantity": 1}, headers=auth_headers())

        response = client.delete(f"/cart/remove/{product_id}", headers=auth_headers())
        assert response.status_code == 200
        assert response.json()["total_items"] == 0

    def test_remove_absent_line_is_404(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        client.post("/cart/add", json={"product_id": product_id, "quantity": 1}, headers=auth_headers())

        response = client.delete("/cart/remove/prod-404", headers=auth_headers())
        assert response.status_code == 404
        assert response.json()["message"] == "Item not found in cart"

    def test_clear(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        client.post("/cart/add", json={"product_id": product_id, "quantity": 2}, headers=auth_headers())

        response = client.delete("/cart/clear", headers=auth_headers())
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_carts_are_per_customer(self, client, auth_headers, stocked_product):
        product_id = stocked_product()
        client.post("/cart/add", json={"product_id": product_id, "quantity": 2}, headers=auth_headers("alice"))

        assert client.get("/cart/count", headers=auth_headers("bob")).json() == {"count": 0}
