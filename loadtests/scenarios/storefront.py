"""Storefront load test scenarios.

Four stateful SequentialTaskSet journeys covering cart browsing and
abandonment, checkout with payment, checkout followed by cancellation, and
administrative fulfilment through delivery.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    auth_headers,
    customer_id,
    payment_result_data,
    place_order_data,
    product_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CatalogueState, ShopperState


class _ShopperJourney(SequentialTaskSet):
    """Base journey: a fresh customer with their own bearer token."""

    def on_start(self):
        self.state = ShopperState(customer_id=customer_id())
        self.state.headers = auth_headers(self.state.customer_id)

    def _add_random_product(self, name="POST /cart/add"):
        product_id = random.choice(self.user.catalogue.product_ids)
        with self.client.post(
            "/cart/add",
            json={"product_id": product_id, "quantity": random.randint(1, 3)},
            headers=self.state.headers,
            catch_response=True,
            name=name,
        ) as resp:
            if resp.status_code == 200:
                self.state.cart_product_ids.append(product_id)
            else:
                resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    def _checkout(self):
        with self.client.post(
            "/orders",
            json=place_order_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
                self.state.current_status = resp.json()["status"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()


class CartBrowsingJourney(_ShopperJourney):
    """View Cart -> Add Items -> Update Quantity -> Remove Item -> Clear.

    Models a browsing customer who fills the cart, changes their mind and
    leaves without checking out.
    """

    @task
    def view_cart(self):
        with self.client.get("/cart", headers=self.state.headers, catch_response=True, name="GET /cart") as resp:
            if resp.status_code != 200:
                resp.failure(f"View cart failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_item_1(self):
        self._add_random_product()

    @task
    def add_item_2(self):
        self._add_random_product()

    @task
    def update_quantity(self):
        if not self.state.cart_product_ids:
            return
        with self.client.put(
            "/cart/update",
            json={"product_id": self.state.cart_product_ids[0], "quantity": 1},
            headers=self.state.headers,
            catch_response=True,
            name="PUT /cart/update",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update quantity failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def count_items(self):
        with self.client.get(
            "/cart/count", headers=self.state.headers, catch_response=True, name="GET /cart/count"
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Cart count failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def remove_item(self):
        if not self.state.cart_product_ids:
            return
        product_id = self.state.cart_product_ids.pop()
        with self.client.delete(
            f"/cart/remove/{product_id}",
            headers=self.state.headers,
            catch_response=True,
            name="DELETE /cart/remove/{product_id}",
        ) as resp:
            # The same product may have been added twice, so its line can already be gone
            if resp.status_code not in (200, 404):
                resp.failure(f"Remove item failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def clear_cart(self):
        with self.client.delete(
            "/cart/clear", headers=self.state.headers, catch_response=True, name="DELETE /cart/clear"
        ) as resp:
            if resp.status_code not in (200, 404):
                resp.failure(f"Clear cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CheckoutAndPayJourney(_ShopperJourney):
    """Add Items -> Checkout -> Pay -> Review order history.

    The happy path: a customer buys and pays, then looks at their orders.
    """

    @task
    def add_items(self):
        for _ in range(random.randint(1, 3)):
            self._add_random_product()

    @task
    def checkout(self):
        self._checkout()

    @task
    def pay(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/pay",
            json=payment_result_data(),
            headers=self.state.headers,
            catch_response=True,
            name="PUT /orders/{id}/pay",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = resp.json()["status"]
            else:
                resp.failure(f"Pay failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def order_history(self):
        with self.client.get(
            "/orders?page=1&limit=10", headers=self.state.headers, catch_response=True, name="GET /orders"
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Order history failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def order_stats(self):
        with self.client.get(
            "/orders/stats", headers=self.state.headers, catch_response=True, name="GET /orders/stats"
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Order stats failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CheckoutAndCancelJourney(_ShopperJourney):
    """Add Item -> Checkout -> View Order -> Cancel.

    The unhappy path: stock is returned when the customer cancels.
    """

    @task
    def add_item(self):
        self._add_random_product()

    @task
    def checkout(self):
        self._checkout()

    @task
    def view_order(self):
        with self.client.get(
            f"/orders/{self.state.order_id}",
            headers=self.state.headers,
            catch_response=True,
            name="GET /orders/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"View order failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def cancel(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/cancel",
            headers=self.state.headers,
            catch_response=True,
            name="PUT /orders/{id}/cancel",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "Cancelled"
            else:
                resp.failure(f"Cancel failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class FulfilmentJourney(_ShopperJourney):
    """Checkout -> Admin ships -> Admin delivers -> Admin lists shipped orders."""

    @task
    def add_item(self):
        self._add_random_product()

    @task
    def checkout(self):
        self._checkout()

    def _set_status(self, status):
        with self.client.put(
            f"/admin/orders/{self.state.order_id}/status",
            json={"status": status},
            headers=self.user.admin_headers,
            catch_response=True,
            name="PUT /admin/orders/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = status
            else:
                resp.failure(f"Set status {status} failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def ship(self):
        self._set_status("Shipped")

    @task
    def deliver(self):
        self._set_status("Delivered")

    @task
    def list_delivered(self):
        with self.client.get(
            "/admin/orders?status=Delivered&limit=20",
            headers=self.user.admin_headers,
            catch_response=True,
            name="GET /admin/orders",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Admin order list failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class StorefrontUser(HttpUser):
    """Locust user simulating storefront traffic.

    Each user stocks a small catalogue through the admin API on start, then
    runs weighted journeys against it:
    - 40% Cart browsing and abandonment
    - 30% Checkout and payment (happy path)
    - 15% Checkout and cancellation
    - 15% Admin fulfilment through delivery
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        CartBrowsingJourney: 8,
        CheckoutAndPayJourney: 6,
        CheckoutAndCancelJourney: 3,
        FulfilmentJourney: 3,
    }

    def on_start(self):
        self.admin_headers = auth_headers("admin-loadtest", is_admin=True)
        self.catalogue = CatalogueState()
        for _ in range(5):
            with self.client.post(
                "/admin/products",
                json=product_data(),
                headers=self.admin_headers,
                catch_response=True,
                name="POST /admin/products",
            ) as resp:
                if resp.status_code == 201:
                    self.catalogue.product_ids.append(resp.json()["product_id"])
                else:
                    resp.failure(f"Create product failed: {resp.status_code}: {extract_error_detail(resp)}")
