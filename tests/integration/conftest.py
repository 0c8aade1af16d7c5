import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from storefront.api import admin_router, cart_router, order_router, product_router, register_error_handlers
from storefront.api.auth import create_access_token
from storefront.domain import storefront


@pytest.fixture()
def client():
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with storefront.domain_context():
            return await call_next(request)

    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(product_router)
    app.include_router(admin_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def auth_headers():
    """Return a function that builds ``Authorization`` headers for a user."""

    def _headers(user_id="cust-api-001", is_admin=False):
        return {"Authorization": f"Bearer {create_access_token(user_id, is_admin=is_admin)}"}

    return _headers


@pytest.fixture()
def admin_headers(auth_headers):
    return auth_headers("admin-001", is_admin=True)


@pytest.fixture()
def stocked_product(client, admin_headers):
    """Return a function that creates a product through the admin API and returns its id."""

    def _create(name="Widget", price=25.0, stock=10):
        response = client.post(
            "/admin/products",
            json={"name": name, "price": price, "stock": stock},
            headers=admin_headers,
        )
        assert response.status_code == 201
        return response.json()["product_id"]

    return _create
