"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's pydantic request
schemas, and signs bearer tokens the same way the external issuer does.
"""

import random
import uuid

from faker import Faker

from storefront.api.auth import create_access_token

fake = Faker()

PAYMENT_METHODS = ["PayPal", "Stripe", "Cash on Delivery", "Bank Transfer"]


def customer_id() -> str:
    """Generate unique customer ids like 'cust-lt-a1b2c3d4'."""
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def auth_headers(user_id: str, is_admin: bool = False) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, is_admin=is_admin)}"}


def product_data() -> dict:
    """Generate an AddProductRequest payload with enough stock for many shoppers."""
    return {
        "name": f"{fake.color_name()} {fake.word().capitalize()}"[:255],
        "price": round(random.uniform(5.0, 250.0), 2),
        "stock": random.randint(500, 2000),
        "image": f"/images/{uuid.uuid4().hex[:8]}.jpg",
    }


def shipping_address() -> dict:
    """Generate a ShippingAddressSchema payload."""
    return {
        "full_name": fake.name()[:255],
        "address": fake.street_address()[:255],
        "city": fake.city()[:100],
        "postal_code": fake.postcode()[:20],
        "country": fake.country_code(),
        "phone": fake.phone_number()[:30],
    }


def place_order_data() -> dict:
    return {
        "shipping_address": shipping_address(),
        "payment_method": random.choice(PAYMENT_METHODS),
        "notes": fake.sentence()[:500] if random.random() < 0.3 else None,
    }


def payment_result_data() -> dict:
    return {
        "payment_result": {
            "id": f"PAY-{uuid.uuid4().hex[:12].upper()}",
            "status": "COMPLETED",
            "update_time": fake.iso8601(),
            "email_address": fake.email(),
        }
    }
