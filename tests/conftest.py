import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from storefront.domain import storefront

    storefront.init()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Shared catalogue and cart helpers
# ---------------------------------------------------------------------------
@pytest.fixture()
def add_product():
    """Return a function that stocks a product through ``AddProduct`` and returns its id."""
    from protean import current_domain
    from storefront.catalogue.management import AddProduct

    def _add(name="Widget", price=25.0, stock=10, image=None):
        return current_domain.process(
            AddProduct(name=name, price=price, stock=stock, image=image),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def fill_cart():
    """Return a function that puts ``(product_id, quantity)`` lines into a customer's cart."""
    from protean import current_domain
    from storefront.cart.items import AddToCart

    def _fill(customer_id, *lines):
        for product_id, quantity in lines:
            current_domain.process(
                AddToCart(customer_id=customer_id, product_id=product_id, quantity=quantity),
                asynchronous=False,
            )

    return _fill


@pytest.fixture()
def shipping_address():
    return {
        "full_name": "Jane Doe",
        "address": "123 Main St",
        "city": "Springfield",
        "postal_code": "62701",
        "country": "US",
        "phone": "+1-217-555-0100",
    }
