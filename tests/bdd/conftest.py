"""Shared BDD fixtures and step definitions for the storefront."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart
from storefront.catalogue.management import AddProduct, AdjustProductStock
from storefront.catalogue.product import Product
from storefront.errors import AuthorizationError, summarize
from storefront.order.checkout import PlaceOrder
from storefront.order.order import Order

SHIPPING = {
    "full_name": "Jane Doe",
    "address": "123 Main St",
    "city": "Springfield",
    "postal_code": "62701",
    "country": "US",
    "phone": "+1-217-555-0100",
}


@pytest.fixture()
def context():
    """Scenario state: product ids by name, the last order placed and the last error."""
    return {"products": {}, "order_id": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced at {price:f} with {stock:d} in stock'))
def stocked_product(context, name, price, stock):
    context["products"][name] = current_domain.process(
        AddProduct(name=name, price=price, stock=stock),
        asynchronous=False,
    )


@given(parsers.cfparse('customer "{customer_id}" has {quantity:d} of "{name}" in the cart'))
def product_in_cart(context, customer_id, quantity, name):
    current_domain.process(
        AddToCart(customer_id=customer_id, product_id=context["products"][name], quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('the stock of "{name}" is reduced by {amount:d}'))
def reduce_stock(context, name, amount):
    current_domain.process(
        AdjustProductStock(product_id=context["products"][name], delta=-amount),
        asynchronous=False,
    )


@given(parsers.cfparse('customer "{customer_id}" checks out paying by "{payment_method}"'))
@when(parsers.cfparse('customer "{customer_id}" checks out paying by "{payment_method}"'))
def check_out(context, customer_id, payment_method):
    try:
        context["order_id"] = current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                shipping_address=json.dumps(SHIPPING),
                payment_method=payment_method,
            ),
            asynchronous=False,
        )
    except (ValidationError, AuthorizationError) as exc:
        context["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
def _order(context):
    return current_domain.repository_for(Order).get(context["order_id"])


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(context, status):
    assert _order(context).status == status


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def product_stock_is(context, name, stock):
    assert current_domain.repository_for(Product).get(context["products"][name]).stock == stock


@then(parsers.cfparse('the cart of "{customer_id}" is empty'))
def cart_is_empty(customer_id):
    cart = current_domain.repository_for(ShoppingCart).get(customer_id)
    assert len(cart.items) == 0
    assert cart.total_amount == 0.0


@then(parsers.cfparse('the cart of "{customer_id}" holds {count:d} items'))
def cart_holds(customer_id, count):
    assert current_domain.repository_for(ShoppingCart).get(customer_id).total_items == count


@then(parsers.cfparse('the {action} is rejected with "{message}"'))
def rejected_with(context, action, message):
    assert context["error"] is not None, f"expected the {action} to fail"
    assert summarize(context["error"].messages) == message
