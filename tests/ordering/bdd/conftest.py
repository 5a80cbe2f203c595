"""Shared BDD fixtures and step definitions for the Ordering domain."""

from decimal import Decimal

import pytest
from ordering.cart.items import AddToCart
from ordering.cart.management import find_cart
from protean import current_domain
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def outcomes():
    """Container for checkout results and errors, keyed by customer."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{product_id}" priced {price} with {quantity:d} in stock'))
def product_in_stock(catalog, product_id, price, quantity):
    catalog.add_product(product_id, f"Product {product_id}", Decimal(price), quantity)


@given(parsers.cfparse('customer "{customer_id}" has {quantity:d} of "{product_id}" in the cart'))
def customer_cart(customer_id, quantity, product_id):
    current_domain.process(
        AddToCart(customer_id=customer_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('the stock of "{product_id}" is set to {quantity:d}'))
def set_stock(catalog, product_id, quantity):
    catalog.restock(product_id, quantity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the stock of "{product_id}" is {quantity:d}'))
def stock_is(catalog, product_id, quantity):
    assert catalog.get_product(product_id).stock_quantity == quantity


@then(parsers.cfparse('the cart of "{customer_id}" is empty'))
def cart_is_empty(customer_id):
    cart = find_cart(customer_id)
    assert cart is None or cart.is_empty
