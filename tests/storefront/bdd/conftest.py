"""Shared BDD fixtures and step definitions for the Storefront domain."""

import pytest
from pytest_bdd import given, parsers, then

from storefront.catalog.snapshots import default_variant, snapshot_product

# Catalog records addressed by name in feature files
_PRODUCTS = {
    "Diamond Sword": {"id": 1, "name": "Diamond Sword", "category": "weapons", "price_in_cents": 1500},
    "Farm Bot": {"id": 2, "name": "Farm Bot", "category": "bots", "price_in_cents": 4999},
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('{qty:d} "{name}" in the cart'))
def named_product_in_cart(cart, qty, name):
    record = _PRODUCTS[name]
    cart.add_item(snapshot_product(record), default_variant(record), qty)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line item"))
def cart_has_n_line_items_singular(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the cart has {count:d} line items"))
def cart_has_n_line_items(cart, count):
    assert len(cart.items) == count
