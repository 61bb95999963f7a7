"""BDD tests for cart line items."""

from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.catalog.snapshots import ProductSnapshot, VariantSnapshot

scenarios("features/cart_items.feature")


def _add(cart, qty, variant_id, price):
    cart.add_item(
        ProductSnapshot(id=1, title="Gold Coins"),
        VariantSnapshot(id=variant_id, title=f"Pack {variant_id}", price_in_cents=price),
        qty,
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty cart")
def empty_cart(cart):
    assert cart.is_empty


@given(parsers.cfparse('{qty:d} of variant "{variant_id}" priced {price:d} cents in the cart'))
def variant_in_cart(cart, qty, variant_id, price):
    _add(cart, qty, variant_id, price)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('{qty:d} of variant "{variant_id}" priced {price:d} cents are added'))
def add_variant(cart, qty, variant_id, price, error):
    try:
        _add(cart, qty, variant_id, price)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the quantity of variant "{variant_id}" is set to {qty:d}'))
def set_variant_quantity(cart, variant_id, qty):
    cart.set_quantity(variant_id, qty)


@when(parsers.cfparse('variant "{variant_id}" is removed'))
def remove_variant(cart, variant_id):
    cart.remove_item(variant_id)


@when("the cart is reloaded from storage")
def reload_cart(cart):
    cart.reload()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart total is {total:d} cents"))
def cart_total_is(cart, total):
    assert cart.total() == total


@then(parsers.cfparse('variant "{variant_id}" has quantity {qty:d}'))
def variant_has_quantity(cart, variant_id, qty):
    assert cart.find(variant_id).quantity == qty


@then(parsers.cfparse('the change is rejected for "{field}"'))
def change_rejected(error, field):
    assert error["exc"] is not None
    assert field in error["exc"].messages
