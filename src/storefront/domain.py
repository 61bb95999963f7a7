"""Storefront bounded context: the shopper's cart and the checkout that places it as an order."""

from protean.domain import Domain

storefront = Domain(name="storefront")
