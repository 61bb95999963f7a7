"""Catalog reader port (abstract interface).

The storefront never writes catalog data. It reads product records to take
snapshots when an item is added to a cart, and lists active products for the
shop and bots pages.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class CatalogReader(ABC):
    """Read-only access to catalog product records."""

    @abstractmethod
    def get_product(self, product_id: int | str) -> Mapping[str, Any] | None:
        """Return the product record with ``product_id``, or None if unknown."""
        ...

    @abstractmethod
    def list_products(
        self,
        category: str | None = None,
        exclude_category: str | None = None,
        search: str | None = None,
    ) -> list[Mapping[str, Any]]:
        """Return active products, optionally filtered by category or name."""
        ...
