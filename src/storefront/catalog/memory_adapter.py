"""In-memory catalog adapter for development and testing."""

from collections.abc import Iterable, Mapping
from typing import Any

from storefront.catalog.port import CatalogReader


class InMemoryCatalog(CatalogReader):
    """Catalog backed by a list of product records.

    Records follow the catalog table layout: ``id``, ``name``, ``image_url``,
    ``category``, ``price_in_cents``, ``is_active`` and optional ``variants``.
    """

    def __init__(self, products: Iterable[Mapping[str, Any]] = ()) -> None:
        self.products: list[dict[str, Any]] = [dict(product) for product in products]

    def add(self, product: Mapping[str, Any]) -> None:
        self.products.append(dict(product))

    def get_product(self, product_id: int | str) -> Mapping[str, Any] | None:
        return next((p for p in self.products if str(p["id"]) == str(product_id)), None)

    def list_products(
        self,
        category: str | None = None,
        exclude_category: str | None = None,
        search: str | None = None,
    ) -> list[Mapping[str, Any]]:
        results = [p for p in self.products if p.get("is_active", True)]

        if category and category != "all":
            results = [p for p in results if p.get("category") == category]
        if exclude_category:
            results = [p for p in results if p.get("category") != exclude_category]
        if search:
            needle = search.lower()
            results = [p for p in results if needle in (p.get("name") or p.get("title") or "").lower()]

        return results
