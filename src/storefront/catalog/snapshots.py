"""Product and variant snapshots taken from catalog records at add-to-cart time.

A snapshot is a frozen copy of the handful of catalog attributes a cart needs.
Once captured it is decoupled from the catalog: later price or title edits do
not reach items already in a cart.
"""

from collections.abc import Mapping
from typing import Any

from protean.exceptions import ValidationError
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from storefront.exceptions import pydantic_messages

DEFAULT_VARIANT_TITLE = "Standard"


class ProductSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | str
    title: str
    image: str | None = None
    category: str | None = None


class VariantSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | str
    title: str
    price_in_cents: int = Field(default=0, ge=0)


def snapshot_product(record: Mapping[str, Any]) -> ProductSnapshot:
    """Build a ProductSnapshot from a catalog record.

    Catalog rows name their columns ``name``/``image_url``; snapshots already
    in a cart use ``title``/``image``. Both spellings are accepted.
    """
    try:
        return ProductSnapshot(
            id=record.get("id"),
            title=record.get("title") or record.get("name"),
            image=record.get("image") or record.get("image_url"),
            category=record.get("category"),
        )
    except PydanticValidationError as exc:
        raise ValidationError(pydantic_messages(exc)) from exc


def default_variant(record: Mapping[str, Any]) -> VariantSnapshot:
    """Synthesize the single variant of a product that has none."""
    return VariantSnapshot(
        id=f"{record['id']}-default",
        title=DEFAULT_VARIANT_TITLE,
        price_in_cents=record.get("price_in_cents") or 0,
    )


def _with_price(variant: Any) -> Any:
    if isinstance(variant, Mapping) and variant.get("price_in_cents") is None:
        return {**variant, "price_in_cents": 0}
    return variant


def variants_for(record: Mapping[str, Any]) -> list[VariantSnapshot]:
    """Declared variants of ``record``; an unpriced variant costs 0."""
    variants = record.get("variants") or []
    if not variants:
        return [default_variant(record)]

    try:
        return [VariantSnapshot.model_validate(_with_price(variant)) for variant in variants]
    except PydanticValidationError as exc:
        raise ValidationError(pydantic_messages(exc)) from exc


def select_variant(record: Mapping[str, Any], variant_id: int | str | None = None) -> VariantSnapshot:
    """Pick a variant of ``record`` by id, or its first variant when no id is given."""
    variants = variants_for(record)
    if variant_id is None:
        return variants[0]

    variant = next((v for v in variants if str(v.id) == str(variant_id)), None)
    if variant is None:
        raise ValidationError({"variant_id": [f"Variant {variant_id} not found for product {record.get('id')}"]})
    return variant
