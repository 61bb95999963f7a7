"""Shopping cart: the ``ShoppingCart`` aggregate and the session ``Cart`` that persists it.

The cart is owned by a single client session. ``Cart`` rehydrates the
aggregate from storage when constructed and re-serializes it after every
mutation, so a restart resumes where the shopper left off. Invariants:

- at most one line item per variant id; adding an existing variant merges
  quantities instead of duplicating the row
- every line item has a quantity of at least 1; driving a quantity to zero or
  below removes the item
- insertion order is display order
"""

import json
from collections.abc import Mapping
from typing import Any

import structlog
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import HasMany, String
from pydantic import ValidationError as PydanticValidationError

from storefront.cart.items import CartLineItem
from storefront.cart.storage import CartStorage
from storefront.catalog.snapshots import ProductSnapshot, VariantSnapshot, snapshot_product
from storefront.config import CART_STORAGE_KEY
from storefront.domain import storefront
from storefront.exceptions import StorageReadError, flatten_messages, pydantic_messages

logger = structlog.get_logger(__name__)


def _is_whole_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _ensure_whole_number(quantity: Any) -> None:
    if not _is_whole_number(quantity):
        raise ValidationError({"quantity": ["Quantity must be a whole number"]})


@storefront.aggregate
class ShoppingCart:
    session_id = String(max_length=255)
    items = HasMany(CartLineItem)

    @invariant.post
    def one_line_item_per_variant(self):
        keys = [item.key for item in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A variant can only appear once in a cart"]})

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find(self, variant_id: int | str) -> CartLineItem | None:
        return next((i for i in self.items if i.key == str(variant_id)), None)

    def total(self) -> int:
        """Sum of price times quantity over all items, in cents."""
        return sum(item.line_total_cents for item in self.items)

    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product: ProductSnapshot, variant: VariantSnapshot, quantity: int = 1) -> None:
        """Add ``quantity`` units of a variant, merging with an existing line item."""
        _ensure_whole_number(quantity)
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.find(variant.id)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(CartLineItem.from_snapshots(product, variant, quantity))

    def remove_item(self, variant_id: int | str) -> None:
        """Remove the line item for ``variant_id``. Unknown ids are ignored."""
        item = self.find(variant_id)
        if item is not None:
            self.remove_items(item)

    def set_quantity(self, variant_id: int | str, quantity: int) -> None:
        """Replace the quantity of a line item; zero or less removes it."""
        _ensure_whole_number(quantity)

        item = self.find(variant_id)
        if item is None:
            return
        if quantity <= 0:
            self.remove_items(item)
        else:
            item.quantity = quantity

    def clear(self) -> None:
        for item in list(self.items):
            self.remove_items(item)


class Cart:
    """The session's cart, written through to ``storage`` under ``key``."""

    def __init__(self, storage: CartStorage, key: str = CART_STORAGE_KEY, session_id: str | None = None) -> None:
        self.storage = storage
        self.key = key
        self.session_id = session_id
        self._cart = self._load()

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def items(self) -> tuple[CartLineItem, ...]:
        """Read-only snapshot of the line items in display order."""
        return tuple(item.detached() for item in self._cart.items)

    @property
    def is_empty(self) -> bool:
        return not self._cart.items

    def __len__(self) -> int:
        return len(self._cart.items)

    def find(self, variant_id: int | str) -> CartLineItem | None:
        item = self._cart.find(variant_id)
        return item.detached() if item else None

    def total(self) -> int:
        return self._cart.total()

    def item_count(self) -> int:
        return self._cart.item_count()

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(
        self,
        product: ProductSnapshot | Mapping[str, Any],
        variant: VariantSnapshot | Mapping[str, Any],
        quantity: int = 1,
    ) -> None:
        """Snapshot ``product``/``variant`` and add them to the cart.

        Quantities must be positive whole numbers; anything else is rejected
        before the cart is touched.
        """
        if not isinstance(product, ProductSnapshot):
            product = snapshot_product(product)
        if not isinstance(variant, VariantSnapshot):
            try:
                variant = VariantSnapshot.model_validate(variant)
            except PydanticValidationError as exc:
                raise ValidationError(pydantic_messages(exc)) from exc

        self._cart.add_item(product, variant, quantity)

        logger.debug("Cart item added", variant_id=str(variant.id), quantity=quantity)
        self._persist()

    def remove_item(self, variant_id: int | str) -> None:
        self._cart.remove_item(variant_id)
        self._persist()

    def set_quantity(self, variant_id: int | str, quantity: int) -> None:
        self._cart.set_quantity(variant_id, quantity)
        self._persist()

    def clear(self) -> None:
        self._cart.clear()
        self._persist()

    # -------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------
    def to_storage(self) -> list[dict]:
        return [item.to_storage() for item in self._cart.items]

    def reload(self) -> None:
        """Discard in-memory state and read the cart back from storage."""
        self._cart = self._load()

    def _persist(self) -> None:
        try:
            self.storage.write(self.key, json.dumps(self.to_storage()))
        except OSError as exc:
            logger.error("Failed to persist cart", key=self.key, error=str(exc))

    def _load(self) -> ShoppingCart:
        try:
            items = self.deserialize(self.storage.read(self.key))
        except StorageReadError as exc:
            logger.warning("Discarding unreadable stored cart", key=self.key, error=flatten_messages(exc.messages))
            items = []

        cart = ShoppingCart(session_id=self.session_id)
        for item in items:
            cart.add_items(item)
        return cart

    @staticmethod
    def deserialize(raw: str | None) -> list[CartLineItem]:
        """Parse a stored cart, merging duplicate variants and dropping empty lines.

        Raises StorageReadError when ``raw`` is not a JSON list of line items.
        """
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as exc:
            raise StorageReadError({"cart": [f"Stored cart is not valid JSON: {exc}"]}) from exc

        if not isinstance(data, list):
            raise StorageReadError({"cart": ["Stored cart must be a list of line items"]})

        items: list[CartLineItem] = []
        for entry in data:
            if not isinstance(entry, dict):
                raise StorageReadError({"cart": ["Stored line item must be an object"]})

            quantity = entry.get("quantity")
            if not _is_whole_number(quantity):
                raise StorageReadError({"quantity": ["Quantity must be a whole number"]})
            if quantity <= 0:
                continue

            try:
                product = ProductSnapshot.model_validate(entry.get("product"))
                variant = VariantSnapshot.model_validate(entry.get("variant"))
            except PydanticValidationError as exc:
                raise StorageReadError(pydantic_messages(exc)) from exc

            existing = next((i for i in items if i.key == str(variant.id)), None)
            if existing:
                existing.quantity += quantity
            else:
                items.append(CartLineItem.from_snapshots(product, variant, quantity))

        return items
