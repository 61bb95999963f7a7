"""Cart line items: a product snapshot and a variant snapshot bound to a quantity."""

from protean.fields import Integer, String, Text

from storefront.catalog.snapshots import ProductSnapshot, VariantSnapshot
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartLineItem:
    product_snapshot = Text(required=True)  # JSON ProductSnapshot
    variant_id = String(required=True, max_length=255)
    variant_snapshot = Text(required=True)  # JSON VariantSnapshot
    quantity = Integer(required=True, min_value=1)

    @classmethod
    def from_snapshots(cls, product: ProductSnapshot, variant: VariantSnapshot, quantity: int) -> "CartLineItem":
        return cls(
            product_snapshot=product.model_dump_json(),
            variant_id=str(variant.id),
            variant_snapshot=variant.model_dump_json(),
            quantity=quantity,
        )

    @property
    def product(self) -> ProductSnapshot:
        return ProductSnapshot.model_validate_json(self.product_snapshot)

    @property
    def variant(self) -> VariantSnapshot:
        return VariantSnapshot.model_validate_json(self.variant_snapshot)

    @property
    def key(self) -> str:
        """Uniqueness key within a cart: the variant id in string form."""
        return str(self.variant_id)

    @property
    def line_total_cents(self) -> int:
        return self.variant.price_in_cents * self.quantity

    def detached(self) -> "CartLineItem":
        """A copy that shares no state with the cart it came from."""
        return CartLineItem.from_snapshots(self.product, self.variant, self.quantity)

    def to_storage(self) -> dict:
        return {
            "product": self.product.model_dump(mode="json"),
            "variant": self.variant.model_dump(mode="json"),
            "quantity": self.quantity,
        }
