"""Cart analysis: classify cart contents to decide which delivery fields are required.

Automation services (bots) are delivered over a contact handle; in-game items
are delivered to a character nickname. A mixed cart needs both.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from storefront.cart.items import CartLineItem
from storefront.config import SERVICE_CATEGORY

NICKNAME = "nickname"
CONTACT_HANDLE = "discord"


@dataclass(frozen=True)
class CartAnalysis:
    contains_service_item: bool = False
    contains_deliverable_item: bool = False


def analyze_cart(items: Iterable[CartLineItem], service_category: str = SERVICE_CATEGORY) -> CartAnalysis:
    categories = [item.product.category for item in items]
    return CartAnalysis(
        contains_service_item=any(c == service_category for c in categories),
        contains_deliverable_item=any(c != service_category for c in categories),
    )


def required_fields(analysis: CartAnalysis) -> frozenset[str]:
    """Delivery-info fields that must be supplied for a cart with this analysis."""
    fields = set()
    if analysis.contains_deliverable_item:
        fields.add(NICKNAME)
    if analysis.contains_service_item:
        fields.add(CONTACT_HANDLE)
    return frozenset(fields)
