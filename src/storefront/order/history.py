"""Order history: orders joined with their line items for display.

Serves the admin order console (filter by status) and a shopper's account
page (filter by user).
"""

from pydantic import BaseModel

from storefront.order.port import OrderStore
from storefront.order.records import OrderLineItemRecord, OrderRecord, OrderStatus


class OrderSummary(BaseModel):
    order: OrderRecord
    items: list[OrderLineItemRecord]

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_orphaned(self) -> bool:
        return not self.items


def list_order_summaries(
    store: OrderStore,
    status: OrderStatus | None = None,
    user_id: str | None = None,
) -> list[OrderSummary]:
    """Newest first."""
    return [
        OrderSummary(order=order, items=store.list_line_items(order.id))
        for order in store.list_orders(status=status, user_id=user_id)
    ]
