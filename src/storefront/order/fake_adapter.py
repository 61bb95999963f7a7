"""Configurable in-memory order store for development and testing.

Each write can be told to fail, which makes the partial-failure paths of the
checkout pipeline reproducible: an order insert that succeeds followed by a
line item insert that does not.
"""

from datetime import UTC, datetime
from uuid import uuid4

from storefront.exceptions import StoreWriteError
from storefront.order.port import OrderStore
from storefront.order.records import OrderLineItemRecord, OrderRecord, OrderStatus


class FakeOrderStore(OrderStore):
    """In-memory order store with switchable write failures."""

    def __init__(self) -> None:
        self.orders: list[OrderRecord] = []
        self.line_items: list[OrderLineItemRecord] = []
        self.fail_order_insert: bool = False
        self.fail_line_items: bool = False
        self.failure_reason: str = "Store unavailable"
        self.calls: list[dict] = []

    def configure(
        self,
        fail_order_insert: bool = False,
        fail_line_items: bool = False,
        failure_reason: str = "Store unavailable",
    ) -> None:
        """Configure store behavior at runtime."""
        self.fail_order_insert = fail_order_insert
        self.fail_line_items = fail_line_items
        self.failure_reason = failure_reason

    def insert_order(self, order: OrderRecord) -> OrderRecord:
        self.calls.append({"method": "insert_order", "order": order})

        if self.fail_order_insert:
            raise StoreWriteError({"orders": [self.failure_reason]})

        created = order.model_copy(update={"id": uuid4().hex, "created_at": datetime.now(UTC)})
        self.orders.append(created)
        return created

    def insert_line_items(self, items: list[OrderLineItemRecord]) -> None:
        self.calls.append({"method": "insert_line_items", "items": list(items)})

        if self.fail_line_items:
            raise StoreWriteError({"order_items": [self.failure_reason]})

        self.line_items.extend(items)

    def list_orders(
        self,
        status: OrderStatus | None = None,
        user_id: str | None = None,
    ) -> list[OrderRecord]:
        orders = [
            order
            for order in self.orders
            if (status is None or order.status == status) and (user_id is None or order.user_id == user_id)
        ]
        # Insertion order breaks ties between orders created in the same instant
        return [order for _, order in sorted(enumerate(orders), key=lambda p: (p[1].created_at, p[0]), reverse=True)]

    def list_line_items(self, order_id: str) -> list[OrderLineItemRecord]:
        return [item for item in self.line_items if item.order_id == order_id]
