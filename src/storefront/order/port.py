"""Order store port (abstract interface).

Defines the contract every remote order store adapter implements. Each call is
atomic on its own; there is no transaction spanning an order insert and the
insert of its line items.
"""

from abc import ABC, abstractmethod

from storefront.order.records import OrderLineItemRecord, OrderRecord, OrderStatus


class OrderStore(ABC):
    """Abstract remote store for orders and order line items."""

    @abstractmethod
    def insert_order(self, order: OrderRecord) -> OrderRecord:
        """Insert one order and return it with its generated id and timestamp.

        Raises StoreWriteError when the store reports a fault.
        """
        ...

    @abstractmethod
    def insert_line_items(self, items: list[OrderLineItemRecord]) -> None:
        """Insert a batch of line items in a single call.

        Raises StoreWriteError when the store reports a fault.
        """
        ...

    @abstractmethod
    def list_orders(
        self,
        status: OrderStatus | None = None,
        user_id: str | None = None,
    ) -> list[OrderRecord]:
        """Return orders, newest first, optionally filtered."""
        ...

    @abstractmethod
    def list_line_items(self, order_id: str) -> list[OrderLineItemRecord]:
        """Return the line items recorded for ``order_id``."""
        ...
