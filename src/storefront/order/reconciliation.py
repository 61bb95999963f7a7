"""Orphaned order detection: pending orders that never received line items.

An order and its line items are written by two separate store calls. When the
second call fails the order is left with no items. Designed to be run
periodically (cron, ``manage.py detect-orphans``): it lists pending orders
with zero items that are older than a grace period, so an order whose items
are still being written is not reported. Orphans are reported, never deleted;
an operator reviews them.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

from storefront.order.port import OrderStore
from storefront.order.records import OrderStatus

logger = structlog.get_logger(__name__)

DEFAULT_GRACE_PERIOD = timedelta(minutes=15)


@dataclass(frozen=True)
class OrphanedOrder:
    order_id: str
    user_id: str
    user_email: str | None
    total_amount_cents: int
    created_at: datetime


def detect_orphaned_orders(
    store: OrderStore,
    grace_period: timedelta = DEFAULT_GRACE_PERIOD,
    as_of: datetime | None = None,
) -> list[OrphanedOrder]:
    as_of = as_of or datetime.now(UTC)
    cutoff = as_of - grace_period

    logger.info("Checking for orphaned orders", cutoff=cutoff.isoformat())

    orphans = []
    for order in store.list_orders(status=OrderStatus.PENDING):
        if order.created_at is None or order.created_at > cutoff:
            continue
        if store.list_line_items(order.id):
            continue

        orphans.append(
            OrphanedOrder(
                order_id=order.id,
                user_id=order.user_id,
                user_email=order.metadata.get("user_email"),
                total_amount_cents=order.total_amount_cents,
                created_at=order.created_at,
            )
        )
        logger.warning(
            "Pending order has no line items",
            order_id=order.id,
            user_id=order.user_id,
            created_at=order.created_at.isoformat(),
        )

    logger.info("Orphaned order detection complete", orphan_count=len(orphans))
    return orphans
