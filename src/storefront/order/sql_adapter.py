"""SQLAlchemy order store: orders and order_items tables.

Each insert runs in its own transaction. The order insert and the line item
insert are two separate commits, matching the port contract: a failure in the
second leaves the first in place.
"""

from datetime import UTC, datetime

import sqlalchemy as sa
import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from storefront.exceptions import StoreWriteError
from storefront.order.port import OrderStore
from storefront.order.records import OrderLineItemRecord, OrderRecord, OrderStatus

logger = structlog.get_logger(__name__)

metadata = sa.MetaData()

orders_table = sa.Table(
    "orders",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("user_id", sa.String(255), nullable=False, index=True),
    sa.Column("total_amount_cents", sa.Integer, nullable=False),
    sa.Column("status", sa.String(16), nullable=False, index=True),
    sa.Column("delivery_info", sa.JSON, nullable=False),
    sa.Column("metadata", sa.JSON, nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
)

order_items_table = sa.Table(
    "order_items",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id"), nullable=False, index=True),
    sa.Column("product_id", sa.String(255), nullable=False),
    sa.Column("product_name", sa.String(255), nullable=False),
    sa.Column("variant_id", sa.String(255), nullable=False),
    sa.Column("variant_name", sa.String(255), nullable=False),
    sa.Column("quantity", sa.Integer, nullable=False),
    sa.Column("price_per_item_cents", sa.Integer, nullable=False),
)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back; stored values are always UTC.
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class SqlOrderStore(OrderStore):
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_uri(cls, database_uri: str) -> "SqlOrderStore":
        return cls(sa.create_engine(database_uri))

    def create_schema(self) -> None:
        metadata.create_all(self.engine)

    def drop_schema(self) -> None:
        metadata.drop_all(self.engine)

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def insert_order(self, order: OrderRecord) -> OrderRecord:
        created_at = datetime.now(UTC)
        values = {
            "user_id": order.user_id,
            "total_amount_cents": order.total_amount_cents,
            "status": order.status.value,
            "delivery_info": order.delivery_info,
            "metadata": order.metadata,
            "created_at": created_at,
        }

        try:
            with self.engine.begin() as conn:
                result = conn.execute(orders_table.insert().values(**values))
                order_id = result.inserted_primary_key[0]
        except SQLAlchemyError as exc:
            logger.error("Order insert failed", user_id=order.user_id, error=str(exc))
            raise StoreWriteError({"orders": [str(exc)]}) from exc

        return order.model_copy(update={"id": str(order_id), "created_at": created_at})

    def insert_line_items(self, items: list[OrderLineItemRecord]) -> None:
        if not items:
            return

        try:
            rows = [
                {
                    "order_id": int(item.order_id),
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "variant_id": item.variant_id,
                    "variant_name": item.variant_name,
                    "quantity": item.quantity,
                    "price_per_item_cents": item.price_per_item_cents,
                }
                for item in items
            ]
            with self.engine.begin() as conn:
                conn.execute(order_items_table.insert(), rows)
        except (SQLAlchemyError, ValueError) as exc:
            logger.error("Order line item insert failed", count=len(items), error=str(exc))
            raise StoreWriteError({"order_items": [str(exc)]}) from exc

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def list_orders(
        self,
        status: OrderStatus | None = None,
        user_id: str | None = None,
    ) -> list[OrderRecord]:
        query = sa.select(orders_table).order_by(orders_table.c.created_at.desc(), orders_table.c.id.desc())
        if status is not None:
            query = query.where(orders_table.c.status == status.value)
        if user_id is not None:
            query = query.where(orders_table.c.user_id == user_id)

        with self.engine.connect() as conn:
            rows = conn.execute(query).mappings().all()

        return [
            OrderRecord(
                id=str(row["id"]),
                user_id=row["user_id"],
                total_amount_cents=row["total_amount_cents"],
                status=OrderStatus(row["status"]),
                delivery_info=row["delivery_info"] or {},
                metadata=row["metadata"] or {},
                created_at=_as_utc(row["created_at"]),
            )
            for row in rows
        ]

    def list_line_items(self, order_id: str) -> list[OrderLineItemRecord]:
        query = (
            sa.select(order_items_table)
            .where(order_items_table.c.order_id == int(order_id))
            .order_by(order_items_table.c.id)
        )

        with self.engine.connect() as conn:
            rows = conn.execute(query).mappings().all()

        return [
            OrderLineItemRecord(
                order_id=str(row["order_id"]),
                product_id=row["product_id"],
                product_name=row["product_name"],
                variant_id=row["variant_id"],
                variant_name=row["variant_name"],
                quantity=row["quantity"],
                price_per_item_cents=row["price_per_item_cents"],
            )
            for row in rows
        ]
