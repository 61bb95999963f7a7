"""Integration tests for the SQLAlchemy order store on SQLite."""

from datetime import UTC, datetime, timedelta

import pytest
import sqlalchemy as sa

from storefront.checkout.submission import FailureKind, OrderSubmission
from storefront.exceptions import StoreWriteError
from storefront.order.reconciliation import detect_orphaned_orders
from storefront.order.records import OrderLineItemRecord, OrderRecord, OrderStatus
from storefront.order.sql_adapter import SqlOrderStore, order_items_table, orders_table

SWORD = {"id": 1, "title": "Diamond Sword", "category": "weapons"}
SWORD_VARIANT = {"id": "1-default", "title": "Standard", "price_in_cents": 1500}


@pytest.fixture()
def sql_store(tmp_path):
    store = SqlOrderStore.from_uri(f"sqlite:///{tmp_path / 'orders.db'}")
    store.create_schema()
    yield store
    store.drop_schema()
    store.engine.dispose()


def _line_item(order_id, **overrides):
    values = {
        "order_id": order_id,
        "product_id": "1",
        "product_name": "Diamond Sword",
        "variant_id": "1-default",
        "variant_name": "Standard",
        "quantity": 2,
        "price_per_item_cents": 1500,
    }
    values.update(overrides)
    return OrderLineItemRecord(**values)


class TestInsertOrder:
    def test_assigns_id_and_timestamp(self, sql_store):
        order = sql_store.insert_order(
            OrderRecord(
                user_id="user-001",
                total_amount_cents=3000,
                delivery_info={"nickname": "Steve"},
                metadata={"user_email": "steve@example.com"},
            )
        )

        assert order.id is not None
        assert order.created_at is not None

        stored = sql_store.list_orders()[0]
        assert stored.id == order.id
        assert stored.status == OrderStatus.PENDING
        assert stored.delivery_info == {"nickname": "Steve"}
        assert stored.metadata == {"user_email": "steve@example.com"}
        assert stored.created_at.tzinfo is not None

    def test_ids_are_distinct(self, sql_store):
        first = sql_store.insert_order(OrderRecord(user_id="u", total_amount_cents=0))
        second = sql_store.insert_order(OrderRecord(user_id="u", total_amount_cents=0))

        assert first.id != second.id

    def test_missing_table_raises_store_write_error(self, sql_store):
        sql_store.drop_schema()

        with pytest.raises(StoreWriteError) as exc:
            sql_store.insert_order(OrderRecord(user_id="u", total_amount_cents=0))

        assert "orders" in exc.value.messages


class TestInsertLineItems:
    def test_batch_insert(self, sql_store):
        order = sql_store.insert_order(OrderRecord(user_id="u", total_amount_cents=0))

        sql_store.insert_line_items([_line_item(order.id), _line_item(order.id, variant_id="2-default")])

        assert [item.variant_id for item in sql_store.list_line_items(order.id)] == ["1-default", "2-default"]

    def test_empty_batch_is_a_no_op(self, sql_store):
        sql_store.insert_line_items([])

        with sql_store.engine.connect() as conn:
            assert conn.execute(sa.select(sa.func.count()).select_from(order_items_table)).scalar() == 0

    def test_non_numeric_order_id_raises_store_write_error(self, sql_store):
        with pytest.raises(StoreWriteError) as exc:
            sql_store.insert_line_items([_line_item("not-a-number")])

        assert "order_items" in exc.value.messages

    def test_failed_line_items_leave_order_in_place(self, sql_store):
        order = sql_store.insert_order(OrderRecord(user_id="u", total_amount_cents=3000))
        with sql_store.engine.begin() as conn:
            conn.execute(sa.text("DROP TABLE order_items"))

        with pytest.raises(StoreWriteError):
            sql_store.insert_line_items([_line_item(order.id)])

        with sql_store.engine.connect() as conn:
            assert conn.execute(sa.select(orders_table.c.id)).scalars().all() == [int(order.id)]


class TestListOrders:
    def test_filters(self, sql_store):
        sql_store.insert_order(OrderRecord(user_id="user-001", total_amount_cents=0))
        completed = sql_store.insert_order(
            OrderRecord(user_id="user-002", total_amount_cents=0, status=OrderStatus.COMPLETED)
        )

        assert [o.id for o in sql_store.list_orders(status=OrderStatus.COMPLETED)] == [completed.id]
        assert [o.id for o in sql_store.list_orders(user_id="user-002")] == [completed.id]

    def test_newest_first(self, sql_store):
        first = sql_store.insert_order(OrderRecord(user_id="u", total_amount_cents=0))
        second = sql_store.insert_order(OrderRecord(user_id="u", total_amount_cents=0))

        assert [o.id for o in sql_store.list_orders()] == [second.id, first.id]


class TestSubmissionAgainstSql:
    def test_successful_submission(self, sql_store, cart, identity):
        cart.add_item(SWORD, SWORD_VARIANT, 2)

        result = OrderSubmission(cart, sql_store, identity).submit({"nickname": "Steve"})

        assert result.success is True
        items = sql_store.list_line_items(result.order_id)
        assert [(i.product_id, i.quantity, i.price_per_item_cents) for i in items] == [("1", 2, 1500)]

    def test_orphan_is_detected(self, sql_store, cart, identity):
        cart.add_item(SWORD, SWORD_VARIANT)
        with sql_store.engine.begin() as conn:
            conn.execute(sa.text("DROP TABLE order_items"))

        result = OrderSubmission(cart, sql_store, identity).submit({"nickname": "Steve"})
        assert result.kind == FailureKind.LINE_ITEM_CREATE

        order_items_table.create(sql_store.engine)
        orphans = detect_orphaned_orders(sql_store, as_of=datetime.now(UTC) + timedelta(hours=1))

        assert [orphan.order_id for orphan in orphans] == [result.order_id]
        assert len(cart) == 1
