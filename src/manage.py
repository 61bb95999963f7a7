"""Storefront maintenance CLI.

Creates and drops the order store schema and reports orphaned orders
(pending orders that never received their line items).

Usage:
    python src/manage.py setup-db                       # Create orders/order_items tables
    python src/manage.py drop-db                        # Drop them
    python src/manage.py detect-orphans --grace-minutes 30
"""

import argparse
import sys
from datetime import timedelta

from storefront.config import get_settings
from storefront.order.reconciliation import detect_orphaned_orders
from storefront.order.sql_adapter import SqlOrderStore
from storefront.utils.logging import configure_logging


def setup_database(database_uri: str) -> None:
    print(f"Creating order store schema at {database_uri}...")
    SqlOrderStore.from_uri(database_uri).create_schema()
    print("Done.")


def drop_database(database_uri: str) -> None:
    print(f"Dropping order store schema at {database_uri}...")
    SqlOrderStore.from_uri(database_uri).drop_schema()
    print("Done.")


def report_orphans(database_uri: str, grace_minutes: int) -> int:
    store = SqlOrderStore.from_uri(database_uri)
    orphans = detect_orphaned_orders(store, grace_period=timedelta(minutes=grace_minutes))

    if not orphans:
        print("No orphaned orders found.")
        return 0

    print(f"{len(orphans)} pending order(s) without line items:")
    for orphan in orphans:
        print(
            f"  #{orphan.order_id}  user={orphan.user_id}  email={orphan.user_email or '-'}"
            f"  total={orphan.total_amount_cents / 100:.2f}  created={orphan.created_at.isoformat()}"
        )
    return len(orphans)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Storefront maintenance")
    parser.add_argument(
        "--database-uri",
        default=settings.database_uri,
        help="Order store database URI (default: STOREFRONT_DATABASE_URI)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create the order store tables")
    subparsers.add_parser("drop-db", help="Drop the order store tables")

    orphans_parser = subparsers.add_parser("detect-orphans", help="List pending orders with no line items")
    orphans_parser.add_argument(
        "--grace-minutes",
        type=int,
        default=settings.orphan_grace_minutes,
        help="Ignore orders younger than this many minutes",
    )

    args = parser.parse_args(argv)
    configure_logging(settings.env, log_dir=settings.log_dir)

    if args.command == "setup-db":
        setup_database(args.database_uri)
    elif args.command == "drop-db":
        drop_database(args.database_uri)
    elif args.command == "detect-orphans":
        # Non-zero exit lets a scheduler alert on orphans
        return 1 if report_orphans(args.database_uri, args.grace_minutes) else 0
    else:
        parser.print_help()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
