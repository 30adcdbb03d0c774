"""FreshCart database management CLI.

Creates and drops the SQL schema of the freshcart domain. With the default
in-memory providers both commands are no-ops; set PROTEAN_ENV=production
(and DATABASE_URL) to target PostgreSQL.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py orphans    # List orders whose lines were never fully written
    python src/manage.py orphans --repair
"""

import argparse
import sys


def _init_domain():
    from freshcart.domain import freshcart
    from freshcart.utils.logging import configure_logging

    configure_logging()
    print("Initializing freshcart domain...")
    freshcart.init()
    return freshcart


def setup_database():
    from freshcart.utils.db import setup_db

    domain = _init_domain()
    print("Creating freshcart database schema...")
    tables = setup_db(domain)
    print(f"Done. {len(tables)} table(s) created.")


def drop_database():
    from freshcart.utils.db import drop_db

    domain = _init_domain()
    print("Dropping freshcart database schema...")
    tables = drop_db(domain)
    print(f"Done. {len(tables)} table(s) dropped.")


def report_orphans(repair=False):
    domain = _init_domain()
    from freshcart.order.placement import order_placement

    with domain.domain_context():
        orphans = order_placement.find_orphaned_orders()
        if not orphans:
            print("No orphaned orders.")
            return
        for order in orphans:
            print(f"  {order.id}  buyer={order.buyer_id}  expected_lines={order.line_count}")
            if repair:
                released = order_placement.repair_orphaned_order(order.id)
                print(f"    repaired, {released} reservation(s) released")


def main():
    parser = argparse.ArgumentParser(description="FreshCart database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    orphans_parser = subparsers.add_parser("orphans", help="List orders with missing lines")
    orphans_parser.add_argument("--repair", action="store_true", help="Delete them and release their stock")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "orphans":
        report_orphans(repair=args.repair)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
