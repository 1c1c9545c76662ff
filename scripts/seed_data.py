#!/usr/bin/env python3
"""
Reset the inventory database and fill it with a simulated year of data.

Rows are entered through the message bus, so movement events are published
to Redis like any other entry (publishing is skipped quietly when Redis is
not running).

Usage:
    # Fresh database with transfers, ending today
    python scripts/seed_data.py --reset

    # Reproducible data set ending on a fixed date, no transfers
    python scripts/seed_data.py --reset --seed 42 --base-date 2024-06-30 --no-transfers
"""

import argparse
import logging
import random
from datetime import date

from reagent_inventory.adapters import orm
from reagent_inventory.service_layer.unit_of_work import DEFAULT_ENGINE, SqlAlchemyUnitOfWork
from reagent_inventory.services import sample_data

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the reagent inventory database with sample data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --reset
  %(prog)s --reset --seed 42 --base-date 2024-06-30 --no-transfers
        """
    )

    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate all tables before seeding"
    )

    parser.add_argument(
        "--no-transfers",
        action="store_true",
        help="Leave out transfers between sites"
    )

    parser.add_argument(
        "--base-date",
        type=date.fromisoformat,
        default=None,
        help="Last day of the simulated year, YYYY-MM-DD (default: today)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible data set"
    )

    args = parser.parse_args()

    orm.start_mappers()
    if args.reset:
        sample_data.reset_database(DEFAULT_ENGINE)
    else:
        orm.metadata.create_all(DEFAULT_ENGINE)

    plan = sample_data.build_sample_plan(
        base_date=args.base_date or date.today(),
        rng=random.Random(args.seed),
        include_transfers=not args.no_transfers,
    )
    counts = sample_data.seed(plan, SqlAlchemyUnitOfWork())

    for table, count in counts.items():
        print(f"  {table:<18} {count}")


if __name__ == "__main__":
    main()
