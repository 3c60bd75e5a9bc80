"""
Run the accounts_test workflow end to end against a PostgreSQL database:
create the table, populate it in one transaction, list the high balances,
then empty and drop it.

Two entry points share this module: `main` seeds the random balances from
the clock unless a seed is given, `main_seeded` always uses the fixed seed.
"""

from __future__ import annotations

import argparse
import logging
import random
import time
from typing import List, Optional

import psycopg2

from .config import CONFIG
from .accounts_table import (
    TABLE_NAME,
    create_table,
    drop_table,
    list_table_contents,
    populate_accounts_table,
)
from .database_manager import DatabaseError, DatabaseManager

logger = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def run(db: DatabaseManager, count: int, threshold: float, rng: random.Random) -> bool:
    """Execute create, populate, list and drop against an open connection."""
    if not create_table(db):
        logger.error(f"Creation of the {TABLE_NAME} table failed, no further functionality may be attempted.")
        return False

    populate_accounts_table(db, count=count, rng=rng)
    list_table_contents(db, threshold=threshold)
    return drop_table(db)


def build_parser() -> argparse.ArgumentParser:
    accounts = CONFIG['accounts']
    parser = argparse.ArgumentParser(description=f"Populate, list and drop the {TABLE_NAME} table.")
    parser.add_argument('--database-url', default=CONFIG['database']['dsn'],
                        help="Connection string, e.g. postgres://user@localhost:5432/dbname")
    parser.add_argument('--rows', type=int, default=accounts['row_count'],
                        help="Number of synthetic accounts to insert")
    parser.add_argument('--threshold', type=float, default=accounts['balance_threshold'],
                        help="List accounts with a balance greater than this")
    parser.add_argument('--seed', type=int, default=None,
                        help="Seed for the random balances (default: current Unix time)")
    parser.add_argument('--log-level', type=str.upper, choices=LOG_LEVELS,
                        default=CONFIG['app']['log_level'])
    return parser


def main(argv: Optional[List[str]] = None, default_seed: Optional[int] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format=CONFIG['app']['log_format']
    )

    seed = args.seed
    if seed is None:
        seed = default_seed if default_seed is not None else CONFIG['accounts']['random_seed']
    if seed is None:
        seed = int(time.time())
    rng = random.Random(seed)

    print(f"\n{'='*60}")
    print("ACCOUNTS TABLE DEMONSTRATION")
    print(f"{'='*60}")
    print(f"Rows to insert: {args.rows}")
    print(f"Balance threshold: {args.threshold}")
    print(f"Random seed: {seed}")
    print(f"{'='*60}\n")

    try:
        with DatabaseManager(args.database_url) as db:
            completed = run(db, args.rows, args.threshold, rng)
    except (DatabaseError, psycopg2.Error) as e:
        print(f"ERROR: {e}")
        return 1

    return 0 if completed else 1


def main_seeded(argv: Optional[List[str]] = None) -> int:
    """Same workflow with the fixed seed, so every run inserts the same balances."""
    return main(argv, default_seed=CONFIG['accounts']['fixed_seed'])


if __name__ == "__main__":
    raise SystemExit(main())
