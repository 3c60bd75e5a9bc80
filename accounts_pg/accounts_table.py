"""
Operations on the accounts_test table: create, populate, list and drop.

Every function takes the open DatabaseManager as its first argument; nothing
here holds a connection of its own.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

import psycopg2

from .config import CONFIG
from .database_manager import (
    DatabaseError,
    DatabaseManager,
    StatementError,
    TransactionError,
    TUPLES_OK,
)

logger = logging.getLogger(__name__)

TABLE_NAME = CONFIG['accounts']['table']

CREATE_TABLE_SQL = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        id SERIAL PRIMARY KEY,
        user_name VARCHAR(100) NOT NULL UNIQUE,
        balance NUMERIC(5,2) NOT NULL DEFAULT 0,
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP
    )
"""

INSERT_ACCOUNT_SQL = f"""
    INSERT INTO {TABLE_NAME} (user_name, balance, created_at, updated_at)
    VALUES (%(user_name)s, %(balance)s, %(now)s, %(now)s)
    RETURNING id
"""

SELECT_ACCOUNTS_SQL = f"""
    SELECT id, user_name, balance, created_at, updated_at
    FROM {TABLE_NAME}
    WHERE balance > %s
"""

DELETE_ACCOUNTS_SQL = f"DELETE FROM {TABLE_NAME}"
DROP_TABLE_SQL = f"DROP TABLE {TABLE_NAME}"

# Balances are drawn in whole cents from [0, 1000)
BALANCE_CENTS_LIMIT = 100000
CENT = Decimal('0.01')


@dataclass
class NewAccount:
    """A synthetic row waiting to be inserted; id is set from RETURNING id"""
    user_name: str
    balance: Decimal
    timestamp: datetime
    id: Optional[int] = None


@dataclass
class AccountRecord:
    """A row read back from the table"""
    id: int
    user_name: str
    balance: float
    created_at: str
    updated_at: str


def format_date_time(value: datetime) -> str:
    return value.strftime('%Y-%m-%d %H:%M:%S')


def make_user_name(index: int) -> str:
    return f"email.{index:05d}@nowhere.com"


def make_account(index: int, rng: random.Random, now: Optional[datetime] = None) -> NewAccount:
    """Build the synthetic account for sequence number `index`."""
    balance = (Decimal(rng.randrange(BALANCE_CENTS_LIMIT)) / 100).quantize(CENT)
    timestamp = (now or datetime.now()).replace(microsecond=0)
    return NewAccount(user_name=make_user_name(index), balance=balance, timestamp=timestamp)


def decode_row(row) -> AccountRecord:
    """Convert a (id, user_name, balance, created_at, updated_at) row to an AccountRecord."""
    account_id, user_name, balance, created_at, updated_at = row
    return AccountRecord(
        id=int(account_id),
        user_name=str(user_name),
        balance=float(balance),
        created_at=format_date_time(created_at) if created_at is not None else '',
        updated_at=format_date_time(updated_at) if updated_at is not None else '',
    )


# ============================================================================
# TABLE LIFECYCLE
# ============================================================================

def create_table(db: DatabaseManager) -> bool:
    """
    Create the accounts table if it does not already exist.

    Returns False (after logging the reason) when the statement fails; the
    caller must not go on to populate or query the table in that case.
    """
    try:
        db.execute(CREATE_TABLE_SQL)
    except StatementError as e:
        logger.error(f"Table creation failed. Status: {e.status}, Reason: {e.message}")
        return False
    logger.info(f"The {TABLE_NAME} table was successfully created.")
    return True


def empty_table(db: DatabaseManager) -> bool:
    """Delete every row of the accounts table."""
    try:
        result = db.execute(DELETE_ACCOUNTS_SQL)
    except StatementError as e:
        logger.error(f"Delete table records failed. Reason: {e.message}")
        return False
    logger.info(f"Table records successfully deleted ({result.rowcount} rows).")
    return True


def drop_table(db: DatabaseManager) -> bool:
    """Empty the accounts table and then drop it. The drop only runs if the delete succeeded."""
    if not empty_table(db):
        return False
    try:
        db.execute(DROP_TABLE_SQL)
    except StatementError as e:
        logger.error(f"Drop table failed. Reason: {e.message}")
        return False
    logger.info("Table successfully dropped.")
    return True


# ============================================================================
# TRANSACTIONAL INSERT
# ============================================================================

def insert_accounts(db: DatabaseManager, accounts: Iterable[NewAccount]) -> List[NewAccount]:
    """
    Insert accounts in a single transaction, all or nothing.

    Args:
        db: Open database manager
        accounts: Rows to insert, consumed inside the transaction; each gets
            its database id on success

    Returns:
        The inserted accounts, with ids filled in

    Raises:
        TransactionError: an insert (or the commit) failed and the batch was rolled back
    """
    logger.info("Starting the create records transaction.")
    inserted = []
    try:
        with db.transaction():
            for account in accounts:
                logger.debug(
                    f"Creating Account: email={account.user_name}, balance={account.balance:.2f}"
                )
                result = db.execute(INSERT_ACCOUNT_SQL, {
                    'user_name': account.user_name,
                    'balance': account.balance,
                    'now': account.timestamp,
                })
                if result.status != TUPLES_OK:
                    raise StatementError(result.status, "Failed to create database row")
                account.id = result.rows[0][0]
                inserted.append(account)
    except (DatabaseError, psycopg2.Error) as e:
        for account in inserted:
            account.id = None
        raise TransactionError(f"Create records transaction rolled back: {e}") from e

    logger.info(f"Create records transaction successfully committed ({len(inserted)} rows).")
    return inserted


def populate_accounts_table(db: DatabaseManager, count: int = 1000,
                            rng: Optional[random.Random] = None) -> List[NewAccount]:
    """Insert `count` synthetic accounts with random balances in one transaction.

    Each account is built as it is inserted, so its timestamp is the time of its own insert.
    """
    rng = rng or random.Random()
    return insert_accounts(db, (make_account(index, rng) for index in range(count)))


# ============================================================================
# FILTERED QUERY
# ============================================================================

def list_table_contents(db: DatabaseManager, threshold: float = 500.0) -> List[AccountRecord]:
    """
    Print and return the accounts whose balance is greater than `threshold`.

    Raises:
        StatementError: the select failed
    """
    try:
        result = db.execute(SELECT_ACCOUNTS_SQL, (threshold,))
    except StatementError as e:
        logger.error(f"RESULT: {e.status}")
        raise StatementError(e.status, f"Select failed. Reason: {e.message}") from e

    logger.info(f"RESULT: {result.status}")
    for index, name in enumerate(result.columns):
        logger.info(f"{index}: {name}")
    logger.info(f"Column Names: {', '.join(result.columns)}")

    records = []
    for row in result.rows:
        record = decode_row(row)
        print(f"ROW: id={record.id}, email='{record.user_name}', balance={record.balance:.2f}, "
              f"created_at={record.created_at}, updated_at={record.updated_at}")
        records.append(record)

    print(f"Listed {len(records)} records with a balance greater than {threshold}.")
    return records
