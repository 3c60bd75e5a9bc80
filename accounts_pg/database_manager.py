"""
Database Manager for the accounts_test demonstration
Wraps a single psycopg2 connection: statement execution with result status
inspection, and explicit transactions with rollback on failure
"""

import psycopg2
from psycopg2 import errorcodes
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union
import logging

logger = logging.getLogger(__name__)

# Result statuses for statements that completed successfully
COMMAND_OK = 'COMMAND_OK'
TUPLES_OK = 'TUPLES_OK'


class DatabaseError(Exception):
    """Base class for failures reported by DatabaseManager"""


class StatementError(DatabaseError):
    """A statement did not complete; carries the status name and server message"""

    def __init__(self, status: str, message: str):
        super().__init__(f"{message} (status: {status})")
        self.status = status
        self.message = message


class TransactionError(DatabaseError):
    """A transaction was rolled back"""


@dataclass
class StatementResult:
    """Outcome of a successfully executed statement"""
    status: str
    columns: List[str] = field(default_factory=list)
    rows: List[Tuple[Any, ...]] = field(default_factory=list)
    rowcount: int = -1


def error_status_name(error: psycopg2.Error) -> str:
    """Return the symbolic SQLSTATE name for a driver error (e.g. UNIQUE_VIOLATION)."""
    if error.pgcode:
        try:
            return errorcodes.lookup(error.pgcode)
        except KeyError:
            # Custom ERRCODEs and codes newer than psycopg2's table
            return error.pgcode
    return type(error).__name__


def error_message(error: psycopg2.Error) -> str:
    message = error.pgerror or str(error)
    return message.strip()


class DatabaseManager:
    """Database manager with context manager support for connection handling"""

    def __init__(self, dsn: str, **kwargs):
        """
        Initialize database manager

        Args:
            dsn: URL-style connection string (postgres://user@host:port/database)
            **kwargs: Extra keyword arguments passed through to psycopg2.connect
        """
        self.config = {'dsn': dsn, **kwargs}
        self.connection = None

    def __enter__(self):
        """Context manager entry"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()
        return False

    def connect(self):
        """Establish database connection"""
        try:
            self.connection = psycopg2.connect(**self.config)
            self.connection.set_client_encoding('UTF8')
            # Every statement commits on its own unless it runs inside transaction()
            self.connection.autocommit = True
            logger.info(f"Connected to database: {self.connection.info.dbname}")
        except Exception as e:
            logger.error(f"Failed to connect to database: {str(e)}")
            raise

    def close(self):
        """Close database connection"""
        if self.connection:
            self.connection.close()
            self.connection = None
            logger.info("Database connection closed")

    def commit(self):
        """Commit transaction"""
        if self.connection:
            self.connection.commit()

    def rollback(self):
        """Rollback transaction"""
        if self.connection:
            self.connection.rollback()

    # ========================================================================
    # STATEMENT EXECUTION
    # ========================================================================

    def execute(self, sql: str,
                params: Optional[Union[Sequence[Any], Mapping[str, Any]]] = None) -> StatementResult:
        """
        Execute a single statement with positional parameters

        Args:
            sql: Statement text with %s placeholders
            params: Values bound to %s placeholders by position, or a mapping for %(name)s

        Returns:
            StatementResult with TUPLES_OK and the fetched rows when the
            statement produced a result set, COMMAND_OK otherwise

        Raises:
            StatementError: the server rejected the statement
        """
        try:
            with self.connection.cursor() as cursor:
                cursor.execute(sql, params)
                if cursor.description is None:
                    return StatementResult(status=COMMAND_OK, rowcount=cursor.rowcount)
                columns = [column.name for column in cursor.description]
                return StatementResult(
                    status=TUPLES_OK,
                    columns=columns,
                    rows=cursor.fetchall(),
                    rowcount=cursor.rowcount,
                )
        except psycopg2.Error as e:
            raise StatementError(error_status_name(e), error_message(e)) from e

    @contextmanager
    def transaction(self):
        """
        Run the enclosed statements in one transaction

        Commits on normal exit. Any exception rolls the transaction back and
        is re-raised unchanged.
        """
        self.connection.autocommit = False
        try:
            yield self
            self.commit()
        except Exception:
            logger.warning("Exception caught, rolling back transaction")
            self.rollback()
            raise
        finally:
            self.connection.autocommit = True

    # ========================================================================
    # SCHEMA
    # ========================================================================

    def table_exists(self, table_name: str) -> bool:
        """Return True if a table exists in the current schema."""
        result = self.execute(
            """
            SELECT EXISTS (
                SELECT 1
                FROM information_schema.tables
                WHERE table_schema = current_schema()
                  AND table_name = %s
            )
            """,
            (table_name,)
        )
        return bool(result.rows[0][0])
