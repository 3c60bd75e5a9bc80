"""Shared fixtures: a scripted stand-in for a psycopg2 connection, and a real one when available."""

import os
from types import SimpleNamespace

import pytest

from accounts_pg.database_manager import DatabaseManager


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.description = None
        self.rowcount = -1
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def execute(self, sql, params=None):
        self.connection.executed.append((" ".join(sql.split()), params))
        response = self.connection.respond(sql, params)
        if isinstance(response, Exception):
            raise response
        columns, rows, rowcount = response
        self.description = [SimpleNamespace(name=name) for name in columns] if columns else None
        self._rows = list(rows)
        self.rowcount = rowcount

    def fetchall(self):
        return self._rows


class FakeConnection:
    """Answers statements by keyword; unmatched statements succeed with no result set."""

    def __init__(self):
        self.autocommit = False
        self.closed = False
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.info = SimpleNamespace(dbname='fake_db')
        self._handlers = []

    def on(self, keyword, response):
        """Register a response for statements containing `keyword`.

        `response` is an exception to raise, a (columns, rows, rowcount)
        tuple, or a callable taking (sql, params) and returning either.
        """
        self._handlers.append((keyword.upper(), response))

    def respond(self, sql, params):
        normalized = " ".join(sql.split()).upper()
        for keyword, response in self._handlers:
            if keyword in normalized:
                if callable(response) and not isinstance(response, Exception):
                    return response(sql, params)
                return response
        return (None, [], 0)

    def cursor(self):
        return FakeCursor(self)

    def set_client_encoding(self, encoding):
        self.encoding = encoding

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True

    def statements(self, keyword):
        return [sql for sql, _ in self.executed if keyword.upper() in sql.upper()]


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def fake_db(fake_connection):
    db = DatabaseManager('postgres://tester@localhost:5432/fake_db')
    db.connection = fake_connection
    fake_connection.autocommit = True
    return db


@pytest.fixture
def pg_db():
    """A live DatabaseManager on TEST_DATABASE_URL with no accounts table left behind."""
    dsn = os.getenv('TEST_DATABASE_URL')
    if not dsn:
        pytest.skip("TEST_DATABASE_URL is not set")
    with DatabaseManager(dsn) as db:
        db.execute("DROP TABLE IF EXISTS accounts_test")
        yield db
        db.execute("DROP TABLE IF EXISTS accounts_test")
