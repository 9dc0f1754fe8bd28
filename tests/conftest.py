import os

import pytest


class FakeCursor:
    """Stand-in for a psycopg2 cursor.

    `responses` maps query text to either an exception instance (raised on
    execute) or a `(columns, rows)` pair.
    """

    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self._rows = []
        self.closed = False

    def execute(self, sql, params=None):
        self.conn.executed.append((sql, params))
        response = self.conn.responses.get(sql)
        if response is None:
            raise AssertionError(f"unexpected query: {sql}")
        if callable(response):
            response = response(params)
        if isinstance(response, Exception):
            raise response
        columns, rows = response
        self.description = [(name,) for name in columns]
        self._rows = list(rows)

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def __iter__(self):
        while self._rows:
            yield self._rows.pop(0)

    def close(self):
        self.closed = True
        self.conn.open_cursors -= 1


class FakeConnection:
    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.executed = []
        self.cursors = []
        self.open_cursors = 0
        self.max_open_cursors = 0
        self.closed = False

    def cursor(self):
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        self.open_cursors += 1
        self.max_open_cursors = max(self.max_open_cursors, self.open_cursors)
        return cursor

    def set_session(self, **kwargs):
        self.session = kwargs

    def close(self):
        self.closed = True


@pytest.fixture
def fake_conn():
    def _make(responses=None):
        return FakeConnection(responses)

    return _make


@pytest.fixture
def db_connection():
    """Provide a DB connection for integration tests. Tests that depend on
    an actual database are skipped by default and require the environment
    variable `RUN_DB_INTEGRATION=1` to be set.
    """
    if os.getenv("RUN_DB_INTEGRATION") != "1":
        pytest.skip(
            "DB integration tests disabled (set RUN_DB_INTEGRATION=1 to enable)"
        )

    import psycopg2

    from userdump.config import get_database_settings
    from userdump.database import register_raw_json

    conn = psycopg2.connect(**get_database_settings())
    register_raw_json(conn)
    try:
        yield conn
    finally:
        conn.rollback()
        conn.close()
