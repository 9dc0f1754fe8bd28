"""
Database access for the dump tool
One read-only connection per run, scoped cursors per query
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import psycopg2
import psycopg2.extras

from .config import describe_settings, get_database_settings
from .errors import ConnectivityError

logger = logging.getLogger(__name__)


def _raw_text(value):
    return value


def connect(settings: Optional[dict] = None):
    """Open a read-only, autocommit connection."""
    if settings is None:
        settings = get_database_settings()

    logger.info(f"Connecting to database: {describe_settings(settings)}")
    try:
        conn = psycopg2.connect(**settings)
    except psycopg2.Error as e:
        raise ConnectivityError(f"Failed to connect to database: {e}") from e

    # Autocommit keeps a failed table query from aborting the next one.
    conn.set_session(readonly=True, autocommit=True)
    register_raw_json(conn)
    return conn


def register_raw_json(conn) -> None:
    """Make json/jsonb columns come back as their text form on this connection."""
    psycopg2.extras.register_default_json(conn, loads=_raw_text)
    psycopg2.extras.register_default_jsonb(conn, loads=_raw_text)


@contextmanager
def get_db_connection(settings: Optional[dict] = None) -> Iterator[Any]:
    """
    Context manager for the dump connection

    Usage:
        with get_db_connection() as conn:
            user_id, text = dump_user(conn, identifier)
    """
    conn = connect(settings)
    try:
        yield conn
    finally:
        conn.close()
        logger.debug("Database connection closed")


@contextmanager
def get_db_cursor(conn) -> Iterator[Any]:
    """
    Context manager for a cursor on an open connection

    Usage:
        with get_db_cursor(conn) as cursor:
            cursor.execute("SELECT ...", (param,))
            row = cursor.fetchone()
    """
    cursor = conn.cursor()
    try:
        yield cursor
    finally:
        cursor.close()


def fetch_one(conn, query: str, params: tuple = None) -> Optional[tuple]:
    """Execute a query and fetch one result"""
    with get_db_cursor(conn) as cursor:
        cursor.execute(query, params)
        return cursor.fetchone()


def column_names(cursor) -> list[str]:
    """Column names of the last executed query, in result order."""
    return [col[0] for col in cursor.description or ()]
