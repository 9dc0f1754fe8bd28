"""
User dump pipeline

Resolve an identifier to a user id, run the fixed per-table queries and
render every row as an INSERT statement.
"""

import logging
from typing import Iterable, Iterator, NamedTuple, Optional, Sequence

import psycopg2

from .database import column_names, fetch_one, get_db_cursor
from .errors import (
    ConnectivityError,
    NotFoundError,
    TableQueryError,
    UsageError,
)
from .sql_literals import insert_statement

logger = logging.getLogger(__name__)

USER_ID = "user_id"
ACCOUNT_ID = "account_id"


class TableSpec(NamedTuple):
    name: str
    query: str


class Identifier(NamedTuple):
    kind: str
    value: str


class TableDump(NamedTuple):
    table: str
    text: str
    rows: int
    error: Optional[TableQueryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# Every query is keyed by the resolved user id, accounts included.
TABLE_SPECS: tuple[TableSpec, ...] = tuple(
    sorted(
        (
            TableSpec("accounts", "SELECT * FROM accounts WHERE user_id = %s"),
            TableSpec("users", "SELECT * FROM users WHERE id = %s"),
            TableSpec(
                "app_auth_tokens", "SELECT * FROM app_auth_tokens WHERE user_id = %s"
            ),
            TableSpec(
                "user_identities", "SELECT * FROM user_identities WHERE user_id = %s"
            ),
            TableSpec(
                "user_preferences",
                "SELECT * FROM user_preferences WHERE user_id = %s",
            ),
        ),
        key=lambda spec: spec.name,
    )
)

USER_EXISTS_QUERY = "SELECT id FROM users WHERE id = %s"
ACCOUNT_USER_QUERY = "SELECT user_id FROM accounts WHERE id = %s"


def choose_identifier(
    user_id: Optional[str] = None,
    account_id: Optional[str] = None,
    positional: Sequence[str] = (),
) -> Identifier:
    """Pick the single identifier the caller supplied. Never touches the database."""
    if (user_id and account_id) or (positional and (user_id or account_id)):
        raise UsageError(
            "Provide either --user_id or --account_id, not both. Or pass a "
            "positional argument (assumed to be user_id by default)."
        )
    if user_id:
        return Identifier(USER_ID, user_id)
    if account_id:
        return Identifier(ACCOUNT_ID, account_id)
    if len(positional) == 1:
        return Identifier(USER_ID, positional[0])
    if len(positional) > 1:
        raise UsageError(f"Expected one positional user_id, got {len(positional)}")
    raise UsageError("No identifier given: pass a user_id or use --account_id")


def _lookup(conn, query: str, identifier: Identifier) -> Optional[tuple]:
    try:
        return fetch_one(conn, query, (identifier.value,))
    except psycopg2.DataError as e:
        # e.g. "abc" against an integer key: no such row can exist
        logger.debug(f"Rejected {identifier.kind} {identifier.value!r}: {e}")
        return None
    except psycopg2.Error as e:
        raise ConnectivityError(
            f"Failed to look up {identifier.kind} {identifier.value}: {e}"
        ) from e


def resolve_user_id(conn, identifier: Identifier) -> str:
    """Return the canonical user id, or raise NotFoundError."""
    if identifier.kind == ACCOUNT_ID:
        row = _lookup(conn, ACCOUNT_USER_QUERY, identifier)
        if row is None or row[0] is None:
            raise NotFoundError(ACCOUNT_ID, identifier.value)
        user_id = str(row[0])
        logger.info(f"Resolved account_id {identifier.value} to user_id {user_id}")
        return user_id

    row = _lookup(conn, USER_EXISTS_QUERY, identifier)
    if row is None:
        raise NotFoundError(USER_ID, identifier.value)
    return identifier.value


def dump_table(conn, spec: TableSpec, user_id: str) -> TableDump:
    """Run one table's query and serialize every row it returns."""
    lines = []
    try:
        with get_db_cursor(conn) as cursor:
            cursor.execute(spec.query, (user_id,))
            columns = column_names(cursor)
            for row in cursor:
                lines.append(insert_statement(spec.name, columns, row))
    except psycopg2.Error as e:
        return TableDump(spec.name, "", 0, TableQueryError(spec.name, e))

    logger.debug(f"{spec.name}: {len(lines)} row(s)")
    return TableDump(spec.name, "".join(lines), len(lines))


def dump_tables(
    conn, user_id: str, specs: Iterable[TableSpec] = TABLE_SPECS
) -> Iterator[TableDump]:
    for spec in specs:
        yield dump_table(conn, spec, user_id)


def render_dump(results: Iterable[TableDump], fail_fast: bool = False) -> str:
    """Join per-table blocks, skipping (or raising on) failed tables."""
    out = []
    for result in results:
        if not result.ok:
            if fail_fast:
                raise result.error from result.error.cause
            logger.warning(
                f"Skipping table {result.table} due to error: {result.error.cause}"
            )
            continue
        out.append(f"-- Insert for {result.table}\n")
        out.append(result.text)
        out.append("\n")
    return "".join(out)


def dump_user(
    conn,
    identifier: Identifier,
    specs: Iterable[TableSpec] = TABLE_SPECS,
    fail_fast: bool = False,
) -> tuple[str, str]:
    """Resolve the identifier and dump every table. Returns (user_id, sql_text)."""
    user_id = resolve_user_id(conn, identifier)
    logger.info(f"Dumping rows for user_id {user_id}")
    text = render_dump(dump_tables(conn, user_id, specs), fail_fast=fail_fast)
    return user_id, text


def dump_filename(user_id: str) -> str:
    return f"user_{user_id}_dump.sql"


def write_dump(text: str, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
