"""
SQL literal formatting for dumped rows

Cells are classified once at the database boundary into a fixed set of
kinds, then each kind has exactly one literal form.
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, NamedTuple, Sequence

from .errors import SerializationError


class CellKind(Enum):
    NULL = "null"
    BOOL = "bool"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    OTHER = "other"


class Cell(NamedTuple):
    kind: CellKind
    value: Any


def to_cell(value: Any) -> Cell:
    """Classify a value returned by the driver."""
    if value is None:
        return Cell(CellKind.NULL, None)
    # bool before anything numeric: bool is an int subclass
    if isinstance(value, bool):
        return Cell(CellKind.BOOL, value)
    if isinstance(value, str):
        return Cell(CellKind.TEXT, value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Cell(CellKind.TEXT, bytes(value).decode("utf-8", errors="replace"))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return Cell(CellKind.TIMESTAMP, value.astimezone(timezone.utc))
    if isinstance(value, date):
        return Cell(
            CellKind.TIMESTAMP, datetime.combine(value, time(), tzinfo=timezone.utc)
        )
    return Cell(CellKind.OTHER, str(value))


def quote(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


def format_cell(cell: Cell) -> str:
    """Render a classified cell as a SQL literal."""
    kind = cell.kind
    if kind is CellKind.NULL:
        return "NULL"
    if kind is CellKind.BOOL:
        return "true" if cell.value else "false"
    if kind is CellKind.TEXT:
        return quote(cell.value)
    if kind is CellKind.TIMESTAMP:
        # %Y is not zero-padded below year 1000; microseconds are dropped
        v = cell.value
        return f"'{v.year:04d}-{v:%m-%dT%H:%M:%S}Z'"
    return quote(cell.value)


def sql_literal(value: Any) -> str:
    return format_cell(to_cell(value))


def insert_statement(table: str, columns: Sequence[str], values: Sequence[Any]) -> str:
    """
    Serialize one row as an INSERT line (newline included).

    Column names are written verbatim; they come from the driver's cursor
    description.
    """
    if len(columns) != len(values):
        raise SerializationError(
            f"{table}: {len(columns)} columns but {len(values)} values in row"
        )
    literals = ", ".join(sql_literal(v) for v in values)
    return f'INSERT INTO "{table}" ({", ".join(columns)}) VALUES ({literals});\n'
