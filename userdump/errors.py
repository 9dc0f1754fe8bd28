"""Errors raised while resolving and dumping a user."""


class DumpError(Exception):
    """Base class for every failure the dump tool reports."""


class UsageError(DumpError):
    """Conflicting or missing identifier options."""


class ConfigError(DumpError):
    """Connection settings are missing from the environment."""


class ConnectivityError(DumpError):
    """The database could not be reached or queried."""


class NotFoundError(DumpError):
    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Could not find {kind} {value} in the database.")


class TableQueryError(DumpError):
    """A single table's query failed; other tables are unaffected."""

    def __init__(self, table: str, cause: Exception):
        self.table = table
        self.cause = cause
        super().__init__(f"{table}: {cause}")


class SerializationError(DumpError):
    """Column and value counts disagree for a row."""
