"""Export one user's rows from Postgres as replayable INSERT statements."""

from .dump import TABLE_SPECS, TableSpec, dump_user
from .errors import DumpError

__all__ = ["TABLE_SPECS", "TableSpec", "dump_user", "DumpError"]

__version__ = "0.1.0"
