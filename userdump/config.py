"""
Connection settings for the dump tool
Reads DATABASE_URL, or the discrete DB_* variables, from the environment
"""

import os

from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()

DEFAULT_SSLMODE = "disable"
DEFAULT_CONNECT_TIMEOUT = 10

# Each setting accepts the DB_* name first, then the legacy PG_* name.
_DISCRETE_VARS = {
    "host": ("DB_HOST", "PG_HOST"),
    "port": ("DB_PORT", "PG_PORT"),
    "user": ("DB_USER", "PG_USER"),
    "password": ("DB_PASS", "PG_PASSWORD"),
    "dbname": ("DB_NAME", "PG_DATABASE"),
}
_REQUIRED = ("host", "port", "user", "dbname")


def _env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def get_connect_timeout() -> int:
    raw = os.getenv("DB_CONNECT_TIMEOUT")
    if not raw:
        return DEFAULT_CONNECT_TIMEOUT
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"DB_CONNECT_TIMEOUT must be an integer, got {raw!r}")


def get_database_settings() -> dict[str, object]:
    """
    Build keyword arguments for psycopg2.connect

    DATABASE_URL wins when present. Otherwise DB_HOST, DB_PORT, DB_USER and
    DB_NAME are required; DB_PASS is optional and DB_SSLMODE defaults to
    "disable".
    """
    timeout = get_connect_timeout()

    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return {"dsn": database_url, "connect_timeout": timeout}

    settings = {key: _env(*names) for key, names in _DISCRETE_VARS.items()}
    missing = [_DISCRETE_VARS[key][0] for key in _REQUIRED if not settings[key]]
    if missing:
        raise ConfigError(
            "Missing required DB environment variables: "
            f"{', '.join(missing)}. Either set DATABASE_URL or DB_HOST, DB_PORT, "
            "DB_USER, DB_NAME (and optionally DB_PASS and DB_SSLMODE)"
        )

    settings["password"] = settings["password"] or ""
    settings["sslmode"] = os.getenv("DB_SSLMODE") or DEFAULT_SSLMODE
    settings["connect_timeout"] = timeout
    return settings


def describe_settings(settings: dict[str, object]) -> dict[str, object]:
    """Return a copy that is safe to log (no password, no URL credentials)."""
    safe = {k: v for k, v in settings.items() if k != "password"}
    dsn = safe.get("dsn")
    if isinstance(dsn, str) and "@" in dsn:
        scheme, _, rest = dsn.partition("://")
        safe["dsn"] = f"{scheme}://****@{rest.split('@', 1)[1]}"
    return safe
