import psycopg2
import pytest

from userdump import database
from userdump.errors import ConnectivityError


def test_connect_sets_read_only_autocommit(monkeypatch, fake_conn):
    conn = fake_conn()
    seen = {}

    def fake_connect(**kwargs):
        seen.update(kwargs)
        return conn

    monkeypatch.setattr(database.psycopg2, "connect", fake_connect)
    monkeypatch.setattr(database.psycopg2.extras, "register_default_json", lambda *a, **k: None)
    monkeypatch.setattr(database.psycopg2.extras, "register_default_jsonb", lambda *a, **k: None)

    assert database.connect({"dsn": "postgresql://host/db"}) is conn
    assert seen == {"dsn": "postgresql://host/db"}
    assert conn.session == {"readonly": True, "autocommit": True}


def test_connect_fetches_json_as_raw_text(monkeypatch, fake_conn):
    conn = fake_conn()
    registered = {}

    def recorder(name):
        def register(conn_or_curs=None, globally=False, loads=None):
            registered[name] = (conn_or_curs, globally, loads)

        return register

    monkeypatch.setattr(database.psycopg2, "connect", lambda **kwargs: conn)
    monkeypatch.setattr(database.psycopg2.extras, "register_default_json", recorder("json"))
    monkeypatch.setattr(database.psycopg2.extras, "register_default_jsonb", recorder("jsonb"))

    database.connect({"dsn": "postgresql://host/db"})

    assert set(registered) == {"json", "jsonb"}
    for target, globally, loads in registered.values():
        assert target is conn
        assert not globally
        assert loads is database._raw_text
    assert database._raw_text('{"k": "it\'s"}') == '{"k": "it\'s"}'


def test_connect_failure_is_connectivity_error(monkeypatch):
    def refuse(**kwargs):
        raise psycopg2.OperationalError("connection refused")

    monkeypatch.setattr(database.psycopg2, "connect", refuse)
    with pytest.raises(ConnectivityError):
        database.connect({"dsn": "postgresql://host/db"})


def test_get_db_connection_closes_on_error(monkeypatch, fake_conn):
    conn = fake_conn()
    monkeypatch.setattr(database, "connect", lambda settings=None: conn)

    with pytest.raises(RuntimeError):
        with database.get_db_connection():
            raise RuntimeError("boom")
    assert conn.closed


def test_fetch_one_and_column_names(fake_conn):
    conn = fake_conn({"SELECT 1": (["one"], [(1,)])})
    assert database.fetch_one(conn, "SELECT 1") == (1,)
    assert conn.cursors[0].closed

    with database.get_db_cursor(conn) as cursor:
        cursor.execute("SELECT 1")
        assert database.column_names(cursor) == ["one"]
