import sqlite3

import pytest

from dbcontroller import DriverError, ErrorInfo, UnsupportedDriverError
from dbcontroller.infra.db import DRIVERS, Driver, DsnParams, register_driver, resolve_driver


@pytest.mark.parametrize("version,module,paramstyle", [
    ("mysql", "pymysql", "pyformat"),
    ("PGSQL", "psycopg", "pyformat"),
    ("postgresql", "psycopg", "pyformat"),
    ("odbc", "pyodbc", "qmark"),
    ("sqlite", "sqlite3", "named"),
])
def test_resolve_driver(version, module, paramstyle):
    driver = resolve_driver(version)
    assert (driver.module, driver.paramstyle) == (module, paramstyle)


def test_resolve_unknown_version():
    with pytest.raises(UnsupportedDriverError, match="nosuchdb"):
        resolve_driver("nosuchdb")


def test_missing_library_uses_fallback(monkeypatch):
    missing = Driver("sqlsrv", "dbcontroller_absent_driver", "pyformat", None, "SELECT 0", fallback="odbc")
    monkeypatch.setitem(DRIVERS, "sqlsrv", missing)
    assert resolve_driver("sqlsrv") is DRIVERS["odbc"]


def test_missing_library_raises_on_open():
    driver = Driver("ghost", "dbcontroller_absent_driver", "named", None, "SELECT 0")
    assert not driver.is_installed()
    with pytest.raises(UnsupportedDriverError, match="not installed"):
        driver.open(DsnParams("ghost", None, None, None), None, None)


def test_register_driver(monkeypatch):
    monkeypatch.setattr("dbcontroller.infra.db.drivers.DRIVERS", dict(DRIVERS))
    from dbcontroller.infra.db import drivers

    custom = Driver("lite", "sqlite3", "named", lambda m, p, u, pw: m.connect(":memory:"), "SELECT 0")
    register_driver(" Lite ", custom)
    assert drivers.DRIVERS["lite"] is custom
    assert drivers.resolve_driver("LITE") is custom


def test_open_wraps_driver_errors(tmp_path):
    driver = DRIVERS["sqlite"]
    with pytest.raises(DriverError) as excinfo:
        driver.open(DsnParams("sqlite", None, None, str(tmp_path / "no" / "such" / "dir.db")), None, None)
    assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)
    assert excinfo.value.info.sqlstate == "HY000"


def test_last_insert_id_sqlite():
    conn = sqlite3.connect(":memory:", isolation_level=None)
    conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, v TEXT)")
    conn.execute("INSERT INTO t (v) VALUES ('a')")
    conn.execute("INSERT INTO t (v) VALUES ('b')")
    assert DRIVERS["sqlite"].last_insert_id(conn) == 2
    conn.close()


class _PsycopgLikeError(Exception):
    sqlstate = "42P01"


def test_error_info_from_vendor_code_tuple():
    info = ErrorInfo.from_exception(Exception(1146, "Table 'testdb.users' doesn't exist"))
    assert info == ErrorInfo("HY000", 1146, "Table 'testdb.users' doesn't exist")


def test_error_info_from_odbc_style_args():
    info = ErrorInfo.from_exception(Exception("42S02", "[42S02] Invalid object name 'users'."))
    assert info == ErrorInfo("42S02", None, "[42S02] Invalid object name 'users'.")


def test_error_info_from_sqlstate_attribute():
    info = ErrorInfo.from_exception(_PsycopgLikeError('relation "users" does not exist'))
    assert info == ErrorInfo("42P01", None, 'relation "users" does not exist')


def test_error_info_from_plain_exception():
    assert ErrorInfo.from_exception(Exception("boom")) == ErrorInfo("HY000", None, "boom")


@pytest.mark.parametrize("version,sql", [
    ("sqlite", "SELECT last_insert_rowid()"),
    ("mysql", "SELECT LAST_INSERT_ID()"),
    ("pgsql", "SELECT lastval()"),
    ("sqlsrv", "SELECT @@IDENTITY"),
    ("odbc", "SELECT @@IDENTITY"),
])
def test_last_insert_id_queries(version, sql):
    assert DRIVERS[version].last_insert_id_sql == sql
