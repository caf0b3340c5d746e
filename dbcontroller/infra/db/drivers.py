"""
DB-API driver registry.

``VERSION`` in the configuration selects a driver.  Each driver names
the Python module that implements it, the placeholder style that module
expects, how to open a connection from parsed DSN parameters and how to
read the last generated id.  Driver libraries are imported lazily so
only the ones actually used need to be installed:

* ``mysql`` – ``pymysql``
* ``pgsql`` / ``postgres`` / ``postgresql`` – ``psycopg``
* ``sqlsrv`` / ``mssql`` / ``dblib`` – ``pymssql``, or ``pyodbc`` when
  ``pymssql`` is not installed
* ``odbc`` – ``pyodbc``
* ``sqlite`` – ``sqlite3`` from the standard library

Every connection is opened in autocommit mode; DB-API drivers always
report failures by raising.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
import os
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, Dict, Optional, Tuple

from ...errors import DriverError, UnsupportedDriverError
from .dsn import DsnParams

# (module, params, username, password) -> connection
Opener = Callable[[Any, DsnParams, Optional[str], Optional[str]], Any]

ODBC_DRIVER = os.environ.get("DB_ODBC_DRIVER", "ODBC Driver 17 for SQL Server")


@dataclass(frozen=True)
class Driver:
    """How to talk to one kind of database through a DB-API module."""

    name: str
    module: str
    paramstyle: str
    opener: Opener
    last_insert_id_sql: str
    fallback: Optional[str] = None

    def is_installed(self) -> bool:
        return importlib.util.find_spec(self.module) is not None

    def load(self) -> ModuleType:
        """Import the driver module.

        Raises:
            UnsupportedDriverError: If the module is not installed.
        """
        try:
            return importlib.import_module(self.module)
        except ImportError as exc:
            raise UnsupportedDriverError(
                f"Driver library {self.module!r} for {self.name!r} is not installed"
            ) from exc

    @property
    def errors(self) -> Tuple[type, ...]:
        """Exception classes raised by the driver module."""
        return (self.load().Error,)

    def open(self, params: DsnParams, username: Optional[str], password: Optional[str]) -> Any:
        """Open a connection, translating driver exceptions to ``DriverError``."""
        module = self.load()
        try:
            return self.opener(module, params, username, password)
        except module.Error as exc:
            raise DriverError.from_exception(exc) from exc

    def last_insert_id(self, conn: Any) -> Any:
        """Return the last id generated on ``conn`` (``None`` when unknown)."""
        cursor = conn.cursor()
        try:
            cursor.execute(self.last_insert_id_sql)
            row = cursor.fetchone()
        except self.errors as exc:
            raise DriverError.from_exception(exc) from exc
        finally:
            cursor.close()
        if not row:
            return None
        return row[0]


def _open_mysql(module: Any, params: DsnParams, username: Optional[str], password: Optional[str]) -> Any:
    return module.connect(
        host=params.host,
        port=params.port or 3306,
        database=params.database,
        user=username,
        password=password or "",
        autocommit=True,
    )


def _open_postgres(module: Any, params: DsnParams, username: Optional[str], password: Optional[str]) -> Any:
    return module.connect(
        host=params.host,
        port=params.port or 5432,
        dbname=params.database,
        user=username,
        password=password or "",
        autocommit=True,
    )


def _open_pymssql(module: Any, params: DsnParams, username: Optional[str], password: Optional[str]) -> Any:
    return module.connect(
        server=params.host,
        user=username,
        password=password,
        database=params.database,
        port=params.port or 1433,
        autocommit=True,
    )


def _open_pyodbc(module: Any, params: DsnParams, username: Optional[str], password: Optional[str]) -> Any:
    server_expr = f"{params.host},{params.port}" if params.port else params.host
    conn_str = (
        f"DRIVER={{{ODBC_DRIVER}}};"
        f"SERVER={server_expr};"
        f"DATABASE={params.database};"
        f"UID={username};PWD={password};"
    )
    return module.connect(conn_str, autocommit=True)


def _open_sqlite(module: Any, params: DsnParams, username: Optional[str], password: Optional[str]) -> Any:
    # Host and credentials do not apply; NAME is the database file.
    return module.connect(params.database or ":memory:", isolation_level=None)


_MYSQL = Driver("mysql", "pymysql", "pyformat", _open_mysql, "SELECT LAST_INSERT_ID()")
_POSTGRES = Driver("pgsql", "psycopg", "pyformat", _open_postgres, "SELECT lastval()")
_ODBC = Driver("odbc", "pyodbc", "qmark", _open_pyodbc, "SELECT @@IDENTITY")
_MSSQL = Driver("sqlsrv", "pymssql", "pyformat", _open_pymssql, "SELECT @@IDENTITY", fallback="odbc")
_SQLITE = Driver("sqlite", "sqlite3", "named", _open_sqlite, "SELECT last_insert_rowid()")

# Registry mapping VERSION values to drivers.
DRIVERS: Dict[str, Driver] = {
    "mysql": _MYSQL,
    "pgsql": _POSTGRES,
    "postgres": _POSTGRES,
    "postgresql": _POSTGRES,
    "sqlsrv": _MSSQL,
    "mssql": _MSSQL,
    "dblib": _MSSQL,
    "odbc": _ODBC,
    "sqlite": _SQLITE,
}


def register_driver(version: str, driver: Driver) -> None:
    """Make ``driver`` available under the ``VERSION`` value ``version``."""
    DRIVERS[version.strip().lower()] = driver


def resolve_driver(version: str) -> Driver:
    """Return the driver for ``version``.

    When the driver library is missing and the driver names a fallback,
    the fallback is returned instead.

    Raises:
        UnsupportedDriverError: If no driver is registered for ``version``.
    """
    key = (version or "").strip().lower()
    try:
        driver = DRIVERS[key]
    except KeyError:
        raise UnsupportedDriverError(f"No driver registered for VERSION: {version}") from None
    if driver.fallback and not driver.is_installed():
        logging.info(
            "[db] driver library missing, using fallback",
            extra={"version": key, "library": driver.module, "fallback": driver.fallback},
        )
        return resolve_driver(driver.fallback)
    return driver
