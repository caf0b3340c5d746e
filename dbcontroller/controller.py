"""
Connection/statement wrapper.

``DBController`` keeps one configuration, one connection and one
statement.  Typical use::

    db = DBController({
        "VERSION": "mysql", "HOST": "localhost", "PORT": 3306,
        "NAME": "app", "USERNAME": "root", "PASSWORD": "",
    })
    db.prepare("SELECT id, name FROM users WHERE id = :id").bind(":id", 1)
    if db.execute():
        user = db.get_one()
    db.close()

Driver failures while connecting or executing are not raised.  With
debug mode on the driver message is kept in ``last_error``, logged and
returned inside the ``Result``; with debug mode off only a fixed
generic message is logged and the cause is dropped.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .config.env import load_config, validate_config
from .errors import DriverError, ErrorInfo, NoActiveStatementError, NotConnectedError, Result
from .infra.db.drivers import Driver, resolve_driver
from .infra.db.dsn import build_dsn, parse_dsn
from .infra.db.statement import Statement
from .params import ParamType, to_int

CONNECTION_ERROR_MESSAGE = "database connection error"
OPERATION_ERROR_MESSAGE = "database operation error"

ConfigSource = Union[Mapping[str, Any], str, os.PathLike, None]


class DBController:
    """Thin wrapper over a DB-API connection and its current statement."""

    PARAM_INT = ParamType.INT
    PARAM_BOOL = ParamType.BOOL
    PARAM_NULL = ParamType.NULL
    PARAM_STRING = ParamType.STR

    def __init__(self, config: ConfigSource = None, debug: bool = False) -> None:
        """Create the controller and, when configured, connect.

        Args:
            config: A configuration mapping or the path of a configuration
                file (see ``dbcontroller.config.load_config``).  ``None``
                leaves the instance unconfigured.
            debug: Initial debug mode.

        Raises:
            ConfigurationError: If a required key is missing or the file
                cannot be read.
        """
        self._config: Dict[str, Any] = {}
        self._conn: Any = None
        self._driver: Optional[Driver] = None
        self._stmt: Optional[Statement] = None
        self._debug = debug
        self.last_error = ""
        self.last_result: Optional[Result] = None
        if config:
            if isinstance(config, Mapping):
                self._config = dict(config)
            else:
                self._config = load_config(config)
            validate_config(self._config)
            self.conn()

    def __enter__(self) -> "DBController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- configuration -------------------------------------------------------------
    @property
    def debug(self) -> bool:
        return self._debug

    @property
    def connected(self) -> bool:
        return self._conn is not None

    def set_config(self, key: str, value: Any) -> "DBController":
        """Set one configuration entry.  An open connection is not touched."""
        self._config[key] = value
        return self

    def set_debug(self, debug: bool) -> "DBController":
        self._debug = bool(debug)
        return self

    # --- connection ----------------------------------------------------------------
    def conn(self) -> "DBController":
        """Open the connection unless it is already open or nothing is configured."""
        self._connect()
        return self

    def _connect(self) -> None:
        if self._conn is not None or not self._config:
            return
        validate_config(self._config)
        dsn = build_dsn(self._config)
        params = parse_dsn(dsn)
        try:
            driver = resolve_driver(params.driver)
            self._conn = driver.open(params, self._config["USERNAME"], self._config["PASSWORD"])
        except DriverError as exc:
            self.last_result = self._failure(exc, CONNECTION_ERROR_MESSAGE, dsn=dsn)
            return
        self._driver = driver
        logging.info("[db] connected", extra={"dsn": dsn, "library": driver.module})
        self.last_result = Result(True)

    def _failure(self, exc: DriverError, generic: str, **context: Any) -> Result:
        if self._debug:
            self.last_error = str(exc)
            logging.error("[db] %s", exc, extra=dict(context, sqlstate=exc.info.sqlstate))
            return Result(False, exc.info)
        logging.error("[db] %s", generic)
        return Result(False)

    def _require_connection(self) -> Any:
        if self._conn is None:
            raise NotConnectedError("No open database connection")
        return self._conn

    def _require_statement(self) -> Statement:
        if self._stmt is None:
            raise NoActiveStatementError("No active statement; call prepare() or query() first")
        return self._stmt

    # --- statements ----------------------------------------------------------------
    def prepare(self, sql: str) -> "DBController":
        """Make ``sql`` the current statement.  The previous one is dropped."""
        conn = self._require_connection()
        self._stmt = Statement(conn.cursor(), self._driver, sql)
        logging.debug("[db] prepared", extra={"sql": sql})
        return self

    def query(self, sql: str) -> "DBController":
        """Execute ``sql`` directly (no placeholders) and keep it as the current statement.

        Failures are handled like ``execute``; the outcome is left in
        ``last_result``.
        """
        conn = self._require_connection()
        self._stmt = Statement(conn.cursor(), self._driver, sql, prepared=False)
        self._run(self._stmt)
        return self

    def bind(self, name: str, value: Any, type_: Optional[int] = None) -> "DBController":
        """Bind ``value`` to placeholder ``name`` (``":id"`` or ``"id"``).

        Without ``type_`` the type is inferred from the value: bool, int,
        None, anything else as a string.
        """
        self._require_statement().bind_value(name, value, type_)
        return self

    def param(self, name: str, ref: Union[Callable[[], Any], Any], type_: Optional[int] = None) -> "DBController":
        """Bind placeholder ``name`` by reference.

        ``ref`` is a zero-argument callable called on each ``execute``,
        so one prepared statement can run in a loop over a changing
        variable.  A non-callable is bound as a constant.
        """
        self._require_statement().bind_param(name, ref, type_)
        return self

    def execute(self) -> Result:
        """Run the current statement.  The returned ``Result`` is truthy on success."""
        return self._run(self._require_statement())

    def _run(self, stmt: Statement) -> Result:
        try:
            stmt.execute()
        except DriverError as exc:
            self.last_result = self._failure(exc, OPERATION_ERROR_MESSAGE, sql=stmt.sql)
            return self.last_result
        logging.debug("[db] executed", extra={"sql": stmt.sql, "rows": stmt.rowcount()})
        self.last_result = Result(True)
        return self.last_result

    # --- results -------------------------------------------------------------------
    def row_count(self) -> int:
        return self._require_statement().rowcount()

    def get_one(self) -> Optional[Dict[str, Any]]:
        """Next row as a dict, or None when there is none."""
        return self._require_statement().fetch_one()

    def get_all(self) -> List[Dict[str, Any]]:
        return self._require_statement().fetch_all()

    def get_int(self) -> List[tuple]:
        """All rows as tuples of positional values."""
        return self._require_statement().fetch_all_num()

    def get_count(self) -> Union[int, List[tuple]]:
        """First column of the first row as an int.

        Text is read up to its leading number and is 0 when it has none.

        When the result is empty, or that column is NULL, the raw
        positional fetch result is returned instead (usually ``[]``).
        Callers must check the type.
        """
        response = self._require_statement().fetch_all_num()
        if response and response[0] and response[0][0] is not None:
            return to_int(response[0][0])
        return response

    def get_all_object(self) -> Dict[int, Dict[str, Any]]:
        """All rows keyed by their 1-based position in the result."""
        stmt = self._require_statement()
        result: Dict[int, Dict[str, Any]] = {}
        count = 0
        while True:
            row = stmt.fetch_one()
            if row is None:
                break
            count += 1
            result[count] = row
        return result

    def get_last_insert_id(self) -> str:
        """Last generated id on this connection, ``"0"`` when there is none.

        Raises:
            NotConnectedError: If there is no connection.
            DriverError: If the database cannot report one.
        """
        conn = self._require_connection()
        value = self._driver.last_insert_id(conn)
        return "0" if value is None else str(value)

    # --- errors --------------------------------------------------------------------
    def error(self) -> Optional[ErrorInfo]:
        return self.error_info()

    def error_info(self) -> Optional[ErrorInfo]:
        """``ErrorInfo`` of the last statement operation, None without a statement."""
        if self._stmt is None:
            return None
        return self._stmt.error_info

    def dump_debug(self) -> Optional[str]:
        """Dump of the current statement's SQL and parameters, only in debug mode."""
        if not self._debug:
            return None
        return self._require_statement().debug_dump()

    # --- release -------------------------------------------------------------------
    def free(self) -> None:
        """Close the current statement's cursor and forget the statement."""
        if self._stmt is not None:
            self._stmt.close_cursor()
            self._stmt = None

    def close(self) -> None:
        """Free the statement, close the connection and drop the configuration.

        Afterwards the instance behaves like one created without a
        configuration.
        """
        self.free()
        try:
            if self._conn is not None:
                self._conn.close()
                logging.info("[db] connection closed")
        finally:
            self._conn = None
            self._driver = None
            self._config = {}
            self.last_error = ""
            self.last_result = None
