"""
Statement handle.

A ``Statement`` wraps one DB-API cursor together with the SQL it runs
and the values bound to it.  SQL is written with named ``:name``
placeholders regardless of the driver; on prepare they are rewritten to
the driver's paramstyle:

* ``named`` (sqlite3) – kept as ``:name``
* ``pyformat`` (pymysql, psycopg, pymssql) – ``%(name)s``, with literal
  ``%`` doubled
* ``qmark`` (pyodbc) – ``?``, values passed positionally in the order
  the placeholders appear

Placeholders inside quoted literals and ``::`` casts are left alone.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Union

from ...errors import (
    SQLSTATE_INVALID_PARAMETER_NUMBER,
    SQLSTATE_INVALID_PARAMETER_TYPE,
    DriverError,
    ErrorInfo,
)
from ...params import ParamType, coerce, resolve_type
from .drivers import Driver

_TOKEN_RE = re.compile(
    r"""'(?:[^'\\]|\\.|'')*'"""
    r'''|"(?:[^"]|"")*"'''
    r"""|(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)"""
)


def rewrite_placeholders(sql: str, paramstyle: str) -> Tuple[str, List[str]]:
    """Rewrite ``:name`` placeholders for ``paramstyle``.

    Returns:
        The rewritten SQL and the placeholder names in order of
        appearance (repeated names appear repeatedly).  When there are no
        placeholders the SQL is returned untouched.
    """
    names = [m.group(1) for m in _TOKEN_RE.finditer(sql) if m.group(1)]
    if not names:
        return sql, []

    def plain(text: str) -> str:
        return text.replace("%", "%%") if paramstyle == "pyformat" else text

    def placeholder(name: str) -> str:
        if paramstyle == "pyformat":
            return f"%({name})s"
        if paramstyle == "qmark":
            return "?"
        return f":{name}"

    out: List[str] = []
    pos = 0
    for match in _TOKEN_RE.finditer(sql):
        out.append(plain(sql[pos:match.start()]))
        name = match.group(1)
        out.append(placeholder(name) if name else plain(match.group(0)))
        pos = match.end()
    out.append(plain(sql[pos:]))
    return "".join(out), names


def _normalize(name: str) -> str:
    return str(name).lstrip(":")


class _Binding(NamedTuple):
    source: Callable[[], Any]
    type_: Optional[ParamType]


class Statement:
    """One prepared (or directly executed) SQL statement."""

    def __init__(self, cursor: Any, driver: Driver, sql: str, prepared: bool = True) -> None:
        self.sql = sql
        self._cursor = cursor
        self._driver = driver
        if prepared:
            self.compiled_sql, self.placeholders = rewrite_placeholders(sql, driver.paramstyle)
        else:
            self.compiled_sql, self.placeholders = sql, []
        self._bindings: Dict[str, _Binding] = {}
        self._has_result = False
        self.error_info: Optional[ErrorInfo] = None

    # --- binding -------------------------------------------------------------------
    def bind_value(self, name: str, value: Any, type_: Optional[int] = None) -> None:
        """Bind ``value`` now; later changes to the caller's variable are not seen."""
        self._bindings[_normalize(name)] = _Binding(lambda: value, resolve_type(value, type_))

    def bind_param(self, name: str, ref: Union[Callable[[], Any], Any], type_: Optional[int] = None) -> None:
        """Bind a reference; ``ref()`` is read again on every ``execute``."""
        source = ref if callable(ref) else (lambda: ref)
        self._bindings[_normalize(name)] = _Binding(source, None if type_ is None else ParamType(type_))

    def _resolve_params(self) -> Optional[Union[Dict[str, Any], List[Any]]]:
        if not self.placeholders:
            return None
        values: Dict[str, Any] = {}
        for name in dict.fromkeys(self.placeholders):
            binding = self._bindings.get(name)
            if binding is None:
                message = f"Invalid parameter number: :{name} is not bound"
                raise DriverError(message, ErrorInfo(SQLSTATE_INVALID_PARAMETER_NUMBER, None, message))
            value = binding.source()
            param_type = resolve_type(value, binding.type_)
            try:
                values[name] = coerce(value, param_type)
            except (TypeError, ValueError) as exc:
                message = f"Invalid parameter type: :{name} cannot be sent as {param_type.name} ({exc})"
                raise DriverError(message, ErrorInfo(SQLSTATE_INVALID_PARAMETER_TYPE, None, message)) from exc
        if self._driver.paramstyle == "qmark":
            return [values[name] for name in self.placeholders]
        return values

    # --- execution -----------------------------------------------------------------
    def execute(self) -> None:
        """Run the statement.

        Raises:
            DriverError: On any driver failure, a missing parameter or a
                value its bound type cannot take.  The failure is also
                recorded in ``error_info``.
        """
        self._has_result = False
        try:
            params = self._resolve_params()
        except DriverError as exc:
            self.error_info = exc.info
            raise
        try:
            if params is None:
                self._cursor.execute(self.compiled_sql)
            else:
                self._cursor.execute(self.compiled_sql, params)
        except self._driver.errors as exc:
            err = DriverError.from_exception(exc)
            self.error_info = err.info
            raise err from exc
        self.error_info = ErrorInfo.ok()
        self._has_result = True

    # --- results -------------------------------------------------------------------
    def _columns(self) -> List[str]:
        desc = self._cursor.description
        return [d[0] for d in desc] if desc else []

    def _readable(self) -> bool:
        return self._has_result and bool(self._cursor.description)

    def rowcount(self) -> int:
        if not self._has_result:
            return 0
        count = self._cursor.rowcount
        return count if count is not None and count > 0 else 0

    def fetch_one(self) -> Optional[Dict[str, Any]]:
        if not self._readable():
            return None
        row = self._cursor.fetchone()
        if row is None:
            return None
        return dict(zip(self._columns(), row))

    def fetch_all(self) -> List[Dict[str, Any]]:
        if not self._readable():
            return []
        names = self._columns()
        return [dict(zip(names, row)) for row in self._cursor.fetchall()]

    def fetch_all_num(self) -> List[tuple]:
        if not self._readable():
            return []
        return [tuple(row) for row in self._cursor.fetchall()]

    def close_cursor(self) -> None:
        self._has_result = False
        self._cursor.close()

    def debug_dump(self) -> str:
        """Describe the SQL and the bound parameters."""
        lines = [
            f"SQL: [{len(self.sql)}] {self.sql}",
            f"Sent SQL: [{len(self.compiled_sql)}] {self.compiled_sql}",
            f"Params:  {len(self._bindings)}",
        ]
        for name, binding in self._bindings.items():
            key = f":{name}"
            type_repr = "inferred" if binding.type_ is None else f"{int(binding.type_)} ({binding.type_.name})"
            lines.append(f"Key: Name: [{len(key)}] {key}")
            lines.append(f"param_type={type_repr}")
        return "\n".join(lines)
