"""
Exceptions and outcome types.

Driver failures during connect, ``execute`` and ``query`` are never
raised to the caller of ``DBController``; they are turned into a
``Result``.  Only configuration problems and misuse of the controller
(no connection, no statement) are raised.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Union

SQLSTATE_OK = "00000"
SQLSTATE_GENERAL_ERROR = "HY000"
SQLSTATE_INVALID_PARAMETER_NUMBER = "HY093"
SQLSTATE_INVALID_PARAMETER_TYPE = "HY105"


class ErrorInfo(NamedTuple):
    """Structured error descriptor for the last statement operation."""

    sqlstate: str
    code: Optional[Union[int, str]]
    message: Optional[str]

    @classmethod
    def ok(cls) -> "ErrorInfo":
        return cls(SQLSTATE_OK, None, None)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        """Extract sqlstate, vendor code and message from a driver exception.

        DB-API drivers disagree on where they keep these: psycopg exposes
        ``sqlstate``, sqlite3 ``sqlite_errorcode``, pymysql and pymssql put
        ``(code, message)`` in ``args`` and pyodbc ``(sqlstate, message)``.
        """
        if isinstance(exc, DriverError):
            return exc.info
        args = getattr(exc, "args", ()) or ()
        sqlstate = getattr(exc, "sqlstate", None)
        code = getattr(exc, "sqlite_errorcode", None)
        message = str(exc)
        if len(args) > 1:
            first = args[0]
            if isinstance(first, int) and code is None:
                code = first
                message = str(args[1])
            elif isinstance(first, str) and len(first) == 5 and sqlstate is None:
                sqlstate = first
                message = str(args[1])
        return cls(sqlstate or SQLSTATE_GENERAL_ERROR, code, message)


class Result(NamedTuple):
    """Outcome of connect, execute or query.

    Truthy on success.  ``error`` is only filled in when the controller
    runs in debug mode; otherwise the cause of a failure is discarded.
    """

    ok: bool
    error: Optional[ErrorInfo] = None

    def __bool__(self) -> bool:
        return self.ok


class DBControllerError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(DBControllerError, ValueError):
    """A required configuration key is missing or a value is unusable."""


class DriverError(DBControllerError):
    """A DB-API driver failure, carrying its ``ErrorInfo``."""

    def __init__(self, message: str, info: Optional[ErrorInfo] = None) -> None:
        super().__init__(message)
        self.info = info or ErrorInfo(SQLSTATE_GENERAL_ERROR, None, message)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "DriverError":
        info = ErrorInfo.from_exception(exc)
        return cls(info.message or exc.__class__.__name__, info)


class UnsupportedDriverError(DriverError):
    """No driver is registered for VERSION or its library is not installed."""


class NotConnectedError(DBControllerError, RuntimeError):
    """An operation needs an open connection and there is none."""


class NoActiveStatementError(DBControllerError, RuntimeError):
    """An operation needs a statement and none is prepared."""

