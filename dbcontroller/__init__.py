"""
Thin wrapper around Python DB-API drivers.

``DBController`` holds a configuration, opens a connection on demand
and exposes a chainable prepare/bind/execute/fetch sequence over named
``:placeholders``, whichever driver is behind it.  See individual
modules for further details.
"""

from .controller import DBController  # noqa: F401
from .errors import (  # noqa: F401
    ConfigurationError,
    DBControllerError,
    DriverError,
    ErrorInfo,
    NoActiveStatementError,
    NotConnectedError,
    Result,
    UnsupportedDriverError,
)
from .params import ParamType  # noqa: F401

__version__ = "1.0.0"
