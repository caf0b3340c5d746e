"""
Database plumbing behind ``DBController``.

This subpackage turns a configuration into a DSN, picks the DB-API
driver for its ``VERSION`` and wraps cursors in ``Statement`` objects
that accept ``:name`` placeholders for every driver.
"""

from .drivers import DRIVERS, Driver, register_driver, resolve_driver  # noqa: F401
from .dsn import DsnParams, build_dsn, parse_dsn  # noqa: F401
from .statement import Statement, rewrite_placeholders  # noqa: F401
