"""
Data source name (DSN) handling.

A DSN has the form ``{VERSION}:host={HOST};port={PORT};dbname={NAME}``.
It is built from a configuration mapping, logged, and parsed back into
the pieces handed to the DB-API driver.  Credentials are never part of
the DSN.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, NamedTuple, Optional

from ...errors import ConfigurationError


class DsnParams(NamedTuple):
    driver: str
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]


def build_dsn(config: Mapping[str, Any]) -> str:
    """Render the DSN for ``config``.  A missing ``PORT`` renders empty."""
    port = config.get("PORT")
    port_str = "" if port is None else str(port)
    return f"{config['VERSION']}:host={config['HOST']};port={port_str};dbname={config['NAME']}"


def parse_dsn(dsn: str) -> DsnParams:
    """Split a DSN into driver, host, port and database.

    Keys are case-insensitive and unknown keys are ignored.  An empty
    port means "use the driver default".

    Raises:
        ConfigurationError: If the DSN has no driver prefix or the port is
            not an integer.
    """
    s = (dsn or "").strip()
    driver, sep, rest = s.partition(":")
    if not sep or not driver.strip():
        raise ConfigurationError(f"DSN has no driver prefix: {dsn!r}")
    kv: Dict[str, str] = {}
    for part in rest.split(";"):
        if "=" not in part:
            continue
        k, v = part.split("=", 1)
        kv[k.strip().lower()] = v.strip()
    port: Optional[int] = None
    port_raw = kv.get("port")
    if port_raw:
        try:
            port = int(port_raw)
        except ValueError:
            raise ConfigurationError(f"Invalid port in DSN: {port_raw!r}") from None
    return DsnParams(
        driver=driver.strip().lower(),
        host=kv.get("host") or None,
        port=port,
        database=kv.get("dbname") or None,
    )
