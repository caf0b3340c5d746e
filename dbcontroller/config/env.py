"""
Database configuration loader.

A configuration is a plain mapping with the keys below.  It can be
built in code, read from a file or read from environment variables.
Required keys raise a ``ConfigurationError`` if missing.

Supported keys:

* ``VERSION`` – driver identifier (``mysql``, ``pgsql``, ``sqlsrv``,
  ``odbc``, ``sqlite``).
* ``HOST`` – database server host.
* ``PORT`` – server port (optional, the driver default is used).
* ``NAME`` – database name (the file path for ``sqlite``).
* ``USERNAME`` – login name.
* ``PASSWORD`` – login password (may be empty but must be present).

Environment variables carry a ``DB_`` prefix (``DB_HOST``, ...).  A
``.env`` file in the working directory is loaded on import.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from dotenv import dotenv_values, load_dotenv

from ..errors import ConfigurationError

load_dotenv()

REQUIRED_KEYS = ("VERSION", "HOST", "NAME", "USERNAME", "PASSWORD")
OPTIONAL_KEYS = ("PORT",)
ENV_PREFIX = "DB_"


def validate_config(config: Mapping[str, Any]) -> None:
    """Check that every required key is present.

    Raises:
        ConfigurationError: Naming the first missing key.
    """
    for key in REQUIRED_KEYS:
        if key not in config:
            raise ConfigurationError(f"Missing required configuration key: {key}")


def load_config(path: Union[str, "os.PathLike[str]"]) -> Dict[str, Any]:
    """Read a configuration file.

    ``.json`` files must hold a single object.  Any other file is parsed
    as a dotenv file (``KEY=value`` lines).

    Raises:
        ConfigurationError: If the file does not exist or cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {file_path}")
    if file_path.suffix.lower() == ".json":
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid JSON in {file_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration in {file_path} must be an object")
        return data
    values = dotenv_values(file_path)
    return {key: ("" if value is None else value) for key, value in values.items()}


def config_from_env(prefix: str = ENV_PREFIX, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Build a configuration from ``<prefix><KEY>`` environment variables.

    Empty values are accepted (a blank password is common in development);
    only unset variables are treated as missing.

    Raises:
        ConfigurationError: If a required variable is not set.
    """
    env = os.environ if environ is None else environ

    def _require(name: str) -> str:
        value = env.get(prefix + name)
        if value is None:
            raise ConfigurationError(f"Environment variable {prefix + name} is required")
        return value

    config: Dict[str, Any] = {key: _require(key) for key in REQUIRED_KEYS}
    for key in OPTIONAL_KEYS:
        value = env.get(prefix + key)
        if value:
            config[key] = value
    return config


def debug_from_env(prefix: str = ENV_PREFIX, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when ``<prefix>DEBUG`` is set to a truthy value."""
    env = os.environ if environ is None else environ
    return (env.get(prefix + "DEBUG") or "").strip().lower() in ("1", "true", "yes", "on")
