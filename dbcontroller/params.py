"""
Parameter types for ``bind`` and ``param``.

The numeric values follow the constants used by other database
libraries for the same four kinds (null 0, int 1, str 2, bool 5) so that
callers porting code can keep passing integers.
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Any, Optional


_LEADING_NUMBER_RE = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class ParamType(IntEnum):
    NULL = 0
    INT = 1
    STR = 2
    BOOL = 5


def infer_type(value: Any) -> ParamType:
    """Map a runtime value onto one of the four parameter types.

    ``bool`` is tested before ``int`` because it is a subclass of it.
    """
    if isinstance(value, bool):
        return ParamType.BOOL
    if isinstance(value, int):
        return ParamType.INT
    if value is None:
        return ParamType.NULL
    return ParamType.STR


def resolve_type(value: Any, type_: Optional[int] = None) -> ParamType:
    """Return ``type_`` when given, otherwise the inferred type."""
    if type_ is None:
        return infer_type(value)
    return ParamType(type_)


def coerce(value: Any, type_: ParamType) -> Any:
    """Convert ``value`` to what the driver should receive for ``type_``.

    ``None`` stays ``None`` for every type.
    """
    if type_ is ParamType.NULL or value is None:
        return None
    if type_ is ParamType.INT:
        return int(value)
    if type_ is ParamType.BOOL:
        return bool(value)
    if isinstance(value, bytes):
        return value
    return str(value)


def to_int(value: Any) -> int:
    """Loose integer conversion for values read back from the database.

    Numbers are truncated, text is read up to its leading number
    (``"3.0"`` is 3, ``"12abc"`` is 12) and anything without one is 0.
    """
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", "replace")
    if isinstance(value, str):
        match = _LEADING_NUMBER_RE.match(value)
        if match is None:
            return 0
        value = match.group(0)
        try:
            return int(value)
        except ValueError:
            value = float(value)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
