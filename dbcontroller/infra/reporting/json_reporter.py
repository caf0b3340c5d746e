"""
JSON reporting utilities.

Small helpers for writing fetched rows to disk: ensure the target
directory exists, then dump the data as indented UTF-8 JSON.  Values
JSON cannot represent natively (dates, decimals, bytes) are written
with ``str``.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any


def ensure_dir(directory: str) -> None:
    """Ensure a directory exists, creating it recursively if necessary."""
    if not directory:
        return
    logging.info("[jsonReporter] ensure_dir", extra={"dir": directory})
    Path(directory).mkdir(parents=True, exist_ok=True)


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def write_json(file_path: str, data: Any) -> None:
    """Write an object to a JSON file, ensuring the directory exists."""
    ensure_dir(os.path.dirname(file_path))
    logging.info("[jsonReporter] write_json", extra={"file": file_path})
    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(to_json(data))
