"""
Run one parameterized query from the command line.

Placeholders are bound with ``--bind name=value``.  Values ``null``,
``true``, ``false`` and integers are converted first so the usual type
inference applies; everything else is bound as a string.  Rows are
printed as JSON, or written to ``--out``.
"""

from __future__ import annotations

import argparse
import logging
import re
from typing import Any, List, Optional, Tuple

from ..infra.reporting.json_reporter import to_json, write_json
from .common import add_connection_args, controller_from_args, run

_INT_RE = re.compile(r'^-?\d+$')


def parse_value(raw: str) -> Any:
    lowered = raw.lower()
    if lowered == 'null':
        return None
    if lowered in ('true', 'false'):
        return lowered == 'true'
    if _INT_RE.match(raw):
        return int(raw)
    return raw


def parse_binding(raw: str) -> Tuple[str, Any]:
    if '=' not in raw:
        raise argparse.ArgumentTypeError(f'expected name=value, got {raw!r}')
    name, value = raw.split('=', 1)
    return name.strip(), parse_value(value)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Run a SQL statement')
    parser.add_argument('sql', type=str, help='SQL with :name placeholders')
    parser.add_argument('--bind', type=parse_binding, action='append', default=[], metavar='NAME=VALUE', help='Bind a placeholder (repeatable)')
    parser.add_argument('--out', type=str, help='Write the rows to this JSON file instead of stdout')
    add_connection_args(parser)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    db = controller_from_args(args)
    try:
        if not db.connected:
            logging.error('DB FAIL: %s', db.last_error or 'could not connect')
            return 1
        db.prepare(args.sql)
        for name, value in args.bind:
            db.bind(name, value)
        if not db.execute():
            logging.error('Query failed: %s', db.last_error or 'see log')
            return 1
        rows = db.get_all()
        logging.info('[cli/query] fetched rows', extra={'count': len(rows)})
        if args.out:
            write_json(args.out, rows)
        else:
            print(to_json(rows))
        return 0
    finally:
        db.close()


def cli() -> None:
    run(main, 'cli/query')


if __name__ == '__main__':
    cli()
