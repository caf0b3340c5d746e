"""
Test database connectivity.

Connects with the configured settings and runs ``SELECT 1``.  Exits
with status 0 when the database answers, 1 when it does not.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .common import add_connection_args, controller_from_args, run


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Check the database connection')
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
        db.query('SELECT 1 AS ok')
        if not db.last_result:
            logging.error('DB FAIL: %s', db.last_error or 'query failed')
            return 1
        logging.info('DB OK: %s', db.get_all())
        return 0
    finally:
        db.close()


def cli() -> None:
    run(main, 'cli/check')


if __name__ == '__main__':
    cli()
