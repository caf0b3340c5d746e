"""
Argument handling shared by the command-line tools.

Configuration comes from ``--config`` when given, otherwise from the
``DB_*`` environment variables (a ``.env`` file is honoured).  Debug
mode is on with ``--debug`` or ``DB_DEBUG=1``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, List, Optional

from ..config import config_from_env, debug_from_env, load_config
from ..controller import DBController


def add_connection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--config', type=str, help='Path to a .json or .env configuration file (default: DB_* environment variables)')
    parser.add_argument('--debug', action='store_true', help='Log driver error details instead of a generic message')


def controller_from_args(args: argparse.Namespace) -> DBController:
    config = load_config(args.config) if args.config else config_from_env()
    return DBController(config, debug=args.debug or debug_from_env())


def run(main: Callable[[Optional[List[str]]], int], name: str) -> None:
    """Run ``main`` and exit with its status, or 2 on an unexpected error."""
    try:
        status = main(None)
    except Exception as err:
        logging.error('Error executing %s', name, exc_info=err)
        sys.exit(2)
    sys.exit(status)
