#!/usr/bin/env python3
"""
CLI for dumping one user's rows as INSERT statements.

Usage:
  userdump 42                          # positional argument is a user_id
  userdump --user_id 42
  userdump --account_id 1001           # look up the owning user first
  userdump --output 42                 # also write user_42_dump.sql
  userdump --output --output-dir dumps 42
  userdump --fail-fast 42              # abort on the first failing table

Connection settings come from DATABASE_URL, or DB_HOST, DB_PORT, DB_USER,
DB_NAME (and optionally DB_PASS, DB_SSLMODE). A .env file is honoured.
"""

import argparse
import logging
import os
import sys

from .database import get_db_connection
from .dump import choose_identifier, dump_filename, dump_user, write_dump
from .errors import DumpError, UsageError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="userdump",
        description="Export a user's rows as SQL INSERT statements.",
    )
    parser.add_argument("ids", nargs="*", metavar="user_id", help="user_id to dump")
    parser.add_argument("--user_id", help="Specify a user_id directly")
    parser.add_argument(
        "--account_id", help="Specify an account_id to look up user_id"
    )
    parser.add_argument(
        "--output", action="store_true", default=False,
        help="Write SQL to a .sql file as well as stdout",
    )
    parser.add_argument(
        "--output-dir", default=".", help="Directory for the --output file"
    )
    parser.add_argument(
        "--fail-fast", action="store_true", default=False,
        help="Abort on the first table that fails instead of skipping it",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        identifier = choose_identifier(args.user_id, args.account_id, args.ids)
    except UsageError as e:
        parser.error(str(e))

    try:
        with get_db_connection() as conn:
            user_id, text = dump_user(conn, identifier, fail_fast=args.fail_fast)
    except DumpError as e:
        logger.error(f"✗ {e}")
        sys.exit(1)

    sys.stdout.write(text)

    if args.output:
        path = os.path.join(args.output_dir, dump_filename(user_id))
        try:
            write_dump(text, path)
        except OSError as e:
            logger.error(f"✗ Failed to write to file: {e}")
            sys.exit(1)
        logger.info(f"Wrote SQL output to {path}")

    return 0


if __name__ == "__main__":
    main()
