#!/usr/bin/env python3
"""
Database connectivity smoke test

Connects to DATABASE_URL (or the URL given as the first argument), runs a
ping and closes the connection again. Exit code 0 on success, 1 on failure.

    python db_ping.py
    python db_ping.py sqlite:///local.db
"""

import logging
import sys

from seabite.core.config import config
from seabite.db import ping_database


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)-8s  %(message)s")
    argv = sys.argv[1:] if argv is None else argv
    url = argv[0] if argv else config.database.url

    print("⏳ Starting database ping...")
    result = ping_database(url)
    if result.ok:
        print("✅ Database reachable, ping successful")
        return 0

    print("❌ Database connection failed")
    print(f"   {result.error}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
