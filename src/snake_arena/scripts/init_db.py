"""Create (or reset) the run ledger tables for the configured database."""
from __future__ import annotations

import argparse

from snake_arena.core.settings import settings
from snake_arena.db.session import create_tables, drop_tables


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialize the run ledger database")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop all ledger tables before recreating them.",
    )
    args = parser.parse_args()

    if args.drop_tables:
        drop_tables()
        print("[init_db] dropped ledger tables")
    create_tables()
    print(f"[init_db] tables ready at {settings.database_url}")


if __name__ == "__main__":
    main()
