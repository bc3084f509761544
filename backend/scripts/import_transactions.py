"""Import a broker CSV export into the portfolio database."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from portfolio_tracker.api.database import Database
from portfolio_tracker.api.stores import SqlTransactionStore
from portfolio_tracker.config import get_settings
from portfolio_tracker.core.logging import setup_logging
from portfolio_tracker.importer import import_transactions, read_transactions_csv


async def _run(csv_path: Path, database_url: str | None) -> int:
    database = Database(database_url or get_settings().database_url)
    try:
        await database.create_all()
        created = await import_transactions(SqlTransactionStore(database), read_transactions_csv(csv_path))
    finally:
        await database.dispose()
    return len(created)


def main() -> None:
    parser = argparse.ArgumentParser(description="Import transactions from a CSV export")
    parser.add_argument("csv_file", help="Date, Ticker, Quantity, Price, Company, Type")
    parser.add_argument("--database-url", default=None)
    args = parser.parse_args()

    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        raise SystemExit(f"CSV file not found: {csv_path}")
    setup_logging(get_settings().log_level)
    count = asyncio.run(_run(csv_path, args.database_url))
    print(f"Imported {count} transactions from {csv_path}")


if __name__ == "__main__":
    main()
