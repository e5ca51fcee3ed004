#!/usr/bin/env python3
"""
Synchronize intraday bars for every symbol in the symbols file.

Usage:
    python scripts/sync_intraday.py [--interval 5min] [--date-from 2024-01-01] [--date-to 2024-02-01]
    python scripts/sync_intraday.py --interval 1hour --lookback-days 30
"""

import asyncio
import logging
import os
import sys
from argparse import ArgumentParser
from datetime import datetime, timezone

# Add backend to path
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from tickstore.core.config import settings
from tickstore.core.logging import setup_logging
from tickstore.models.intraday_bar import INTERVALS
from tickstore.services.intraday_sync_service import (
    IntradaySyncService,
    RangeSyncReport,
    default_date_range,
)
from tickstore.services.symbol_source import FileSymbolSource

logger = logging.getLogger(__name__)


def parse_date(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


async def sync_intraday(
    interval: str,
    date_from: datetime,
    date_to: datetime,
    symbols_file: str,
) -> RangeSyncReport:
    service = IntradaySyncService(symbol_source=FileSymbolSource(symbols_file))
    return await service.sync_range(interval, date_from, date_to)


def main():
    parser = ArgumentParser(description="Synchronize intraday bars from the market data provider")
    parser.add_argument(
        "--interval",
        choices=INTERVALS,
        default=settings.INTRADAY_DEFAULT_INTERVAL,
        help=f"Bar interval (default: {settings.INTRADAY_DEFAULT_INTERVAL})",
    )
    parser.add_argument("--date-from", type=parse_date, help="Inclusive range start (ISO date or datetime, UTC)")
    parser.add_argument("--date-to", type=parse_date, help="Inclusive range end (default: now)")
    parser.add_argument(
        "--lookback-days",
        type=float,
        default=settings.INTRADAY_LOOKBACK_DAYS,
        help="Range length when --date-from is omitted (default: %(default)s)",
    )
    parser.add_argument(
        "--symbols-file",
        default=settings.SYMBOLS_FILE,
        help="Newline-delimited symbols file (default: %(default)s)",
    )
    parser.add_argument("--log-level", help="Override LOG_LEVEL for this run")
    args = parser.parse_args()

    setup_logging(args.log_level)

    default_from, default_to = default_date_range(args.lookback_days, now=args.date_to)
    date_from = args.date_from or default_from
    date_to = args.date_to or default_to
    if date_from > date_to:
        parser.error("--date-from must not be after --date-to")

    report = asyncio.run(sync_intraday(args.interval, date_from, date_to, args.symbols_file))

    for failed in report.failed:
        logger.error(f"✗ {failed.symbol}: {failed.outcome.error}")
    logger.info(
        f"Synced {len(report.succeeded)}/{len(report.outcomes)} symbols, "
        f"{report.records} records ({report.date_from} → {report.date_to})"
    )
    sys.exit(1 if report.failed else 0)


if __name__ == "__main__":
    main()
