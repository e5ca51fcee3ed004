import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from tickstore.core.config import Settings, settings
from tickstore.core.database import build_engine, build_session_factory, is_sqlite_url
from tickstore.models.intraday_bar import get_intraday_model
from tickstore.services.intraday_persistence import IntradayWindowPersister
from tickstore.services.market_data import get_market_data_provider
from tickstore.services.market_data.base import IntradayDataProvider, format_provider_date
from tickstore.services.symbol_source import FileSymbolSource
from tickstore.services.throttle import JobOutcome, ThrottledBatchRunner, chunk_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncConfig:
    """
    Throttling parameters for one run.

    Two throttles apply: the batch runner starts at most `batch_quota` symbols
    per `batch_window_ms`, and each symbol issues at most one call per
    `min_call_ms`. With at most `batch_quota` symbols in flight the aggregate
    call rate peaks at `batch_quota * 1000 / min_call_ms` per second.
    """
    page_limit: int = 1000
    batch_quota: int = 4
    batch_window_ms: int = 1000
    min_call_ms: int = 1000
    max_requests_per_sec: float = 5.0

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "SyncConfig":
        source = source or settings
        return cls(
            page_limit=source.INTRADAY_PAGE_LIMIT,
            batch_quota=source.INTRADAY_BATCH_QUOTA,
            batch_window_ms=source.INTRADAY_BATCH_WINDOW_MS,
            min_call_ms=source.INTRADAY_MIN_CALL_MS,
            max_requests_per_sec=source.PROVIDER_MAX_REQUESTS_PER_SEC,
        )

    def estimated_peak_rate(self) -> float:
        """Upper bound on provider calls per second across all symbols."""
        if self.batch_quota <= 0:
            return 0.0
        if self.min_call_ms > 0:
            return self.batch_quota * 1000 / self.min_call_ms
        if self.batch_window_ms > 0:
            # Unpaced symbols: only the chunk starts are bounded
            return self.batch_quota * 1000 / self.batch_window_ms
        return float("inf")


@dataclass
class SymbolSyncResult:
    symbol: str
    pages: int = 0
    records: int = 0
    last_offset: int = 0


@dataclass
class SymbolOutcome:
    symbol: str
    outcome: JobOutcome[SymbolSyncResult]

    @property
    def ok(self) -> bool:
        return self.outcome.ok


@dataclass
class RangeSyncReport:
    """Aggregate of every symbol's settled outcome for one run."""
    interval: str
    date_from: str
    date_to: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    outcomes: List[SymbolOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[SymbolOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[SymbolOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def records(self) -> int:
        return sum(o.outcome.value.records for o in self.succeeded if o.outcome.value)

    def summary(self) -> dict[str, object]:
        return {
            "interval": self.interval,
            "date_from": self.date_from,
            "date_to": self.date_to,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "symbols": len(self.outcomes),
            "succeeded": len(self.succeeded),
            "failed": [o.symbol for o in self.failed],
            "records": self.records,
        }


def default_date_range(
    lookback_days: float | None = None,
    now: datetime | None = None,
) -> Tuple[datetime, datetime]:
    """Range ending now and reaching `lookback_days` back."""
    days = settings.INTRADAY_LOOKBACK_DAYS if lookback_days is None else lookback_days
    end = now or datetime.now(timezone.utc)
    return end - timedelta(days=days), end


class IntradaySyncService:
    """
    Synchronize intraday bars for a list of symbols into the interval's table.

    Every symbol is paged through sequentially; symbols run concurrently under
    the batch runner's per-window quota. A symbol that fails leaves its stored
    rows untouched and does not affect the others.
    """

    def __init__(
        self,
        provider: IntradayDataProvider | None = None,
        symbol_source: FileSymbolSource | None = None,
        config: SyncConfig | None = None,
        database_url: str | None = None,
    ):
        self.provider = provider or get_market_data_provider()
        self.symbol_source = symbol_source or FileSymbolSource()
        self.config = config or SyncConfig.from_settings()
        self.database_url = database_url or settings.DATABASE_URL

    async def sync_symbol(
        self,
        persister: IntradayWindowPersister,
        symbol: str,
        interval: str,
        date_from: str,
        date_to: str,
        offset: int = 0,
    ) -> SymbolSyncResult:
        limit = self.config.page_limit
        result = SymbolSyncResult(symbol=symbol, last_offset=offset)

        while True:
            logger.info(
                "Syncing %s %s from %s to %s at offset %s",
                symbol,
                interval,
                date_from,
                date_to,
                offset,
            )
            began_at = time.monotonic()
            page = await self.provider.fetch_intraday_page(
                symbol,
                interval,
                date_from,
                date_to,
                limit=limit,
                offset=offset,
                sort="ASC",
            )
            await persister.persist_page(symbol, interval, page.data)
            result.pages += 1
            result.records += len(page.data)
            result.last_offset = offset

            elapsed_ms = (time.monotonic() - began_at) * 1000
            if elapsed_ms < self.config.min_call_ms:
                await _sleep((self.config.min_call_ms - elapsed_ms) / 1000)

            if page.pagination.count < limit:
                return result
            offset += limit

    async def sync_range(
        self,
        interval: str,
        date_from: datetime,
        date_to: datetime,
        symbols: Sequence[str] | None = None,
    ) -> RangeSyncReport:
        get_intraday_model(interval)
        start_str = format_provider_date(date_from)
        end_str = format_provider_date(date_to)
        report = RangeSyncReport(
            interval=interval,
            date_from=start_str,
            date_to=end_str,
            started_at=datetime.now(timezone.utc),
        )
        logger.info("Intraday sync started @ %s", report.started_at.isoformat())

        if symbols is None:
            symbols = await self.symbol_source.get_symbols()
        symbols = list(symbols)
        self._log_throttle(len(symbols))

        engine = build_engine(self.database_url)
        try:
            persister = IntradayWindowPersister(
                build_session_factory(engine),
                serialize_writes=is_sqlite_url(self.database_url),
            )
            jobs = [
                self._symbol_job(persister, symbol, interval, start_str, end_str)
                for symbol in symbols
            ]
            runner = ThrottledBatchRunner(self.config.batch_quota, self.config.batch_window_ms)
            outcomes = await runner.run(jobs)
        finally:
            await engine.dispose()
            await self.provider.aclose()

        report.outcomes = [
            SymbolOutcome(symbol=symbol, outcome=outcome)
            for symbol, outcome in zip(symbols, outcomes)
        ]
        for failed in report.failed:
            logger.error("Intraday sync failed for %s: %s", failed.symbol, failed.outcome.error)

        report.finished_at = datetime.now(timezone.utc)
        logger.info(
            "Intraday sync finished @ %s: %s/%s symbols succeeded, %s records",
            report.finished_at.isoformat(),
            len(report.succeeded),
            len(report.outcomes),
            report.records,
        )
        return report

    def _symbol_job(
        self,
        persister: IntradayWindowPersister,
        symbol: str,
        interval: str,
        date_from: str,
        date_to: str,
    ):
        async def job() -> SymbolSyncResult:
            return await self.sync_symbol(persister, symbol, interval, date_from, date_to)

        return job

    def _log_throttle(self, symbol_count: int) -> None:
        peak = self.config.estimated_peak_rate()
        logger.info(
            "Throttle: %s symbols in %s chunks of %s per %sms, %sms per call, peak ~%.2f req/s",
            symbol_count,
            chunk_count(symbol_count, self.config.batch_quota),
            self.config.batch_quota,
            self.config.batch_window_ms,
            self.config.min_call_ms,
            peak,
        )
        if peak > self.config.max_requests_per_sec:
            logger.warning(
                "Estimated peak rate %.2f req/s exceeds provider ceiling of %s req/s",
                peak,
                self.config.max_requests_per_sec,
            )


async def _sleep(seconds: float) -> None:
    if seconds > 0:
        await asyncio.sleep(seconds)
