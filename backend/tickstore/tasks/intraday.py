from datetime import datetime, timezone
import asyncio
import logging

from tickstore.core.config import settings
from tickstore.core.redis import get_redis, StreamNames
from tickstore.scheduler.celery_app import app
from tickstore.services.intraday_sync_service import (
    IntradaySyncService,
    RangeSyncReport,
    default_date_range,
)

logger = logging.getLogger(__name__)


@app.task(name="tickstore.tasks.intraday.sync_intraday")
def sync_intraday(
    interval: str | None = None,
    lookback_days: float | None = None,
) -> dict[str, object]:
    """
    Scheduled task to synchronize recent intraday bars.
    Re-syncs the last few days so late corrections replace stored rows.
    """
    interval = interval or settings.INTRADAY_DEFAULT_INTERVAL
    lookback = settings.INTRADAY_SCHEDULED_LOOKBACK_DAYS if lookback_days is None else lookback_days

    report = asyncio.run(_sync_intraday_async(interval, lookback))
    summary = report.summary()

    if report.succeeded:
        logger.info(
            "Synced %s %s records for %s symbols",
            report.records,
            interval,
            len(report.succeeded),
        )
        # Publish to intraday-bars stream for downstream consumers
        try:
            r = get_redis()
            r.xadd(StreamNames.INTRADAY_BARS, {
                "event_type": "batch_complete",
                "interval": interval,
                "date_from": report.date_from,
                "date_to": report.date_to,
                "symbols": ",".join(o.symbol for o in report.succeeded),
                "count": str(report.records),
            })
        except Exception as e:
            logger.error(f"Failed to publish stream event: {e}")
    else:
        logger.warning("No symbols synced")

    if report.failed:
        logger.error(f"Intraday sync failed for {len(report.failed)} symbols")
        try:
            r = get_redis()
            r.xadd(StreamNames.ALERTS, {
                "level": "ERROR",
                "title": "Intraday Sync Failures",
                "message": (
                    f"{len(report.failed)} of {len(report.outcomes)} symbols failed: "
                    + ",".join(o.symbol for o in report.failed)
                ),
            })
        except Exception as e:
            logger.error(f"Failed to publish alert: {e}")

    return {"status": "completed", **summary}


async def _sync_intraday_async(interval: str, lookback_days: float) -> RangeSyncReport:
    service = IntradaySyncService()
    date_from, date_to = default_date_range(lookback_days, now=datetime.now(timezone.utc))
    return await service.sync_range(interval, date_from, date_to)
