import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Sequence

from sqlalchemy import delete, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from tickstore.models.intraday_bar import get_intraday_model
from tickstore.services.market_data.base import IntradayRecord

logger = logging.getLogger(__name__)

INSERT_BATCH_SIZE = 1000


class IntradayWindowPersister:
    """
    Replace one page of a symbol's bars in a single transaction.

    Rows for the symbol whose date falls between the page's first and last
    record are deleted, then the page is inserted. Persisting the same page
    twice leaves the same rows as persisting it once.
    """

    def __init__(self, session_factory: async_sessionmaker, serialize_writes: bool = False):
        self.session_factory = session_factory
        self._write_lock = asyncio.Lock() if serialize_writes else None

    async def persist_page(
        self,
        symbol: str,
        interval: str,
        records: Sequence[IntradayRecord],
    ) -> int:
        model = get_intraday_model(interval)
        table = model.__table__

        async with self._writer():
            async with self.session_factory() as session:
                try:
                    async with session.begin():
                        if records:
                            min_date = records[0].date
                            max_date = records[-1].date
                            await session.execute(
                                delete(table).where(
                                    table.c.symbol == symbol,
                                    table.c.date.between(min_date, max_date),
                                )
                            )
                            # Keyed by the requested symbol, same as the delete
                            rows = [{**record.to_row(), "symbol": symbol} for record in records]
                            for i in range(0, len(rows), INSERT_BATCH_SIZE):
                                await session.execute(insert(table), rows[i:i + INSERT_BATCH_SIZE])
                except SQLAlchemyError as exc:
                    logger.error(
                        "Failed to persist %s %s rows for %s: %s",
                        len(records),
                        interval,
                        symbol,
                        exc,
                    )
                    raise

        if records:
            logger.debug(
                "Replaced %s %s rows for %s between %s and %s",
                len(records),
                interval,
                symbol,
                records[0].date,
                records[-1].date,
            )
        return len(records)

    @asynccontextmanager
    async def _writer(self) -> AsyncIterator[None]:
        if self._write_lock is None:
            yield
            return
        async with self._write_lock:
            yield
