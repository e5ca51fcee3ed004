"""
Pytest configuration and shared fixtures.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

import tickstore.models  # noqa: F401
from tickstore.core.database import Base, build_session_factory
from tickstore.services.market_data.base import (
    IntradayDataProvider,
    IntradayPage,
    IntradayRecord,
    Pagination,
)

BASE_DATE = datetime(2024, 1, 2, 14, 30, tzinfo=timezone.utc)


def build_records(
    symbol: str,
    count: int,
    start: datetime = BASE_DATE,
    step_minutes: int = 5,
    close: float = 100.0,
) -> List[IntradayRecord]:
    return [
        IntradayRecord(
            date=start + timedelta(minutes=step_minutes * i),
            symbol=symbol,
            exchange="XNAS",
            open=close - 0.5,
            high=close + 1.0,
            low=close - 1.0,
            close=close,
            last=close,
            volume=1000.0 + i,
        )
        for i in range(count)
    ]


def build_page(records: List[IntradayRecord], limit: int = 1000, offset: int = 0, total: Optional[int] = None) -> IntradayPage:
    return IntradayPage(
        pagination=Pagination(
            limit=limit,
            offset=offset,
            count=len(records),
            total=total if total is not None else offset + len(records),
        ),
        data=records,
    )


class FakeProvider(IntradayDataProvider):
    """In-memory provider serving pre-built pages by symbol and offset."""

    def __init__(
        self,
        pages: Optional[Dict[str, List[IntradayPage]]] = None,
        errors: Optional[Dict[str, Exception]] = None,
        delay: float = 0.0,
    ):
        self.pages = pages or {}
        self.errors = errors or {}
        self.delay = delay
        self.calls: List[dict] = []
        self.closed = False

    async def fetch_intraday_page(self, symbol, interval, date_from, date_to, limit, offset=0, sort="ASC"):
        self.calls.append({
            "symbol": symbol,
            "interval": interval,
            "date_from": date_from,
            "date_to": date_to,
            "limit": limit,
            "offset": offset,
            "sort": sort,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if symbol in self.errors:
            raise self.errors[symbol]
        pages = self.pages.get(symbol, [])
        index = offset // limit
        if index < len(pages):
            return pages[index]
        return build_page([], limit=limit, offset=offset)

    async def aclose(self) -> None:
        self.closed = True


class RecordingPersister:
    """Stands in for the window persister and records every call."""

    def __init__(self, fail_on: Optional[str] = None):
        self.calls: List[tuple] = []
        self.fail_on = fail_on

    async def persist_page(self, symbol, interval, records):
        if symbol == self.fail_on:
            raise RuntimeError(f"cannot persist {symbol}")
        self.calls.append((symbol, interval, list(records)))
        return len(records)


@pytest.fixture
def make_records() -> Callable[..., List[IntradayRecord]]:
    return build_records


@pytest.fixture
def make_page() -> Callable[..., IntradayPage]:
    return build_page


@pytest.fixture
def fake_provider_cls():
    return FakeProvider


@pytest.fixture
def recording_persister() -> RecordingPersister:
    return RecordingPersister()


@pytest.fixture
def failing_persister() -> RecordingPersister:
    return RecordingPersister(fail_on="AAPL")


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'tickstore.db'}"


@pytest_asyncio.fixture
async def engine(db_url):
    engine = create_async_engine(db_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def symbols_file(tmp_path):
    path = tmp_path / "symbols.txt"
    path.write_text("AAPL\nMSFT\n\nTSLA\n", encoding="utf-8")
    return path
