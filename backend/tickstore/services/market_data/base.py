from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

PROVIDER_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class ProviderError(Exception):
    """A provider call that did not return a usable page."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.params = params or {}

    def __str__(self) -> str:
        status = self.status_code if self.status_code is not None else "-"
        return f"[{status} {self.code or 'error'}] {self.message} params={self.params}"


@dataclass
class Pagination:
    limit: int
    offset: int
    count: int
    total: int


@dataclass
class IntradayRecord:
    """One intraday observation as returned by a provider."""
    date: datetime
    symbol: str
    exchange: Optional[str] = None
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None
    last: Optional[float] = None
    volume: Optional[float] = None

    def to_row(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "symbol": self.symbol,
            "exchange": self.exchange,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "last": self.last,
            "volume": self.volume,
        }


@dataclass
class IntradayPage:
    """
    One page of records plus pagination metadata.
    Records are sorted ascending by date, so the first and last
    dates bound the page's span.
    """
    pagination: Pagination
    data: list[IntradayRecord] = field(default_factory=list)


def parse_provider_date(value: str) -> datetime:
    """Parse `2024-01-02T15:30:00+0000` style timestamps to UTC."""
    try:
        parsed = datetime.strptime(value, PROVIDER_DATE_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_provider_date(value: datetime) -> str:
    """Format a datetime as the provider expects: UTC, second precision, +0000."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S+0000")


class IntradayDataProvider(ABC):
    """Abstract base class for paginated intraday data providers."""

    @abstractmethod
    async def fetch_intraday_page(
        self,
        symbol: str,
        interval: str,
        date_from: str,
        date_to: str,
        limit: int,
        offset: int = 0,
        sort: str = "ASC",
    ) -> IntradayPage:
        """
        Fetch one page of intraday records.
        Raises ProviderError on any non-success response.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release any client resources held by the provider."""
        return None
