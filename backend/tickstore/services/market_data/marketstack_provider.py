import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from tickstore.core.config import settings
from tickstore.services.market_data.base import (
    IntradayDataProvider,
    IntradayPage,
    IntradayRecord,
    Pagination,
    ProviderError,
    parse_provider_date,
)

logger = logging.getLogger(__name__)


class MarketstackProvider(IntradayDataProvider):
    """Intraday provider backed by the Marketstack `/intraday` endpoint."""

    def __init__(
        self,
        access_key: str | None = None,
        base_url: str | None = None,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.access_key = settings.MARKETSTACK_ACCESS_KEY if access_key is None else access_key
        self.base_url = (settings.MARKETSTACK_BASE_URL if base_url is None else base_url).rstrip("/")
        self.timeout_sec = (
            settings.PROVIDER_REQUEST_TIMEOUT_SEC if timeout_sec is None else timeout_sec
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_sec,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

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
        params = {
            "symbols": symbol,
            "date_from": date_from,
            "date_to": date_to,
            "limit": limit,
            "sort": sort,
            "interval": interval,
            "offset": offset,
        }
        try:
            resp = await self._get_client().get(
                "/intraday", params={"access_key": self.access_key, **params}
            )
        except httpx.HTTPError as exc:
            logger.error("Marketstack request failed for %s: %s params=%s", symbol, exc, params)
            raise ProviderError(str(exc), code=type(exc).__name__, params=params) from exc

        if not resp.is_success:
            code, message = self._error_details(resp)
            logger.error(
                "Marketstack intraday error for %s: %s %s %s/%s params=%s @%s",
                symbol,
                resp.status_code,
                resp.reason_phrase,
                code,
                message,
                params,
                datetime.now(timezone.utc).isoformat(),
            )
            raise ProviderError(message, status_code=resp.status_code, code=code, params=params)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProviderError(
                "Response body is not JSON",
                status_code=resp.status_code,
                code="invalid_response",
                params=params,
            ) from exc
        return self._parse_page(payload, params)

    def _error_details(self, resp: httpx.Response) -> tuple[str, str]:
        try:
            error = resp.json().get("error") or {}
        except (ValueError, AttributeError):
            error = {}
        if not isinstance(error, dict):
            error = {}
        code = str(error.get("code") or resp.status_code)
        message = str(error.get("message") or resp.reason_phrase or "request failed")
        return code, message

    def _parse_page(self, payload: Any, params: dict[str, Any]) -> IntradayPage:
        try:
            raw_pagination = payload["pagination"]
            pagination = Pagination(
                limit=int(raw_pagination["limit"]),
                offset=int(raw_pagination["offset"]),
                count=int(raw_pagination["count"]),
                total=int(raw_pagination["total"]),
            )
            records = [self._parse_record(row) for row in payload.get("data") or []]
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(
                f"Malformed intraday payload: {exc}",
                code="invalid_response",
                params=params,
            ) from exc
        return IntradayPage(pagination=pagination, data=records)

    def _parse_record(self, row: dict[str, Any]) -> IntradayRecord:
        return IntradayRecord(
            date=parse_provider_date(row["date"]),
            symbol=row["symbol"],
            exchange=row.get("exchange"),
            open=_num(row.get("open")),
            high=_num(row.get("high")),
            low=_num(row.get("low")),
            close=_num(row.get("close")),
            last=_num(row.get("last")),
            volume=_num(row.get("volume")),
        )


def _num(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)
