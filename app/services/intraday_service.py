from __future__ import annotations

import asyncio
import json
import logging

from app.exceptions import FailureKind, IntradayFailure, IntradayServiceError, UpstreamFetchError
from app.exchanges.base import ExchangeAdapter
from app.schemas.intraday import DailySummarySchema
from app.utils.aggregation import aggregate_daily, format_daily_results
from app.utils.validators import extract_time_series, validate_response

logger = logging.getLogger(__name__)


def _error(kind: FailureKind, message: str) -> IntradayServiceError:
    return IntradayServiceError(IntradayFailure(kind, message))


class IntradayService:
    def __init__(self, adapter: ExchangeAdapter, api_key: str | None):
        self.adapter = adapter
        self.api_key = api_key

    async def get_daily_summary(self, symbol: str, cancel_event: asyncio.Event | None = None) -> list[DailySummarySchema]:
        if not symbol or not symbol.strip():
            raise _error(FailureKind.INPUT_VALIDATION, "Symbol is required.")
        if not self.api_key or not self.api_key.strip():
            raise _error(FailureKind.CONFIGURATION, "ALPHAVANTAGE_API_KEY is not set in .env or environment.")

        url = self.adapter.build_intraday_url(symbol, self.api_key)
        try:
            body = await self.adapter.fetch_text(url, cancel_event)
        except UpstreamFetchError as exc:
            logger.warning(f"AlphaVantage fetch failed for {symbol}: {exc}")
            raise _error(FailureKind.TRANSPORT, f"Error fetching data from AlphaVantage: {exc}") from exc

        try:
            document = json.loads(body)
        except ValueError as exc:
            logger.warning(f"AlphaVantage returned a non-JSON body for {symbol}: {exc}")
            raise _error(FailureKind.TRANSPORT, f"Error parsing AlphaVantage response: {exc}") from exc

        failure = validate_response(document)
        if failure is not None:
            logger.warning(f"AlphaVantage rejected {symbol}", extra={"kind": failure.kind.value})
            raise IntradayServiceError(failure)

        series = extract_time_series(document)
        if series is None:
            raise _error(FailureKind.MISSING_SERIES, "Could not find a 'Time Series' property in the API response.")

        grouped = aggregate_daily(series)
        logger.info(f"Aggregated {len(series)} bars into {len(grouped)} days for {symbol}")
        return format_daily_results(grouped)
