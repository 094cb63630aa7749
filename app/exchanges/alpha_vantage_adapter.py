from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlencode

import httpx

from app.exceptions import UpstreamFetchError
from app.exchanges.base import ExchangeAdapter

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.alphavantage.co/query"
INTRADAY_INTERVAL = "15min"


def build_intraday_url(symbol: str, api_key: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Build the TIME_SERIES_INTRADAY query URL for one symbol.

    The symbol is passed through as given; the upstream decides whether it is valid.
    """
    params = {
        "function": "TIME_SERIES_INTRADAY",
        "symbol": symbol,
        "interval": INTRADAY_INTERVAL,
        "outputsize": "full",
        "apikey": api_key,
        "datatype": "json",
    }
    return f"{base_url}?{urlencode(params)}"


class AlphaVantageAdapter(ExchangeAdapter):
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def build_intraday_url(self, symbol: str, api_key: str) -> str:
        return build_intraday_url(symbol, api_key, base_url=self.base_url)

    async def _request(self, url: str) -> str:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            transport=self._transport,
            headers={"User-Agent": "alphavantage-intraday-aggregator/1.0"},
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text

    async def _get_text(self, url: str) -> str:
        # httpx timeouts are per phase; the deadline covers the whole exchange
        try:
            return await asyncio.wait_for(self._request(url), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise UpstreamFetchError(
                f"The request was canceled due to the configured timeout of {self.timeout_seconds} seconds elapsing."
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeDecodeError) as exc:
            raise UpstreamFetchError(str(exc) or exc.__class__.__name__) from exc

    async def fetch_text(self, url: str, cancel_event: asyncio.Event | None = None) -> str:
        """Issue a single GET and return the body text.

        The whole request, body included, must finish within ``timeout_seconds``.
        When ``cancel_event`` is set before the response arrives the in-flight
        request is aborted and reported as a fetch failure. There are no retries.
        """
        if cancel_event is None:
            return await self._get_text(url)

        fetch = asyncio.create_task(self._get_text(url))
        watcher = asyncio.create_task(cancel_event.wait())
        try:
            await asyncio.wait({fetch, watcher}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await _cancel_and_wait(fetch)
            raise
        finally:
            watcher.cancel()

        if fetch.done():
            return fetch.result()

        logger.info("Upstream fetch cancelled by caller")
        await _cancel_and_wait(fetch)
        raise UpstreamFetchError("The operation was canceled.")


async def _cancel_and_wait(task: asyncio.Task):
    task.cancel()
    try:
        await task
    except (asyncio.CancelledError, UpstreamFetchError):
        pass
