from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod


class ExchangeAdapter(ABC):
    @abstractmethod
    def build_intraday_url(self, symbol: str, api_key: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def fetch_text(self, url: str, cancel_event: asyncio.Event | None = None) -> str:
        raise NotImplementedError
