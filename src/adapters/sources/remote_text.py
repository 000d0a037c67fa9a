"""Remote text source fetched over HTTP(S)."""

from __future__ import annotations

import logging
from typing import Iterator

import httpx

from adapters.http_client import fetch_text
from core.interfaces.source import RawRecord, RecordSource

logger = logging.getLogger(__name__)


class RemoteTextSource(RecordSource):
    """Downloads a list once; records are its lines."""

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient,
        *,
        apply_keywords: bool = True,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
    ) -> None:
        self.location = url
        self.apply_keywords = apply_keywords
        self._client = client
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds

    async def read(self) -> Iterator[RawRecord]:
        logger.info("Fetching domain list from %s", self.location)
        text = await fetch_text(
            self._client,
            self.location,
            max_retries=self._max_retries,
            backoff_seconds=self._backoff_seconds,
        )
        return iter(text.splitlines())
