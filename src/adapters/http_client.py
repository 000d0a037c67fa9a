"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers, retries y logging para cada lista remota.
- Facilita testeo: los tests pasan un client sobre `httpx.MockTransport`.
"""

from __future__ import annotations

import asyncio
import logging
import random

import httpx

from core.config import AppSettings
from core.errors import FetchError

logger = logging.getLogger(__name__)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    timeout_seconds: float | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las fuentes se comporten igual.
    - El timeout de cada ejecución reemplaza al default de settings.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "text/plain,text/*;q=0.9,*/*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds or settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
    )


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_retries: int = 3,
    backoff_seconds: float = 1.0,
) -> str:
    """GET `url` and return its body, retrying transient failures.

    Non-2xx responses, timeouts and connection errors all count as failed
    attempts. After `max_retries` retries a `FetchError` is raised.
    """

    attempts = max(1, max_retries + 1)
    last_error = "unknown error"
    for attempt in range(attempts):
        try:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
        except httpx.HTTPStatusError as exc:
            last_error = f"HTTP {exc.response.status_code}"
        except httpx.TransportError as exc:
            last_error = f"{type(exc).__name__}: {exc}".rstrip(": ")

        if attempt >= attempts - 1:
            break
        base = backoff_seconds * (2**attempt)
        delay = base + random.uniform(0.0, 0.35) if base else 0.0
        logger.warning(
            "Fetch attempt %d/%d for %s failed (%s); retrying in %.1fs",
            attempt + 1,
            attempts,
            url,
            last_error,
            delay,
        )
        await asyncio.sleep(delay)

    raise FetchError(url, last_error, attempts)
