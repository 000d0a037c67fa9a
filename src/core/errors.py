"""Taxonomía de excepciones del pipeline de blocklists.

Por qué un solo módulo:
- La CLI solo necesita capturar `BlocklistError` para convertir cualquier
  fallo fatal en un mensaje legible y un exit code distinto de cero.
- Los adaptadores lanzan la subclase precisa; el pipeline decide si omite o aborta.
"""

from __future__ import annotations

from typing import Any


class BlocklistError(Exception):
    """Base exception for every pipeline failure."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(BlocklistError):
    """Unknown preset/format or an invalid option value."""


class InputNotFoundError(BlocklistError):
    """A required local input file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Input file not found: {path}", {"path": path})


class InputEmptyError(BlocklistError):
    """A required local input file has no readable records."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Input file is empty: {path}", {"path": path})


class FetchError(BlocklistError):
    """A remote source could not be fetched after all retries."""

    def __init__(self, url: str, reason: str, attempts: int = 0) -> None:
        super().__init__(
            f"Failed to fetch domain list from {url}: {reason}",
            {"url": url, "attempts": attempts},
        )
        self.url = url
        self.reason = reason
        self.attempts = attempts


class NoDomainsError(BlocklistError):
    """The run produced zero domains and empty output is not allowed."""


class RenderError(BlocklistError):
    """An output list could not be written or failed verification."""
