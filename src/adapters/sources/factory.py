from __future__ import annotations

from pathlib import Path

import httpx

from adapters.sources.local_text import LocalTextSource
from adapters.sources.query_log import QueryLogSource
from adapters.sources.remote_text import RemoteTextSource
from core.domain.models import BuildConfig, SourceKind, SourceSpec
from core.errors import ConfigurationError
from core.interfaces.source import RecordSource


def build_source(spec: SourceSpec, *, config: BuildConfig, client: httpx.AsyncClient) -> RecordSource:
    """Map a `SourceSpec` to its reader."""

    if spec.is_remote:
        if spec.kind is not SourceKind.TEXT:
            raise ConfigurationError(
                f"Remote sources must be text lists: {spec.location}",
                {"location": spec.location, "kind": spec.kind.value},
            )
        return RemoteTextSource(
            spec.location,
            client,
            apply_keywords=spec.apply_keywords,
            max_retries=config.fetch_max_retries,
            backoff_seconds=config.retry_backoff_seconds,
        )
    if spec.kind is SourceKind.QUERY_LOG:
        return QueryLogSource(Path(spec.location), apply_keywords=spec.apply_keywords)
    return LocalTextSource(Path(spec.location), apply_keywords=spec.apply_keywords)
