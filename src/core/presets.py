"""Built-in build presets.

Each preset reproduces one of the historical list generators so a scheduled
job only has to say `build --preset xiaomi`. CLI options override any field.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from core.config import AppSettings
from core.domain.formats import ListFormat
from core.domain.models import BuildConfig, FailurePolicy, SourceKind, SourceSpec
from core.errors import ConfigurationError

XIAOMI_SPECIFIC_URL = "https://cdn.jsdelivr.net/gh/hagezi/dns-blocklists@latest/domains/native.xiaomi.txt"
XIAOMI_GENERAL_URLS: tuple[str, ...] = (
    "https://raw.githubusercontent.com/hagezi/dns-blocklists/main/adblock/pro.plus.txt",
    "https://adguardteam.github.io/AdGuardSDNSFilter/Filters/filter.txt",
)

PRESETS: dict[str, dict[str, Any]] = {
    "personal": {
        "name": "personal",
        "title": "Personal Blocklist",
        "description": "Domains blocked based on personal preferences",
        "sources": (SourceSpec(location="input.json", kind=SourceKind.QUERY_LOG),),
        "formats": (ListFormat.PLAIN, ListFormat.ADBLOCK),
        "record_filter": {"status": "REQUEST_BLOCKED", "device": "Phone"},
        "allow_empty": True,
    },
    "xiaomi": {
        "name": "xiaomi",
        "title": "Xiaomi Ads and Tracking Blocklist",
        "description": "Domains related to Xiaomi ads and tracking, compiled from multiple sources.",
        "sources": (
            SourceSpec(location=XIAOMI_SPECIFIC_URL, apply_keywords=False),
            *(SourceSpec(location=url) for url in XIAOMI_GENERAL_URLS),
        ),
        "formats": (ListFormat.ADBLOCK, ListFormat.HOSTS),
        "keywords": ("xiaomi", "miui"),
        "on_source_failure": FailurePolicy.SKIP,
        "allow_empty": False,
    },
    "url-list": {
        "name": "personal",
        "title": "Personal Blocklist",
        "description": "Domains blocked based on personal preferences",
        "sources": (SourceSpec(location="url-list.txt"),),
        "formats": (ListFormat.HOSTS,),
        "allow_empty": False,
    },
}


def get_preset(name: str) -> dict[str, Any]:
    """Return a copy of the preset's `BuildConfig` fields."""

    key = name.strip().lower()
    if key not in PRESETS:
        known = ", ".join(sorted(PRESETS))
        raise ConfigurationError(f"Unknown preset '{name}' (known: {known})", {"preset": name})
    return dict(PRESETS[key])


def resolve_build_config(
    settings: AppSettings,
    *,
    preset: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> BuildConfig:
    """Assemble the immutable run configuration.

    Precedence: explicit overrides, then the preset, then `AppSettings`.
    `None` overrides are ignored so unset CLI options keep lower layers.
    """

    fields: dict[str, Any] = {
        "output_dir": settings.output_dir,
        "fetch_timeout_seconds": settings.http_timeout_seconds,
        "fetch_max_retries": settings.fetch_max_retries,
        "retry_backoff_seconds": settings.retry_backoff_seconds,
        "timezone": settings.timezone,
        "chunk_size": settings.chunk_size,
        "max_concurrency": settings.max_concurrency,
    }
    if preset:
        fields.update(get_preset(preset))
    fields.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return BuildConfig(**fields)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid build configuration: {problems}") from exc
