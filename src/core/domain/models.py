"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los reportes de build se serializan a JSON sin código extra.

Nota:
- Estos modelos describen *qué* es un build de blocklist, no *cómo* se ejecuta.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from core.config import validate_timezone_name
from core.domain.formats import ListFormat


class SourceKind(str, Enum):
    """How a source's records are decoded."""

    TEXT = "text"
    QUERY_LOG = "query_log"


class FailurePolicy(str, Enum):
    """What to do when one source of a multi-source build fails."""

    SKIP = "skip"
    ABORT = "abort"


class SourceSpec(BaseModel):
    """One input of a build: a local path or a remote URL."""

    model_config = ConfigDict(frozen=True)

    location: str = Field(
        ...,
        min_length=1,
        description="Local path or http(s) URL.",
    )
    kind: SourceKind = Field(
        default=SourceKind.TEXT,
        description="Line grammar of the source.",
    )
    apply_keywords: bool = Field(
        default=True,
        description="Whether the build's keyword filter applies to this source.",
    )

    @property
    def is_remote(self) -> bool:
        return self.location.startswith(("http://", "https://"))


class DomainSet(BaseModel):
    """Unique, lowercase, sorted domains.

    The tuple is canonicalized on construction so two sets with the same
    members are always equal and render identically.
    """

    model_config = ConfigDict(frozen=True)

    domains: tuple[str, ...] = Field(
        default=(),
        description="Domains in byte-wise ascending order.",
    )

    @field_validator("domains", mode="before")
    @classmethod
    def _canonical(cls, value: Iterable[str]) -> tuple[str, ...]:
        return tuple(sorted({d.strip().lower() for d in value if d and d.strip()}))

    @property
    def size(self) -> int:
        return len(self.domains)

    def __len__(self) -> int:
        return len(self.domains)

    def __contains__(self, domain: object) -> bool:
        return isinstance(domain, str) and domain.lower() in self.domains


class ListHeader(BaseModel):
    """Metadata rendered at the top of every list."""

    title: str = Field(..., min_length=1)
    description: str = Field(default="")
    generated_at: datetime = Field(
        ...,
        description="Timezone-aware generation moment.",
    )
    sources: list[str] = Field(
        default_factory=list,
        description="Upstream URLs/paths listed for provenance.",
    )
    domain_count: int = Field(default=0, ge=0)

    def timestamp_label(self) -> str:
        """`YYYY-MM-DD hh:mm AM/PM TZ`, to the minute."""

        return self.generated_at.strftime("%Y-%m-%d %I:%M %p %Z").strip()


class RenderedList(BaseModel):
    """Final text artifact for one (DomainSet, format) pair."""

    model_config = ConfigDict(frozen=True)

    format: ListFormat
    text: str
    domain_count: int = Field(default=0, ge=0)


class BuildConfig(BaseModel):
    """Immutable configuration of one build, passed to every stage."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        default="personal",
        min_length=1,
        max_length=64,
        description="List name; output files are `<name>_blocklist_<format>.txt`.",
    )
    title: str = Field(default="Personal Blocklist", min_length=1)
    description: str = Field(default="Domains blocked based on personal preferences")
    sources: tuple[SourceSpec, ...] = Field(default=())
    output_dir: Path = Field(default=Path("blocklists"))
    formats: tuple[ListFormat, ...] = Field(default=(ListFormat.HOSTS,))

    keywords: tuple[str, ...] = Field(
        default=(),
        description="Substring filter (OR). Empty disables filtering.",
    )
    keyword_case_sensitive: bool = Field(default=True)

    merge_previous: bool = Field(
        default=False,
        description="Union with the domains of the previously rendered lists.",
    )
    allow_empty: bool = Field(
        default=False,
        description="Write headered empty lists instead of failing on zero domains.",
    )
    on_source_failure: FailurePolicy = Field(default=FailurePolicy.SKIP)

    fetch_timeout_seconds: float = Field(default=30.0, gt=0)
    fetch_max_retries: int = Field(default=3, ge=0, le=10)
    retry_backoff_seconds: float = Field(default=1.0, ge=0)
    timezone: str = Field(default="Asia/Karachi")
    hosts_sink_address: str = Field(default="0.0.0.0", min_length=1)

    record_filter: dict[str, str] = Field(
        default_factory=dict,
        description="Field == value pairs a query-log record must satisfy.",
    )
    record_domain_field: str = Field(default="domain", min_length=1)

    chunk_size: int = Field(default=1000, ge=1)
    max_concurrency: int = Field(default=8, ge=1)
    verbose: bool = Field(default=False)

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        return validate_timezone_name(value)

    @field_validator("formats", mode="before")
    @classmethod
    def _parse_formats(cls, value: object) -> object:
        if isinstance(value, (str, ListFormat)):
            value = (value,)
        if isinstance(value, (list, tuple)):
            parsed: list[ListFormat] = []
            for item in value:
                fmt = item if isinstance(item, ListFormat) else ListFormat.parse(str(item))
                if fmt not in parsed:
                    parsed.append(fmt)
            return tuple(parsed)
        return value

    @field_validator("formats")
    @classmethod
    def _non_empty_formats(cls, value: tuple[ListFormat, ...]) -> tuple[ListFormat, ...]:
        if not value:
            raise ValueError("at least one output format is required")
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _clean_keywords(cls, value: object) -> object:
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(k for k in (str(v).strip() for v in value) if k)
        return value

    def output_path(self, fmt: ListFormat) -> Path:
        return self.output_dir / f"{self.name}_blocklist_{fmt.value}.txt"


class SourceReport(BaseModel):
    """Outcome of reading and filtering one source."""

    location: str
    ok: bool = True
    error: str | None = None
    records: int = Field(default=0, ge=0)
    candidates: int = Field(default=0, ge=0)
    rejected: int = Field(default=0, ge=0)
    filtered_out: int = Field(default=0, ge=0)
    accepted: int = Field(default=0, ge=0)


class CountEntry(BaseModel):
    label: str
    count: int = Field(ge=0)


class ListStats(BaseModel):
    """Summary statistics appended to the run log."""

    total: int = Field(default=0, ge=0)
    top_tlds: list[CountEntry] = Field(default_factory=list)
    top_parents: list[CountEntry] = Field(default_factory=list)


class BuildReport(BaseModel):
    """Summary of one build, exportable as JSON."""

    name: str
    generated_at: datetime
    domain_count: int = Field(default=0, ge=0)
    merged_from_previous: int = Field(
        default=0,
        ge=0,
        description="Domains that came only from the previous lists.",
    )
    outputs: dict[str, Path] = Field(
        default_factory=dict,
        description="Format value -> written file.",
    )
    sources: list[SourceReport] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    stats: ListStats = Field(default_factory=ListStats)
