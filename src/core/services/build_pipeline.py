"""Blocklist build orchestration.

This module runs the whole flow for one `BuildConfig`:

    sources -> extract -> validate -> keyword filter -> normalize -> render -> write

The CLI delegates everything here, which keeps side-effects (console
tables, exit codes) out of the core and lets tests drive a full build with an
in-memory HTTP transport and a temporary output directory.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from itertools import islice
from typing import Iterable, Iterator, Sequence
from zoneinfo import ZoneInfo

import httpx

from adapters.http_client import build_async_client
from adapters.list_renderer import build_header, render_list
from adapters.list_writer import write_rendered_list
from adapters.sources import build_source, read_previous_domains
from core.config import AppSettings
from core.domain.formats import ListFormat, get_syntax
from core.domain.models import (
    BuildConfig,
    BuildReport,
    DomainSet,
    FailurePolicy,
    RenderedList,
    SourceReport,
    SourceSpec,
)
from core.errors import ConfigurationError, FetchError
from core.interfaces.source import RawRecord
from core.services.extraction import TokenExtractor, build_steps
from core.services.normalize import KeywordFilter, enforce_non_empty, normalize
from core.services.stats import compute_stats
from core.services.validation import ValidationTally

logger = logging.getLogger(__name__)


@dataclass
class ChunkResult:
    """Output of one extraction chunk (processed in a worker thread)."""

    domains: list[str] = field(default_factory=list)
    records: int = 0
    candidates: int = 0
    rejected: int = 0
    filtered_out: int = 0


@dataclass
class SourceResult:
    report: SourceReport
    domains: list[str] = field(default_factory=list)


@dataclass
class BuildResult:
    domain_set: DomainSet
    rendered: dict[ListFormat, RenderedList]
    report: BuildReport


def iter_chunks(records: Iterable[RawRecord], size: int) -> Iterator[list[RawRecord]]:
    iterator = iter(records)
    while chunk := list(islice(iterator, size)):
        yield chunk


def process_chunk(
    records: Sequence[RawRecord],
    *,
    extractor: TokenExtractor,
    keyword_filter: KeywordFilter | None,
    verbose: bool = False,
) -> ChunkResult:
    """Extract, validate and keyword-filter a block of records."""

    result = ChunkResult(records=len(records))
    tally = ValidationTally(verbose=verbose)
    for record in records:
        token = extractor.extract(record)
        if token is None:
            continue
        result.candidates += 1
        domain = tally.check(token)
        if domain is None:
            continue
        if keyword_filter is not None and not keyword_filter(domain):
            result.filtered_out += 1
            continue
        result.domains.append(domain)
    result.rejected = tally.rejected
    return result


async def process_records(
    records: Iterable[RawRecord],
    *,
    config: BuildConfig,
    extractor: TokenExtractor,
    keyword_filter: KeywordFilter | None,
) -> list[ChunkResult]:
    """Run `process_chunk` over `records` in worker threads.

    Chunks are read off the event loop as well, and at most
    `config.max_concurrency` of them are in flight at once.
    """

    chunks = iter_chunks(records, config.chunk_size)
    limit = max(1, config.max_concurrency)
    in_flight: set[asyncio.Task[ChunkResult]] = set()
    results: list[ChunkResult] = []
    try:
        while (chunk := await asyncio.to_thread(next, chunks, None)) is not None:
            if len(in_flight) >= limit:
                done, in_flight = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
                results.extend(task.result() for task in done)
            in_flight.add(
                asyncio.create_task(
                    asyncio.to_thread(
                        process_chunk,
                        chunk,
                        extractor=extractor,
                        keyword_filter=keyword_filter,
                        verbose=config.verbose,
                    )
                )
            )
        results.extend(await asyncio.gather(*in_flight))
    finally:
        for task in in_flight:
            task.cancel()
    return results


async def collect_source(
    spec: SourceSpec,
    *,
    config: BuildConfig,
    client: httpx.AsyncClient,
    extractor: TokenExtractor,
) -> SourceResult:
    source = build_source(spec, config=config, client=client)
    records = await source.read()

    keyword_filter: KeywordFilter | None = None
    if source.apply_keywords and config.keywords:
        keyword_filter = KeywordFilter(config.keywords, config.keyword_case_sensitive)

    chunks = await process_records(
        records,
        config=config,
        extractor=extractor,
        keyword_filter=keyword_filter,
    )

    report = SourceReport(location=spec.location)
    domains: list[str] = []
    for chunk in chunks:
        domains.extend(chunk.domains)
        report.records += chunk.records
        report.candidates += chunk.candidates
        report.rejected += chunk.rejected
        report.filtered_out += chunk.filtered_out
    report.accepted = len(domains)

    logger.info(
        "%s: %d records, %d candidates, %d invalid, %d filtered out, %d kept",
        spec.location,
        report.records,
        report.candidates,
        report.rejected,
        report.filtered_out,
        report.accepted,
    )
    return SourceResult(report=report, domains=domains)


async def gather_sources(
    *,
    config: BuildConfig,
    client: httpx.AsyncClient,
    extractor: TokenExtractor,
) -> tuple[list[SourceResult], list[str]]:
    """Fan out one task per source and apply the failure policy once all settled.

    Local input errors are always fatal. Fetch failures are fatal under
    `FailurePolicy.ABORT`; under `SKIP` they are logged and skipped unless no
    source at all succeeded.
    """

    sem = asyncio.Semaphore(max(1, config.max_concurrency))

    async def run_one(spec: SourceSpec) -> SourceResult:
        async with sem:
            return await collect_source(spec, config=config, client=client, extractor=extractor)

    outcomes = await asyncio.gather(
        *(run_one(spec) for spec in config.sources),
        return_exceptions=True,
    )

    results: list[SourceResult] = []
    failures: list[FetchError] = []
    warnings: list[str] = []
    for spec, outcome in zip(config.sources, outcomes):
        if isinstance(outcome, FetchError):
            if config.on_source_failure is FailurePolicy.ABORT:
                raise outcome
            failures.append(outcome)
            message = f"Skipping source {spec.location}: {outcome.reason}"
            logger.warning(message)
            warnings.append(message)
            results.append(
                SourceResult(report=SourceReport(location=spec.location, ok=False, error=outcome.reason))
            )
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        results.append(outcome)

    if failures and len(failures) == len(config.sources):
        raise failures[0]
    return results, warnings


async def build_blocklist(
    config: BuildConfig,
    *,
    settings: AppSettings | None = None,
    client: httpx.AsyncClient | None = None,
    generated_at: datetime | None = None,
    write: bool = True,
) -> BuildResult:
    """Run one build end to end and return the rendered lists and report."""

    if not config.sources:
        raise ConfigurationError("No input sources configured", {"name": config.name})

    logger.info("Starting blocklist generation for '%s'", config.name)
    moment = generated_at or datetime.now(ZoneInfo(config.timezone))
    extractor = TokenExtractor(
        predicate=config.record_filter,
        domain_field=config.record_domain_field,
        steps=build_steps(config.hosts_sink_address),
    )

    owns_client = client is None
    http = client or build_async_client(settings, timeout_seconds=config.fetch_timeout_seconds)
    try:
        results, warnings = await gather_sources(config=config, client=http, extractor=extractor)
    finally:
        if owns_client:
            await http.aclose()

    fresh = normalize(d for result in results for d in result.domains)
    logger.info("Unique domains extracted: %d", fresh.size)

    domain_set = fresh
    if config.merge_previous:
        previous = read_previous_domains(
            (config.output_path(fmt) for fmt in config.formats),
            sink_address=config.hosts_sink_address,
        )
        domain_set = normalize(fresh.domains, previous)
        logger.info(
            "Merged with previous lists: %d domains (%d carried forward)",
            domain_set.size,
            domain_set.size - fresh.size,
        )

    empty_warning = enforce_non_empty(domain_set, allow_empty=config.allow_empty, name=config.name)
    if empty_warning:
        warnings.append(empty_warning)

    rendered: dict[ListFormat, RenderedList] = {}
    outputs = {}
    for fmt in config.formats:
        logger.info("Generating %s format blocklist...", fmt.value)
        syntax = get_syntax(fmt, sink_address=config.hosts_sink_address)
        header = build_header(config=config, fmt=fmt, domain_count=domain_set.size, generated_at=moment)
        rendered[fmt] = render_list(domain_set, fmt, header, syntax=syntax)
        if write:
            path = write_rendered_list(
                rendered[fmt],
                config.output_path(fmt),
                sink_address=config.hosts_sink_address,
            )
            outputs[fmt.value] = path

    report = BuildReport(
        name=config.name,
        generated_at=moment,
        domain_count=domain_set.size,
        merged_from_previous=domain_set.size - fresh.size,
        outputs=outputs,
        sources=[result.report for result in results],
        warnings=warnings,
        stats=compute_stats(domain_set),
    )
    logger.info("Total unique domains: %d", domain_set.size)
    return BuildResult(domain_set=domain_set, rendered=rendered, report=report)
