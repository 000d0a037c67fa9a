"""Command line interface (Typer).

The commands only translate options into a `BuildConfig`, call the core and
present results; every fatal condition is a `BlocklistError` that ends the
process with exit code 1.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from adapters.json_exporter import export_build_report
from adapters.list_writer import atomic_write_text
from cli import doctor
from cli.ui_components import (
    build_dedupe_table,
    build_outputs_table,
    build_sources_table,
    build_stats_panel,
    print_banner,
)
from core.config import AppSettings
from core.domain.models import FailurePolicy, SourceKind, SourceSpec
from core.errors import BlocklistError, InputNotFoundError
from core.logging_setup import append_log_block, setup_logging
from core.presets import PRESETS, resolve_build_config
from core.services.build_pipeline import build_blocklist
from core.services.stats import format_stats_block
from core.services.url_list import dedupe_url_list

app = typer.Typer(no_args_is_help=True, help="Build DNS/host blocklists from local and remote domain lists.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
logger = logging.getLogger("blocklist")


def _parse_record_filter(pairs: List[str] | None) -> dict[str, str] | None:
    if not pairs:
        return None
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected FIELD=VALUE, got '{pair}'", param_hint="--record-filter")
        parsed[key.strip()] = value.strip()
    return parsed


def _cli_sources(
    inputs: List[Path] | None,
    query_logs: List[Path] | None,
    urls: List[str] | None,
    urls_unfiltered: List[str] | None,
) -> tuple[SourceSpec, ...] | None:
    specs: list[SourceSpec] = []
    specs.extend(SourceSpec(location=str(p)) for p in inputs or [])
    specs.extend(SourceSpec(location=str(p), kind=SourceKind.QUERY_LOG) for p in query_logs or [])
    specs.extend(SourceSpec(location=u) for u in urls or [])
    specs.extend(SourceSpec(location=u, apply_keywords=False) for u in urls_unfiltered or [])
    return tuple(specs) or None


@app.command()
def build(
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="Built-in preset (see `presets`)."),
    inputs: Optional[List[Path]] = typer.Option(None, "--input", "-i", help="Local text list (repeatable)."),
    query_logs: Optional[List[Path]] = typer.Option(
        None, "--query-log", "-q", help="Local JSON-lines query log (repeatable)."
    ),
    urls: Optional[List[str]] = typer.Option(None, "--url", "-u", help="Remote list, keyword filtered (repeatable)."),
    urls_unfiltered: Optional[List[str]] = typer.Option(
        None, "--url-unfiltered", help="Remote list taken whole, no keyword filter (repeatable)."
    ),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Directory for rendered lists."),
    formats: Optional[List[str]] = typer.Option(
        None, "--format", "-f", help="hosts, adblock (adguard) or plain (simple); repeatable."
    ),
    keywords: Optional[List[str]] = typer.Option(None, "--keyword", "-k", help="Keep domains containing it."),
    ignore_keyword_case: bool = typer.Option(False, "--ignore-keyword-case", help="Case-insensitive keywords."),
    merge_previous: Optional[bool] = typer.Option(
        None, "--merge-previous/--no-merge-previous", help="Union with the previously rendered lists."
    ),
    allow_empty: Optional[bool] = typer.Option(
        None, "--allow-empty/--no-allow-empty", help="Write empty lists instead of failing."
    ),
    on_source_failure: Optional[FailurePolicy] = typer.Option(
        None, "--on-source-failure", help="skip failed remote sources or abort the run."
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Fetch timeout per attempt (seconds)."),
    retries: Optional[int] = typer.Option(None, "--retries", help="Fetch retries after the first attempt."),
    timezone: Optional[str] = typer.Option(None, "--timezone", help="IANA zone for timestamps."),
    name: Optional[str] = typer.Option(None, "--name", help="List name used in output file names."),
    title: Optional[str] = typer.Option(None, "--title", help="Header title."),
    description: Optional[str] = typer.Option(None, "--description", help="Header description."),
    sink_address: Optional[str] = typer.Option(None, "--sink-address", help="Address used by hosts lines."),
    record_filter: Optional[List[str]] = typer.Option(
        None, "--record-filter", help="FIELD=VALUE a query-log record must match (repeatable)."
    ),
    domain_field: Optional[str] = typer.Option(None, "--domain-field", help="Query-log field holding the domain."),
    json_report: Optional[Path] = typer.Option(None, "--json-report", help="Also write the build report as JSON."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Run log (appended)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report every rejected token."),
    banner: bool = typer.Option(True, "--banner/--no-banner", help="Show the banner."),
) -> None:
    """Build blocklists from a preset and/or ad hoc sources."""

    settings = AppSettings()
    effective_log = log_file or settings.log_file

    overrides = {
        "sources": _cli_sources(inputs, query_logs, urls, urls_unfiltered),
        "output_dir": output_dir,
        "formats": tuple(formats) if formats else None,
        "keywords": tuple(keywords) if keywords else None,
        "keyword_case_sensitive": False if ignore_keyword_case else None,
        "merge_previous": merge_previous,
        "allow_empty": allow_empty,
        "on_source_failure": on_source_failure,
        "fetch_timeout_seconds": timeout,
        "fetch_max_retries": retries,
        "timezone": timezone,
        "name": name,
        "title": title,
        "description": description,
        "hosts_sink_address": sink_address,
        "record_filter": _parse_record_filter(record_filter),
        "record_domain_field": domain_field,
        "verbose": verbose or None,
    }

    try:
        config = resolve_build_config(settings, preset=preset, overrides=overrides)
    except BlocklistError as exc:
        setup_logging(level=settings.log_level, log_file=effective_log, timezone=settings.timezone)
        logger.error("Error: %s", exc)
        raise typer.Exit(code=1) from exc

    setup_logging(level=settings.log_level, log_file=effective_log, timezone=config.timezone)
    if banner:
        print_banner(_console)

    try:
        result = asyncio.run(build_blocklist(config, settings=settings))
    except BlocklistError as exc:
        logger.error("Error: %s", exc)
        raise typer.Exit(code=1) from exc

    report = result.report
    append_log_block(effective_log, format_stats_block(report.stats))
    if json_report:
        export_build_report(report=report, output_path=json_report)
        logger.info("Build report written to %s", json_report)

    _console.print(build_sources_table(report))
    _console.print(build_outputs_table(report))
    _console.print(build_stats_panel(report.stats))
    for warning in report.warnings:
        _console.print(f"[yellow]Warning:[/yellow] {warning}")
    logger.info("Blocklist generation process finished successfully.")


@app.command(name="dedupe-urls")
def dedupe_urls(
    input_file: Path = typer.Option(Path("url-list.txt"), "--input", "-i", help="Sectioned URL list."),
    output_file: Path = typer.Option(Path("url-list-deduped.txt"), "--output", "-o", help="Deduplicated copy."),
    stats: bool = typer.Option(False, "--stats", "-s", help="Show statistics for each section."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each removed duplicate."),
) -> None:
    """Remove duplicate entries from a sectioned URL list, keeping comments."""

    settings = AppSettings()
    setup_logging(level=settings.log_level, log_file=None, timezone=settings.timezone)

    try:
        if not input_file.is_file():
            raise InputNotFoundError(str(input_file))
        with input_file.open("r", encoding="utf-8", errors="replace") as fh:
            result = dedupe_url_list(fh, verbose=verbose)
        atomic_write_text(output_file, "\n".join(result.lines) + "\n")
    except BlocklistError as exc:
        logger.error("Error: %s", exc)
        raise typer.Exit(code=1) from exc
    except OSError as exc:
        logger.error("Error: cannot write %s: %s", output_file, exc)
        raise typer.Exit(code=1) from exc

    if stats:
        _console.print(build_dedupe_table(result))
    _console.print(f"Input file: {input_file}")
    _console.print(f"Output file: {output_file}")
    _console.print(f"Total original URLs: {result.original_total}")
    _console.print(f"Total unique URLs: {result.unique_total}")
    _console.print(f"Total duplicates removed: {result.removed_total}")
    if result.removed_total:
        _console.print(f"Reduction: {result.reduction_percent:.2f}%")


@app.command(name="presets")
def list_presets() -> None:
    """List the built-in presets."""

    table = Table(title="Presets")
    table.add_column("Preset", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Formats", style="magenta")
    table.add_column("Sources", style="dim", overflow="fold")
    for key, fields in sorted(PRESETS.items()):
        table.add_row(
            key,
            fields["title"],
            ", ".join(fmt.value for fmt in fields["formats"]),
            "\n".join(spec.location for spec in fields["sources"]),
        )
    _console.print(table)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
