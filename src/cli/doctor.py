"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, validate_timezone_name
from core.presets import PRESETS

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.head(url)
        return response.status_code < 400, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


def _check_writable(directory: Path) -> tuple[bool, str]:
    """Create and remove a scratch file to prove `directory` is writable."""

    try:
        directory.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=directory, prefix=".doctor_", delete=True):
            pass
        return True, str(directory.resolve())
    except OSError as exc:
        return False, f"{directory}: {exc.strerror or exc}"


def _preset_urls() -> list[str]:
    urls: list[str] = []
    for fields in PRESETS.values():
        for spec in fields["sources"]:
            if spec.is_remote and spec.location not in urls:
                urls.append(spec.location)
    return urls


@app.command()
def run(
    network: bool = typer.Option(True, "--network/--offline", help="Check that the preset source URLs are reachable."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Blocklist Builder Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim", overflow="fold")

    try:
        validate_timezone_name(settings.timezone)
        table.add_row("Time zone", "OK", settings.timezone)
    except ValueError as exc:
        table.add_row("Time zone", "FAIL", str(exc))

    ok_out, detail_out = _check_writable(settings.output_dir)
    table.add_row("Output dir", "OK" if ok_out else "FAIL", detail_out)

    if settings.log_file is not None:
        ok_log, detail_log = _check_writable(settings.log_file.parent)
        table.add_row("Log dir", "OK" if ok_log else "FAIL", detail_log)
    else:
        table.add_row("Log dir", "OPTIONAL", "File log disabled")

    failures = 0
    if network:
        for url in _preset_urls():
            ok_http, detail_http = asyncio.run(_check_http(url, settings))
            failures += 0 if ok_http else 1
            table.add_row("Source", "OK" if ok_http else "FAIL", f"{url} ({detail_http})")

    _console.print(table)

    if failures:
        _console.print(
            "\n[yellow]Note:[/yellow] Aggregating presets skip unreachable sources; "
            "a run only fails when none of them can be fetched."
        )
