"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Las tablas se reutilizan en `build`, `dedupe-urls` y `presets`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import BuildReport, ListStats
from core.services.url_list import UrlListDedupeResult


def print_banner(console: Console) -> None:
    """Print the welcome banner.

    Can be disabled for non-interactive runs (cron, CI).
    """

    title = Text("BLOCKLIST BUILDER", style="bold cyan")
    subtitle = Text("Fetch • Normalize • Deduplicate • Render", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_sources_table(report: BuildReport) -> Table:
    table = Table(title=f"Sources for '{report.name}'")
    table.add_column("Source", style="cyan", overflow="fold")
    table.add_column("Status", style="white", no_wrap=True)
    table.add_column("Records", justify="right")
    table.add_column("Invalid", justify="right", style="yellow")
    table.add_column("Filtered", justify="right", style="dim")
    table.add_column("Kept", justify="right", style="green")
    for source in report.sources:
        status = "OK" if source.ok else f"[red]FAILED[/red] {source.error or ''}"
        table.add_row(
            source.location,
            status,
            str(source.records),
            str(source.rejected),
            str(source.filtered_out),
            str(source.accepted),
        )
    return table


def build_outputs_table(report: BuildReport) -> Table:
    table = Table(title="Rendered lists")
    table.add_column("Format", style="cyan", no_wrap=True)
    table.add_column("File", style="magenta")
    for fmt, path in report.outputs.items():
        table.add_row(fmt, str(path))
    return table


def build_stats_panel(stats: ListStats) -> Panel:
    body = Text()
    body.append(f"Total unique domains: {stats.total}\n", style="bold")
    if stats.top_tlds:
        body.append("\nTop TLDs:\n", style="bold")
        for entry in stats.top_tlds:
            body.append(f"  {entry.count:>7}  .{entry.label}\n")
    return Panel(body, title=Text("Statistics", style="bold yellow"), border_style="yellow")


def build_dedupe_table(result: UrlListDedupeResult) -> Table:
    table = Table(title="URL list sections")
    table.add_column("Section", style="cyan")
    table.add_column("Original", justify="right")
    table.add_column("Unique", justify="right", style="green")
    table.add_column("Removed", justify="right", style="red")
    for section in result.sections:
        table.add_row(section.name or "(top)", str(section.original), str(section.unique), str(section.removed))
    return table
