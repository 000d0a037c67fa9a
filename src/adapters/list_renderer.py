"""Render de blocklists.

Por qué vive en adapters:
- El header es una plantilla Jinja2 (detalle de infraestructura).
- El Core solo conoce `DomainSet`, `ListHeader` y `ListFormat`.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.formats import ListFormat, get_syntax
from core.domain.models import BuildConfig, DomainSet, ListHeader, RenderedList
from core.interfaces.syntax import ListSyntax

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def build_header(
    *,
    config: BuildConfig,
    fmt: ListFormat,
    domain_count: int,
    generated_at: datetime | None = None,
) -> ListHeader:
    """Header for one format; the title gets the format label appended."""

    moment = generated_at or datetime.now(ZoneInfo(config.timezone))
    sources = [spec.location for spec in config.sources if spec.is_remote]
    return ListHeader(
        title=f"{config.title} ({fmt.label()} Format)",
        description=config.description,
        generated_at=moment,
        sources=sources if len(sources) > 1 else [],
        domain_count=domain_count,
    )


def render_header(header: ListHeader, syntax: ListSyntax) -> str:
    template = _get_env().get_template("list_header.txt.j2")
    return template.render(
        marker=syntax.comment_marker,
        title=header.title,
        description=header.description,
        last_updated=header.timestamp_label(),
        domain_count=header.domain_count,
        sources=header.sources,
        note=syntax.header_note,
        syntax_hint=syntax.syntax_hint,
    )


def render_list(
    domain_set: DomainSet,
    fmt: ListFormat,
    header: ListHeader,
    *,
    syntax: ListSyntax | None = None,
) -> RenderedList:
    """Render header + one line per domain, in the set's (sorted) order.

    The domain count in the header always reflects `domain_set`; the set is
    never modified.
    """

    syntax = syntax or get_syntax(fmt)
    if header.domain_count != domain_set.size:
        header = header.model_copy(update={"domain_count": domain_set.size})

    body = [syntax.render_line(domain) for domain in domain_set.domains]
    text = render_header(header, syntax) + "\n"
    if body:
        text += "\n".join(body) + "\n"
    return RenderedList(format=fmt, text=text, domain_count=domain_set.size)
