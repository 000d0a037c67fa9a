"""Output list formats.

This module centralizes the list syntaxes the renderer can emit. Keeping it
in the domain layer lets the CLI, the pipeline and the renderer share one
source of truth for comment markers, syntax hints and per-domain lines.
"""

from __future__ import annotations

from enum import Enum

from core.interfaces.syntax import ListSyntax


class ListFormat(str, Enum):
    """Supported rendered-list syntaxes."""

    HOSTS = "hosts"
    ADBLOCK = "adblock"
    PLAIN = "plain"

    @classmethod
    def parse(cls, value: str) -> "ListFormat":
        """Accept the enum value plus the names the old scripts used."""

        key = value.strip().lower()
        aliases = {"adguard": cls.ADBLOCK, "simple": cls.PLAIN, "domains": cls.PLAIN}
        if key in aliases:
            return aliases[key]
        return cls(key)

    def label(self) -> str:
        """Human readable label used in list titles."""

        return {
            ListFormat.HOSTS: "Hosts",
            ListFormat.ADBLOCK: "AdGuard/AdAway",
            ListFormat.PLAIN: "Simple",
        }[self]


class HostsSyntax:
    """`0.0.0.0 example.com` lines for hosts files, Pi-hole and friends."""

    comment_marker = "#"
    header_note = None

    def __init__(self, sink_address: str = "0.0.0.0") -> None:
        self.sink_address = sink_address

    @property
    def syntax_hint(self) -> str:
        return f"Hosts file format: {self.sink_address} example.com"

    def render_line(self, domain: str) -> str:
        return f"{self.sink_address} {domain}"


class AdblockSyntax:
    """`||example.com^` lines for AdGuard, AdAway and uBlock-style blockers."""

    comment_marker = "!"
    syntax_hint = "Blocklist format: ||example.com^"
    header_note = "Compatible with AdGuard Android and AdAway"

    def render_line(self, domain: str) -> str:
        return f"||{domain}^"


class PlainSyntax:
    comment_marker = "#"
    syntax_hint = "Simple domain list format"
    header_note = None

    def render_line(self, domain: str) -> str:
        return domain


_REGISTRY: dict[ListFormat, ListSyntax] = {
    ListFormat.HOSTS: HostsSyntax(),
    ListFormat.ADBLOCK: AdblockSyntax(),
    ListFormat.PLAIN: PlainSyntax(),
}


def register_syntax(fmt: ListFormat, syntax: ListSyntax) -> None:
    """Replace (or add) the syntax used for `fmt`."""

    _REGISTRY[fmt] = syntax


def get_syntax(fmt: ListFormat, *, sink_address: str | None = None) -> ListSyntax:
    """Return the syntax for `fmt`; hosts honours a custom sink address."""

    if fmt is ListFormat.HOSTS and sink_address is not None:
        return HostsSyntax(sink_address)
    return _REGISTRY[fmt]
