"""Contrato para las sintaxis de lista renderizada.

Por qué Protocol:
- Un formato nuevo solo necesita cuatro miembros; no hay clase base que heredar.
- El renderer no conoce la sintaxis concreta que recibe.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ListSyntax(Protocol):
    """Per-format rendering capability."""

    comment_marker: str
    syntax_hint: str
    header_note: str | None

    def render_line(self, domain: str) -> str:
        """Render a single validated domain as one list line."""

        ...
