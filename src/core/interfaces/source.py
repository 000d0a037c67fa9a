"""Contrato para fuentes de registros.

Por qué Protocol:
- Archivos locales, query logs y URLs remotas son intercambiables para el pipeline.
- Los tests pueden inyectar una fuente en memoria sin tocar disco ni red.

Reglas de diseño:
- `read` es asíncrono porque las fuentes remotas hacen I/O (HTTP).
- Devuelve un iterador perezoso; las fuentes locales leen línea a línea.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Protocol, Union, runtime_checkable

RawRecord = Union[str, Mapping[str, Any]]


@runtime_checkable
class RecordSource(Protocol):
    """Minimal contract for one input of a build."""

    location: str
    apply_keywords: bool

    async def read(self) -> Iterator[RawRecord]:
        """Open the source and return its records."""

        ...
