"""Exportación JSON del reporte de build.

Por qué JSON:
- Los jobs de CI leen conteos y fuentes fallidas sin parsear el log.
- Deja una traza legible por máquina junto a las listas renderizadas.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import BuildReport


def export_build_report(*, report: BuildReport, output_path: Path) -> Path:
    """Export `BuildReport` as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
