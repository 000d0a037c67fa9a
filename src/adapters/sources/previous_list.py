"""Re-read previously rendered lists for merge-forward.

Any of the output syntaxes is accepted: header lines are comments for the
extractor and hosts/adblock markup is stripped by the same chain used for
fresh input. A missing file simply contributes nothing.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from adapters.sources.local_text import iter_lines
from core.services.extraction import TokenExtractor, build_steps
from core.services.validation import is_valid_domain

logger = logging.getLogger(__name__)


def read_previous_domains(paths: Iterable[Path], *, sink_address: str | None = None) -> set[str]:
    """Domains of earlier lists; `sink_address` is the address hosts lines were rendered with."""

    extractor = TokenExtractor(steps=build_steps(sink_address))
    found: set[str] = set()
    for path in paths:
        if not path.is_file():
            logger.debug("No previous list at %s", path)
            continue
        before = len(found)
        for line in iter_lines(path):
            token = extractor.extract(line)
            if token and is_valid_domain(token):
                found.add(token.lower())
        logger.info("Recovered %d domains from previous list %s", len(found) - before, path)
    return found
