"""Structured DNS query log source (JSON lines).

Each line is one JSON object written by the upstream resolver logger, e.g.
`{"status": "REQUEST_BLOCKED", "device": "Phone", "domain": "ads.example.com"}`.
Selection by status/device happens in the extractor, not here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator

from adapters.sources.local_text import ensure_readable, iter_lines
from core.interfaces.source import RawRecord, RecordSource

logger = logging.getLogger(__name__)


class QueryLogSource(RecordSource):
    def __init__(self, path: Path, *, apply_keywords: bool = True) -> None:
        self.path = Path(path)
        self.location = str(self.path)
        self.apply_keywords = apply_keywords
        self.skipped_lines = 0

    async def read(self) -> Iterator[RawRecord]:
        ensure_readable(self.path)
        return self._records()

    def _records(self) -> Iterator[RawRecord]:
        for lineno, line in enumerate(iter_lines(self.path), start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                self.skipped_lines += 1
                logger.warning("%s:%d: skipping malformed JSON (%s)", self.path, lineno, exc.msg)
                continue
            if not isinstance(record, dict):
                self.skipped_lines += 1
                logger.warning("%s:%d: skipping non-object JSON record", self.path, lineno)
                continue
            yield record
