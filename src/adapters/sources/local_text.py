"""Local text source: one candidate per line."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from core.errors import InputEmptyError, InputNotFoundError
from core.interfaces.source import RawRecord, RecordSource


def ensure_readable(path: Path) -> None:
    """Raise when `path` is missing or holds no non-blank line."""

    if not path.is_file():
        raise InputNotFoundError(str(path))
    with path.open("r", encoding="utf-8", errors="replace") as fh:
        for line in fh:
            if line.strip():
                return
    raise InputEmptyError(str(path))


def iter_lines(path: Path) -> Iterator[str]:
    with path.open("r", encoding="utf-8", errors="replace") as fh:
        for line in fh:
            yield line.rstrip("\r\n")


class LocalTextSource(RecordSource):
    """Streams the lines of a local file."""

    def __init__(self, path: Path, *, apply_keywords: bool = True) -> None:
        self.path = Path(path)
        self.location = str(self.path)
        self.apply_keywords = apply_keywords

    async def read(self) -> Iterator[RawRecord]:
        ensure_readable(self.path)
        return iter_lines(self.path)
