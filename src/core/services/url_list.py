"""Section-aware deduplication of hand-maintained URL lists.

The curated `url-list.txt` is grouped into sections introduced by
`#===== Name =====` lines. Comments and blank lines are kept verbatim; an
entry is dropped when the same trimmed text already appeared anywhere
earlier in the file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

logger = logging.getLogger(__name__)

_SECTION_RE = re.compile(r"^#=+")
_SECTION_NAME_RE = re.compile(r"^#=*\s*|\s*=*$")


@dataclass
class SectionStats:
    name: str
    original: int = 0
    unique: int = 0

    @property
    def removed(self) -> int:
        return self.original - self.unique


@dataclass
class UrlListDedupeResult:
    lines: list[str] = field(default_factory=list)
    sections: list[SectionStats] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)

    @property
    def original_total(self) -> int:
        return sum(s.original for s in self.sections)

    @property
    def unique_total(self) -> int:
        return sum(s.unique for s in self.sections)

    @property
    def removed_total(self) -> int:
        return self.original_total - self.unique_total

    @property
    def reduction_percent(self) -> float:
        if not self.original_total:
            return 0.0
        return round(self.removed_total * 100 / self.original_total, 2)


def section_name(line: str) -> str:
    return _SECTION_NAME_RE.sub("", line.strip())


def dedupe_url_list(lines: Iterable[str], *, verbose: bool = False) -> UrlListDedupeResult:
    result = UrlListDedupeResult()
    seen: set[str] = set()
    current = SectionStats(name="")
    result.sections.append(current)

    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            result.lines.append("")
            continue

        if line.lstrip().startswith("#"):
            if _SECTION_RE.match(line):
                current = SectionStats(name=section_name(line))
                result.sections.append(current)
            result.lines.append(line)
            continue

        url = line.strip()
        if not url:
            continue

        current.original += 1
        if url in seen:
            result.duplicates.append(url)
            if verbose:
                logger.info("Removing duplicate: %s", url)
            continue
        seen.add(url)
        current.unique += 1
        result.lines.append(url)

    # Entries before the first header only count when there were any.
    if not result.sections[0].original and len(result.sections) > 1:
        result.sections.pop(0)
    return result
