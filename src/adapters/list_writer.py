"""Atomic writing and verification of rendered lists.

The destination is only replaced once the whole text is on disk and has been
re-counted; on any failure the temporary file is removed and the previous
list stays intact.
"""

from __future__ import annotations

import logging
import tempfile
from functools import partial
from pathlib import Path
from typing import Callable

from core.domain.formats import get_syntax
from core.domain.models import RenderedList
from core.errors import RenderError

logger = logging.getLogger(__name__)


def atomic_write_text(
    output_path: Path,
    text: str,
    *,
    check: Callable[[Path], None] | None = None,
) -> Path:
    """Write `text` through a temporary sibling file, then replace `output_path`.

    `check` receives the finished temporary file; if it raises, the
    destination is left untouched.
    """

    tmp_path: Path | None = None
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="\n",
            dir=output_path.parent,
            prefix=f".{output_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)
            tmp_file.write(text)
            tmp_file.flush()
        if check is not None:
            check(tmp_path)
        tmp_path.replace(output_path)
        tmp_path = None
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
    return output_path


def write_rendered_list(
    rendered: RenderedList,
    output_path: Path,
    *,
    sink_address: str | None = None,
) -> Path:
    """Write `rendered` to `output_path` atomically, verified before the replace."""

    check = partial(verify_rendered_file, rendered, sink_address=sink_address, target=output_path)
    try:
        atomic_write_text(output_path, rendered.text, check=check)
    except OSError as exc:
        raise RenderError(
            f"Cannot write {rendered.format.value} list to {output_path}: {exc.strerror or exc}",
            {"path": str(output_path), "format": rendered.format.value},
        ) from exc

    logger.info("%s format blocklist written to %s", rendered.format.value, output_path)
    return output_path


def count_entries(path: Path, comment_marker: str) -> int:
    count = 0
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            stripped = line.strip()
            if stripped and not stripped.startswith(comment_marker):
                count += 1
    return count


def verify_rendered_file(
    rendered: RenderedList,
    path: Path,
    *,
    sink_address: str | None = None,
    target: Path | None = None,
) -> None:
    """Re-read a written list and check its entry count.

    `target` names the destination in error messages when `path` is the
    temporary file.
    """

    target = target or path
    if not path.is_file():
        raise RenderError(f"Failed to generate output file {target}", {"path": str(target)})
    syntax = get_syntax(rendered.format, sink_address=sink_address)
    found = count_entries(path, syntax.comment_marker)
    if found != rendered.domain_count:
        raise RenderError(
            f"Output file {target} has {found} entries, expected {rendered.domain_count}",
            {"path": str(target), "found": found, "expected": rendered.domain_count},
        )
