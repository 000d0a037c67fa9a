"""Logging configuration.

Console output goes through Rich; the run log is a plain, appended text file
with timestamps in the configured time zone so successive runs read like the
old shell logs.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from rich.console import Console
from rich.logging import RichHandler

_FILE_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %I:%M:%S %p"


class ZonedFormatter(logging.Formatter):
    """Formatter that renders `asctime` in a fixed named time zone."""

    def __init__(self, fmt: str, datefmt: str, timezone: str) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._zone = ZoneInfo(timezone)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        moment = datetime.fromtimestamp(record.created, tz=self._zone)
        return moment.strftime(datefmt or _FILE_DATEFMT)


def setup_logging(
    *,
    level: str = "INFO",
    log_file: Path | None = None,
    timezone: str = "Asia/Karachi",
    console: Console | None = None,
) -> None:
    """Configure the root logger for a CLI run.

    Args:
        level: Root log level.
        log_file: Run log path; appended to, parent directory created.
        timezone: Zone used for file-log timestamps.
        console: Rich console for the stderr handler (tests pass their own).
    """

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(ZonedFormatter(_FILE_FORMAT, _FILE_DATEFMT, timezone))
        root.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def append_log_block(log_file: Path | None, lines: list[str]) -> None:
    """Append a raw, untimestamped block (statistics) to the run log."""

    if log_file is None:
        return
    log_file.parent.mkdir(parents=True, exist_ok=True)
    with log_file.open("a", encoding="utf-8") as fh:
        for line in lines:
            fh.write(line + "\n")
