"""
Log handlers (output destinations).

One logger, many handlers. A handler receives every processed record that
passes its level gate and channel filter, in the order handlers were pushed.

Channel filters take channel names; a leading "!" excludes instead:

    BufferHandler(channels=["payments"])        only the payments channel
    StreamHandler(channels=["!access"])         everything except access

Built-ins: StreamHandler (terminal), FileHandler (daily rotating file, one
per channel with a "{channel}" path), BufferHandler (in-memory ring buffer).
"""

import re
import sys
import threading
from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, TextIO

from logweave.logger.records import LogLevel, LogRecord, resolve_level
from logweave.logger.formatters import (
    LogFormatter,
    CompactFormatter,
    DetailedFormatter,
    get_formatter,
)

CHANNEL_PLACEHOLDER = "{channel}"

_UNSAFE_FILENAME = re.compile(r"[^\w.-]+")


class Handler(ABC):
    """Base handler. Receives records that passed the processor chain."""

    def __init__(
        self,
        name: str,
        min_level: int | str = LogLevel.INFO,
        formatter: LogFormatter | str | None = None,
        channels: Iterable[str] | None = None,
    ):
        self.name = name
        self.min_level = resolve_level(min_level)
        self._formatter = get_formatter(formatter)
        self.include_channels, self.exclude_channels = _split_channels(channels)

    @property
    def formatter(self) -> LogFormatter:
        if self._formatter is None:
            self._formatter = self._default_formatter()
        return self._formatter

    @formatter.setter
    def formatter(self, value: LogFormatter) -> None:
        self._formatter = value

    def _default_formatter(self) -> LogFormatter:
        return CompactFormatter()

    def handles(self, record: LogRecord) -> bool:
        if record.level < self.min_level:
            return False
        if record.channel in self.exclude_channels:
            return False
        return not self.include_channels or record.channel in self.include_channels

    @abstractmethod
    def emit(self, record: LogRecord) -> None:
        """Write a log record. Called only after handles() passes."""
        ...

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()


def _split_channels(channels: Iterable[str] | None) -> tuple[frozenset[str], frozenset[str]]:
    if channels is None:
        return frozenset(), frozenset()
    if isinstance(channels, str):
        channels = [channels]
    include, exclude = set(), set()
    for channel in channels:
        if channel.startswith("!"):
            exclude.add(channel[1:])
        else:
            include.add(channel)
    return frozenset(include), frozenset(exclude)


# ── Terminal ──────────────────────────────────────────────────────

class StreamHandler(Handler):
    """
    Terminal output, one line per record.

    ERROR and above go to stderr unless split_errors is off. A record that
    carries a rendered exception page gets a second line pointing at it
    (exception_url when a base URL is configured, otherwise exception_file).
    """

    # first band the level reaches wins
    LEVEL_STYLES = (
        (LogLevel.CRITICAL, "\033[1;91m"),
        (LogLevel.ALERT, "\033[91m"),
        (LogLevel.ERROR, "\033[31m"),
        (LogLevel.WARNING, "\033[33m"),
        (LogLevel.NOTICE, "\033[97m"),
        (LogLevel.INFO, ""),
        (LogLevel.DEBUG, "\033[36m"),
    )
    DIM = "\033[90m"
    RESET = "\033[0m"

    def __init__(
        self,
        name: str = "stream",
        min_level: int | str = LogLevel.INFO,
        formatter: LogFormatter | str | None = None,
        channels: Iterable[str] | None = None,
        color: bool = True,
        split_errors: bool = True,
    ):
        super().__init__(name, min_level, formatter, channels)
        self.color = color
        self.split_errors = split_errors

    def emit(self, record: LogRecord) -> None:
        lines = [self._paint(self.formatter.format(record), self.style_for(record.level))]
        page = record.extra.get("exception_url") or record.extra.get("exception_file")
        if page:
            lines.append(self._paint(f"    ↳ {page}", self.DIM))
        print("\n".join(lines), file=self._stream_for(record), flush=True)

    def style_for(self, level: int) -> str:
        for threshold, style in self.LEVEL_STYLES:
            if level >= threshold:
                return style
        return self.DIM

    def _paint(self, text: str, style: str) -> str:
        if not self.color or not style:
            return text
        return f"{style}{text}{self.RESET}"

    def _stream_for(self, record: LogRecord) -> TextIO:
        if self.split_errors and record.level >= LogLevel.ERROR:
            return sys.stderr
        return sys.stdout


# ── Files ─────────────────────────────────────────────────────────

class FileHandler(Handler):
    """
    Appends formatted records to a log file.

    A "{channel}" in the path opens one file per record channel, the way the
    debugger keeps one file per priority. With rotation="daily" the date is
    appended to the file stem and a new file is opened when it changes.
    """

    def __init__(
        self,
        name: str = "file",
        min_level: int | str = LogLevel.DEBUG,
        formatter: LogFormatter | str | None = None,
        channels: Iterable[str] | None = None,
        path: str | Path = "log/app.log",
        rotation: str = "daily",
        retention_days: int = 30,
    ):
        super().__init__(name, min_level, formatter, channels)
        if rotation not in ("daily", "none"):
            raise ValueError(f"Unknown rotation '{rotation}'. Valid: daily, none")
        self.path_template = str(path)
        self.rotation = rotation
        self.retention_days = retention_days
        self._files: dict[Path, TextIO] = {}
        self._lock = threading.Lock()

    def _default_formatter(self) -> LogFormatter:
        return DetailedFormatter()

    @property
    def per_channel(self) -> bool:
        return CHANNEL_PLACEHOLDER in self.path_template

    @property
    def open_paths(self) -> list[Path]:
        with self._lock:
            return list(self._files)

    def path_for(self, record: LogRecord) -> Path:
        """Target file for a record: channel substituted, date appended when rotating."""
        channel = _UNSAFE_FILENAME.sub("_", record.channel) or "_"
        base = Path(self.path_template.replace(CHANNEL_PLACEHOLDER, channel))
        if self.rotation == "none":
            return base
        suffix = base.suffix or ".log"
        return base.with_name(f"{base.stem}_{record.timestamp:%Y-%m-%d}{suffix}")

    def emit(self, record: LogRecord) -> None:
        line = self.formatter.format(record) + "\n"
        target = self.path_for(record)
        with self._lock:
            self._open(target).write(line)

    def _open(self, target: Path) -> TextIO:
        """Must hold self._lock. Rotating closes the stale file of the same stem."""
        handle = self._files.get(target)
        if handle is not None:
            return handle
        for stale in [p for p in self._files if self._same_stream(p, target)]:
            self._files.pop(stale).close()
        target.parent.mkdir(parents=True, exist_ok=True)
        handle = open(target, "a", encoding="utf-8")
        self._files[target] = handle
        return handle

    def _same_stream(self, a: Path, b: Path) -> bool:
        return self.rotation == "daily" and a.parent == b.parent and _undated(a) == _undated(b)

    def flush(self) -> None:
        with self._lock:
            for handle in self._files.values():
                handle.flush()

    def close(self) -> None:
        with self._lock:
            for handle in self._files.values():
                handle.close()
            self._files.clear()

    def cleanup_old_files(self) -> int:
        """Remove rotated files older than retention_days. Returns count removed."""
        template = Path(self.path_template.replace(CHANNEL_PLACEHOLDER, "*"))
        if not template.parent.exists():
            return 0

        cutoff = datetime.now(timezone.utc).timestamp() - self.retention_days * 86400
        in_use = set(self.open_paths)
        removed = 0
        for candidate in template.parent.glob(f"{template.stem}_*{template.suffix or '.log'}"):
            if candidate not in in_use and candidate.stat().st_mtime < cutoff:
                candidate.unlink()
                removed += 1
        return removed


def _undated(path: Path) -> str:
    stem, _, _ = path.stem.rpartition("_")
    return stem


# ── Memory ────────────────────────────────────────────────────────

class BufferHandler(Handler):
    """
    Ring buffer of the last N records, queryable by tag and channel.
    Used for diagnostics and in tests.
    """

    def __init__(
        self,
        name: str = "buffer",
        min_level: int | str = LogLevel.DEBUG,
        formatter: LogFormatter | str | None = None,
        channels: Iterable[str] | None = None,
        capacity: int = 10000,
    ):
        super().__init__(name, min_level, formatter, channels)
        self._records: deque[LogRecord] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def emit(self, record: LogRecord) -> None:
        with self._lock:
            self._records.append(record)

    def get_recent(
        self,
        n: int = 100,
        tags: set[str] | None = None,
        channel: Optional[str] = None,
    ) -> list[LogRecord]:
        """Up to n most recent records, oldest first."""
        with self._lock:
            records = list(self._records)
        if tags:
            records = [r for r in records if r.tags & tags]
        if channel is not None:
            records = [r for r in records if r.channel == channel]
        return records[-n:]

    def channels(self) -> dict[str, int]:
        """Record count per channel, in order of first appearance."""
        counts: dict[str, int] = {}
        with self._lock:
            for record in self._records:
                counts[record.channel] = counts.get(record.channel, 0) + 1
        return counts

    def format_all(self) -> list[str]:
        with self._lock:
            records = list(self._records)
        return [self.formatter.format(r) for r in records]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    @property
    def capacity(self) -> int:
        return self._records.maxlen

    @property
    def count(self) -> int:
        return len(self._records)
