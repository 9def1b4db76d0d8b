"""
Log formatters.

Each handler can use a different formatter.
  - compact:  "{timestamp:%H:%M:%S} [{level_name:>8}] {channel}: {message}"
  - detailed: "{timestamp} [{level_name}] {channel} [{tags}]: {message} | context | extra"
  - json:     Structured JSON for machine parsing
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from logweave.logger.records import LogRecord


class LogFormatter(ABC):
    """Base formatter. Transforms LogRecord → string."""

    @abstractmethod
    def format(self, record: LogRecord) -> str: ...


class CompactFormatter(LogFormatter):
    """
    Compact single-line format for terminal display.
    Example: 14:32:05 [    INFO] app: Request served
    """

    def format(self, record: LogRecord) -> str:
        ts = record.timestamp.strftime("%H:%M:%S")
        return f"{ts} [{record.level_name:>8}] {record.channel}: {record.message}"


class DetailedFormatter(LogFormatter):
    """
    Detailed format with tags, context and processor extras for files.
    Example: 2026-02-12 14:32:05.123456 [    INFO] app [http]: Request served | status=200
    """

    def format(self, record: LogRecord) -> str:
        ts = record.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")
        tags_str = ",".join(sorted(record.tags)) if record.tags else "-"

        parts = [f"{ts} [{record.level_name:>8}] {record.channel} [{tags_str}]:", record.message]

        context = {k: v for k, v in record.context.items() if v is not None}
        if context:
            parts.append("| " + " ".join(f"{k}={_format_value(v)}" for k, v in context.items()))
        if record.extra:
            parts.append("| " + " ".join(f"{k}={_format_value(v)}" for k, v in record.extra.items()))

        return " ".join(parts)


class JsonFormatter(LogFormatter):
    """One JSON object per line."""

    def format(self, record: LogRecord) -> str:
        obj: dict[str, Any] = {
            "timestamp": record.timestamp.isoformat(),
            "level": record.level,
            "level_name": record.level_name,
            "channel": record.channel,
            "message": record.message,
            "tags": sorted(record.tags) if record.tags else [],
        }
        if record.context:
            obj["context"] = {
                k: _serialize_value(v) for k, v in record.context.items()
            }
        if record.extra:
            obj["extra"] = {
                k: _serialize_value(v) for k, v in record.extra.items()
            }
        return json.dumps(obj, default=str)


FORMATTERS: dict[str, type[LogFormatter]] = {
    "compact": CompactFormatter,
    "detailed": DetailedFormatter,
    "json": JsonFormatter,
}


def get_formatter(formatter: "LogFormatter | str | None") -> "LogFormatter | None":
    """Accept a formatter instance or its short name ("compact", "detailed", "json")."""
    if formatter is None or isinstance(formatter, LogFormatter):
        return formatter
    try:
        return FORMATTERS[formatter]()
    except KeyError:
        raise ValueError(
            f"Unknown formatter '{formatter}'. Valid formatters: {', '.join(FORMATTERS)}"
        )


def _format_value(v: Any) -> str:
    """Format a context value for detailed display."""
    if isinstance(v, float):
        return f"{v:.4f}"
    if isinstance(v, BaseException):
        return f"{type(v).__name__}({v})"
    return str(v)


def _serialize_value(v: Any) -> Any:
    """Make a value JSON-serializable."""
    if isinstance(v, (str, int, float, bool, type(None))):
        return v
    if isinstance(v, (list, tuple)):
        return [_serialize_value(i) for i in v]
    if isinstance(v, dict):
        return {str(k): _serialize_value(val) for k, val in v.items()}
    if isinstance(v, BaseException):
        return f"{type(v).__name__}: {v}"
    return str(v)
