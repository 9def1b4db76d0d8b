"""
Log records and level definitions.

Standard levels use Python-compatible values. Custom levels slot into the
standard hierarchy (TRACE below DEBUG, VERBOSE, NOTICE, ALERT in between).
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Standard log levels, Python-compatible numeric values."""
    TRACE = 5
    DEBUG = 10
    VERBOSE = 15
    INFO = 20
    NOTICE = 25
    WARNING = 30
    ERROR = 40
    ALERT = 45
    CRITICAL = 50

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Resolve level from string name, case-insensitive."""
        name_upper = name.upper()
        try:
            return cls[name_upper]
        except KeyError:
            raise ValueError(
                f"Unknown log level '{name}'. "
                f"Valid levels: {', '.join(m.name for m in cls)}"
            )

    @classmethod
    def from_value(cls, value: int | str) -> "LogLevel":
        """Resolve level from int or string."""
        if isinstance(value, str):
            return cls.from_name(value)
        if isinstance(value, int):
            for member in cls:
                if member.value == value:
                    return member
            raise ValueError(
                f"No standard level with value {value}. "
                f"Valid values: {', '.join(f'{m.name}={m.value}' for m in cls)}"
            )
        raise TypeError(f"Expected int or str, got {type(value).__name__}")


LEVEL_NAMES: dict[int, str] = {member.value: member.name for member in LogLevel}


def level_name(level: int) -> str:
    """Get display name for a level value. Falls back to numeric string."""
    return LEVEL_NAMES.get(level, str(level))


def resolve_level(value: int | str) -> int:
    """Convert level name or int to numeric level. Arbitrary ints are kept."""
    if isinstance(value, bool):
        raise TypeError("Expected int or str for level, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return LogLevel.from_name(value).value
    raise TypeError(f"Expected int or str for level, got {type(value).__name__}")


@dataclass(frozen=True)
class LogRecord:
    """
    Immutable log record. Created by Logger.log(), passed through the
    processor chain, then dispatched to handlers.

    context carries what the caller supplied; extra carries what processors add.
    """
    timestamp: datetime
    level: int
    level_name: str
    message: str
    channel: str = "app"
    tags: frozenset[str] = field(default_factory=frozenset)
    context: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        level: int,
        message: str,
        channel: str = "app",
        tags: set[str] | frozenset[str] | None = None,
        **context: Any,
    ) -> "LogRecord":
        """Factory method with auto-timestamp and level name resolution."""
        return cls(
            timestamp=datetime.now(timezone.utc),
            level=level,
            level_name=level_name(level),
            message=message,
            channel=channel,
            tags=frozenset(tags) if tags else frozenset(),
            context=context,
        )

    def with_changes(self, **changes: Any) -> "LogRecord":
        """Copy with fields replaced. Processors return this instead of mutating."""
        return replace(self, **changes)

    def with_extra(self, **extra: Any) -> "LogRecord":
        return replace(self, extra={**self.extra, **extra})
