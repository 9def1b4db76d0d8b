"""
Debugger adapter.

Bridges debugger-style calls, log(value, priority), onto the pipeline
logger. Once the logging extension takes over the default debugger logger,
everything the debugger reports flows through the same handler and
processor chains as application logging.

    adapter.log("cache warmed")                 → INFO
    adapter.log(exc, "exception")               → CRITICAL, exception in context
    adapter.log("GET /orders 200", "access")    → access_priority level
    adapter.log("card declined", "payments")    → INFO, channel "payments"
                                                  (via PriorityProcessor)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from logweave.debugger.renderer import ExceptionRenderer
from logweave.logger.core import Logger
from logweave.logger.records import LogLevel, resolve_level

ACCESS = "access"

PRIORITY_LEVELS: dict[str, int] = {
    "debug": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "warning": LogLevel.WARNING,
    "error": LogLevel.ERROR,
    "exception": LogLevel.CRITICAL,
    "critical": LogLevel.CRITICAL,
}


class DebuggerAdapter:

    def __init__(
        self,
        logger: Logger,
        renderer: ExceptionRenderer,
        email: str | None = None,
        access_priority: int | str = LogLevel.INFO,
    ):
        self._logger = logger
        self._renderer = renderer
        self.email = email
        self.access_priority = resolve_level(access_priority)

    @property
    def logger(self) -> Logger:
        return self._logger

    def level_for(self, priority: str) -> int:
        """Numeric level for a debugger priority. Custom priorities log at INFO."""
        if priority == ACCESS:
            return self.access_priority
        return PRIORITY_LEVELS.get(priority.lower(), LogLevel.INFO)

    def log(self, value: Any, priority: str = "info") -> Path | None:
        """
        Log a message or exception.

        Returns the exception page path for exceptions, None otherwise.
        """
        level = self.level_for(priority)
        context: dict[str, Any] = {"priority": priority}
        if self.email and level >= LogLevel.ERROR:
            context["notify"] = self.email

        if isinstance(value, BaseException):
            context["exception"] = value
            self._logger.log(level, f"{type(value).__name__}: {value}", **context)
            return self._renderer.get_exception_file(value)

        self._logger.log(level, str(value), **context)
        return None
