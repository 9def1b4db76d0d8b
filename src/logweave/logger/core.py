"""
Logger: one channel, an ordered handler chain, an ordered processor chain.

Attach order is execution order. A record passes through every processor
in the order they were pushed, then goes to every handler whose min_level
admits it, again in push order.

Logger.instance() is the library's own diagnostics logger (channel
"logweave"). It has no handlers, so it stays silent until one is attached.
"""

import threading
from typing import Any, Callable, Optional, Union

from logweave.logger.records import LogRecord, LogLevel, level_name, resolve_level
from logweave.logger.handlers import Handler
from logweave.logger.processors import Processor

ProcessorLike = Union[Processor, Callable[[LogRecord], LogRecord]]


class Logger:
    """
    Usage:
        log = Logger("app")
        log.push_handler(StreamHandler(min_level="debug"))
        log.push_processor(PriorityProcessor())
        log.info("Order placed", tags={"orders"}, order_id=42)
    """

    _instance: Optional["Logger"] = None
    _lock = threading.Lock()

    TRACE = LogLevel.TRACE
    DEBUG = LogLevel.DEBUG
    VERBOSE = LogLevel.VERBOSE
    INFO = LogLevel.INFO
    NOTICE = LogLevel.NOTICE
    WARNING = LogLevel.WARNING
    ERROR = LogLevel.ERROR
    ALERT = LogLevel.ALERT
    CRITICAL = LogLevel.CRITICAL

    def __init__(self, name: str = "app", level: int | str = LogLevel.DEBUG) -> None:
        self.name = name
        self._handlers: list[Handler] = []
        self._processors: list[ProcessorLike] = []
        self._current_level: int = resolve_level(level)
        self._emit_lock = threading.Lock()

    @classmethod
    def instance(cls) -> "Logger":
        """Get or create the diagnostics singleton."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls("logweave")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton. For testing only.
        Closes all handlers before resetting.
        """
        with cls._lock:
            if cls._instance is not None:
                cls._instance.close()
                cls._instance = None

    # ── Chains ────────────────────────────────────────────────────

    def push_handler(self, handler: Handler) -> None:
        """Append a handler. Handlers pushed earlier receive records first."""
        if not isinstance(handler, Handler):
            raise TypeError(f"Expected Handler, got {type(handler).__name__}")
        self._handlers.append(handler)

    def push_processor(self, processor: ProcessorLike) -> None:
        """Append a processor. Processors pushed earlier run first."""
        if not callable(processor):
            raise TypeError(f"Processor must be callable, got {type(processor).__name__}")
        self._processors.append(processor)

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return tuple(self._handlers)

    @property
    def processors(self) -> tuple[ProcessorLike, ...]:
        return tuple(self._processors)

    def get_handler(self, name: str) -> Handler | None:
        for handler in self._handlers:
            if handler.name == name:
                return handler
        return None

    def remove_handler(self, name: str) -> Handler | None:
        """Remove a handler by name. Closes and returns it, or None."""
        handler = self.get_handler(name)
        if handler is not None:
            self._handlers.remove(handler)
            handler.close()
        return handler

    # ── Level ─────────────────────────────────────────────────────

    @property
    def current_level(self) -> int:
        return self._current_level

    @current_level.setter
    def current_level(self, value: int | str) -> None:
        self._current_level = resolve_level(value)

    # ── Core Logging ──────────────────────────────────────────────

    def log(
        self,
        level: int | str,
        message: str,
        tags: set[str] | None = None,
        **context: Any,
    ) -> None:
        """
        Build a record, run the processor chain, dispatch to handlers.

        Returns immediately when there are no handlers or level is below
        current_level.
        """
        level = resolve_level(level)
        if not self._should_emit(level):
            return

        record = LogRecord.create(level=level, message=message, channel=self.name, tags=tags)
        if context:
            # "channel" is a legal context key, so context is not passed as kwargs
            record = record.with_changes(context=context)

        for processor in self._processors:
            record = processor(record)

        with self._emit_lock:
            for handler in self._handlers:
                if not handler.handles(record):
                    continue
                try:
                    handler.emit(record)
                except Exception:
                    # Never let handler failure crash the caller
                    pass

    def _should_emit(self, level: int) -> bool:
        if not self._handlers:
            return False
        return level >= self._current_level

    # ── Convenience Methods ───────────────────────────────────────

    def trace(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.TRACE, message, tags, **ctx)

    def debug(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.DEBUG, message, tags, **ctx)

    def verbose(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.VERBOSE, message, tags, **ctx)

    def info(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.INFO, message, tags, **ctx)

    def notice(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.NOTICE, message, tags, **ctx)

    def warning(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.WARNING, message, tags, **ctx)

    def error(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.ERROR, message, tags, **ctx)

    def alert(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.ALERT, message, tags, **ctx)

    def critical(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.CRITICAL, message, tags, **ctx)

    # ── Status ────────────────────────────────────────────────────

    def status(self) -> dict:
        """Current logger state for display."""
        return {
            "name": self.name,
            "current_level": self._current_level,
            "current_level_name": level_name(self._current_level),
            "handlers": [
                {
                    "name": handler.name,
                    "type": type(handler).__name__,
                    "min_level": handler.min_level,
                    "min_level_name": level_name(handler.min_level),
                }
                for handler in self._handlers
            ],
            "processors": [
                type(p).__name__ if isinstance(p, Processor)
                else getattr(p, "__name__", repr(p))
                for p in self._processors
            ],
        }

    # ── Cleanup ───────────────────────────────────────────────────

    def flush(self) -> None:
        for handler in self._handlers:
            handler.flush()

    def close(self) -> None:
        """Close all handlers. Call during shutdown."""
        for handler in self._handlers:
            handler.close()
