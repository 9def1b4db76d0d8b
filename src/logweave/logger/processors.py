"""
Record processors.

A processor takes a LogRecord and returns a (possibly new) LogRecord.
Processors run in the order they were pushed, before any handler sees
the record.

Built-in processors and the priorities the logging extension tags them with:
    UrlProcessor        10   exception_url for rendered exception pages
    PriorityProcessor   20   custom debugger priority → channel name
    ExceptionProcessor 100   renders exceptions, adds exception_file
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from logweave.logger.records import LogRecord

if TYPE_CHECKING:
    from logweave.debugger.renderer import ExceptionRenderer

# Priorities a debugger reports with; anything else is a custom channel name.
DEBUGGER_PRIORITIES = frozenset({"debug", "info", "warning", "error", "exception", "critical"})


class Processor(ABC):
    """Base processor. Records are immutable: return a copy to change one."""

    @abstractmethod
    def __call__(self, record: LogRecord) -> LogRecord: ...


class PriorityProcessor(Processor):
    """
    Moves routing hints from the context into the record channel.

    context["channel"] always wins. Otherwise context["priority"] becomes the
    channel when it is not one of the standard debugger priorities, so
    debugger.log("Payment failed", "payments") lands on channel "payments".
    Both keys are removed from the context.
    """

    def __call__(self, record: LogRecord) -> LogRecord:
        if "channel" not in record.context and "priority" not in record.context:
            return record

        context = dict(record.context)
        channel = record.channel
        priority = context.pop("priority", None)

        if "channel" in context:
            channel = str(context.pop("channel"))
        elif priority is not None and str(priority).lower() not in DEBUGGER_PRIORITIES:
            channel = str(priority)

        return record.with_changes(channel=channel, context=context)


class ExceptionProcessor(Processor):
    """Renders context["exception"] to a debug page and records its file name."""

    def __init__(self, renderer: ExceptionRenderer):
        self._renderer = renderer

    def __call__(self, record: LogRecord) -> LogRecord:
        exception = record.context.get("exception")
        if not isinstance(exception, BaseException):
            return record

        path = self._renderer.render(exception)
        return record.with_extra(exception_file=path.name)


class UrlProcessor(Processor):
    """
    Adds exception_url pointing at the rendered page under base_url.

    The file name comes from the shared renderer, so the URL matches the page
    ExceptionProcessor writes regardless of which of the two runs first.
    """

    def __init__(self, base_url: str, renderer: ExceptionRenderer):
        self.base_url = base_url.rstrip("/")
        self._renderer = renderer

    def __call__(self, record: LogRecord) -> LogRecord:
        exception = record.context.get("exception")
        if not isinstance(exception, BaseException):
            return record

        filename = self._renderer.get_exception_file(exception).name
        return record.with_extra(exception_url=f"{self.base_url}/{filename}")
