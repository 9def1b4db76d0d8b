"""
Logger runtime.

One logger per pipeline, an ordered handler chain, an ordered processor
chain. The chains are attached by the logging extension at composition
time; this package only runs them.
"""

from logweave.logger.core import Logger
from logweave.logger.records import LogRecord, LogLevel, level_name, resolve_level
from logweave.logger.handlers import (
    Handler,
    StreamHandler,
    FileHandler,
    BufferHandler,
)
from logweave.logger.processors import (
    Processor,
    PriorityProcessor,
    ExceptionProcessor,
    UrlProcessor,
)
from logweave.logger.formatters import LogFormatter, CompactFormatter, DetailedFormatter, JsonFormatter
from logweave.logger.aware import LoggerAware, LoggerAwareMixin

__all__ = [
    "Logger",
    "LogRecord",
    "LogLevel",
    "level_name",
    "resolve_level",
    "Handler",
    "StreamHandler",
    "FileHandler",
    "BufferHandler",
    "Processor",
    "PriorityProcessor",
    "ExceptionProcessor",
    "UrlProcessor",
    "LogFormatter",
    "CompactFormatter",
    "DetailedFormatter",
    "JsonFormatter",
    "LoggerAware",
    "LoggerAwareMixin",
]
