"""
The "consumes a logger" capability.

Components opt in by implementing LoggerAware. The logging extension finds
every such definition in the container and adds a set_logger() setup call
with the pipeline logger, after the handler and processor chains are built.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from logweave.logger.core import Logger


class LoggerAware(ABC):
    """Capability interface: wants the pipeline logger injected."""

    @abstractmethod
    def set_logger(self, logger: Logger) -> None: ...


class LoggerAwareMixin(LoggerAware):
    """Stores the injected logger on self.logger."""

    logger: Optional["Logger"] = None

    def set_logger(self, logger: Logger) -> None:
        self.logger = logger
