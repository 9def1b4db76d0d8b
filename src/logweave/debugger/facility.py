"""
Shared, process-wide debugger facility.

Three fields matter to composition:
    log_directory  where debug output goes; first writer wins
    logger         current debugger logger; a FileDebugLogger by default
    email          contact address, read when building the debugger adapter

Lifecycle: created before composition, each field written at most once by
the first successful writer, read freely afterwards. Composition code takes
the facility as an explicit argument; instance() is only the default.
"""

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol


class DebugLogger(Protocol):
    def log(self, value: Any, priority: str = "info") -> Any: ...


class DebugFacility:

    _instance: Optional["DebugFacility"] = None
    _lock = threading.Lock()

    def __init__(
        self,
        log_directory: str | None = None,
        email: str | None = None,
        logger: DebugLogger | None = None,
    ) -> None:
        self._log_directory = log_directory
        self.email = email
        self.logger = logger
        self._directory_lock = threading.Lock()

    @classmethod
    def instance(cls) -> "DebugFacility":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset singleton. For testing only."""
        with cls._lock:
            cls._instance = None

    # ── Log directory ─────────────────────────────────────────────

    @property
    def log_directory(self) -> str | None:
        return self._log_directory

    @log_directory.setter
    def log_directory(self, value: str | None) -> None:
        """Direct configuration by the host, before composition."""
        with self._directory_lock:
            self._log_directory = value

    def claim_log_directory(self, path: str | Path) -> bool:
        """
        Set log_directory only if nobody has set it yet.

        Check-then-set runs under one lock. Returns True if this call wrote it.
        """
        with self._directory_lock:
            if self._log_directory:
                return False
            self._log_directory = str(path)
            return True

    # ── Logging ───────────────────────────────────────────────────

    def log(self, value: Any, priority: str = "info") -> Any:
        """
        Log through the current debugger logger.

        Without one, a FileDebugLogger over log_directory is installed on first
        use. Without a log directory there is nowhere to write and None is returned.
        """
        if self.logger is None:
            if not self._log_directory:
                return None
            self.logger = FileDebugLogger(self._log_directory)
        return self.logger.log(value, priority)


class FileDebugLogger:
    """
    Default debugger logger: appends one line per call to <priority>.log.

        [2026-02-12 14:32:05] Connection refused
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def log(self, value: Any, priority: str = "info") -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        if isinstance(value, BaseException):
            message = f"{type(value).__name__}: {value}"
        else:
            message = str(value)
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        path = self.directory / f"{priority}.log"
        with open(path, "a", encoding="utf-8") as fh:
            fh.write(f"[{stamp}] {message}\n")
        return path
