"""
Log directory resolution.

Fallback order, first hit wins:

1. parameters["logDir"], expanded against parameters      → RESOLVED
2. the debugger facility's log_directory, verbatim         → EXTERNALLY_SET
3. "%appDir%/../log", expanded against parameters          → RESOLVED

Resolution happens once per composition run. The directory is then created
(recursively, idempotently) with ensure_directory().
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from logweave.container.parameters import expand
from logweave.debugger.facility import DebugFacility
from logweave.errors import ConfigurationError, DirectoryCreationError

LOG_DIR_PARAMETER = "logDir"
DEFAULT_LOG_DIR_TEMPLATE = "%appDir%/../log"


class LogDirectoryState(str, Enum):
    UNSET = "unset"
    EXTERNALLY_SET = "externally_set"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class ResolvedLogDirectory:
    path: str
    state: LogDirectoryState
    source: str  # "parameter", "facility" or "default"


def resolve_log_dir(
    parameters: dict[str, Any],
    facility: DebugFacility | None = None,
) -> ResolvedLogDirectory:
    """
    Resolve the log directory. Pure: reads, never writes.

    Paths derived from parameters are made absolute; a facility value is
    returned exactly as it was set.

    Raises:
        ConfigurationError: a placeholder names a missing parameter.
    """
    if parameters.get(LOG_DIR_PARAMETER) is not None:
        path = expand(f"%{LOG_DIR_PARAMETER}%", parameters)
        return ResolvedLogDirectory(_absolute(path), LogDirectoryState.RESOLVED, "parameter")

    if facility is not None and facility.log_directory:
        return ResolvedLogDirectory(
            facility.log_directory, LogDirectoryState.EXTERNALLY_SET, "facility"
        )

    path = expand(DEFAULT_LOG_DIR_TEMPLATE, parameters)
    return ResolvedLogDirectory(_absolute(path), LogDirectoryState.RESOLVED, "default")


def ensure_directory(path: str | Path) -> Path:
    """
    Create path and parents if absent.

    Existence is the success condition: a directory created concurrently by
    someone else is fine.

    Raises:
        DirectoryCreationError: path is still not a directory afterwards.
    """
    target = Path(path)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        if not target.is_dir():
            raise DirectoryCreationError(str(path)) from exc
    return target


def _absolute(path: Any) -> str:
    if not isinstance(path, (str, os.PathLike)):
        raise ConfigurationError(f"Log directory must be a path, got {path!r}")
    return os.path.abspath(os.fspath(path))
