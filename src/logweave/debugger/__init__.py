"""
Debugger integration: the shared facility, the exception page renderer,
and the adapter that routes debugger output into the pipeline logger.
"""

from logweave.debugger.facility import DebugFacility, DebugLogger, FileDebugLogger
from logweave.debugger.renderer import ExceptionRenderer
from logweave.debugger.adapter import DebuggerAdapter

__all__ = [
    "DebugFacility",
    "DebugLogger",
    "FileDebugLogger",
    "ExceptionRenderer",
    "DebuggerAdapter",
]
