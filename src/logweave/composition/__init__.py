"""
Composition engine.

Reads handler/processor declarations from the container, orders them by
priority, writes the attach instructions onto the logger definition, and
binds the result to the debugger facility.
"""

from logweave.composition.tags import PRIORITY_TAG, Role, ComponentDeclaration, TagRegistry
from logweave.composition.sorting import sort_by_priority
from logweave.composition.directory import (
    LOG_DIR_PARAMETER,
    DEFAULT_LOG_DIR_TEMPLATE,
    LogDirectoryState,
    ResolvedLogDirectory,
    resolve_log_dir,
    ensure_directory,
)
from logweave.composition.assembler import LoggerBinding, PipelineAssembler, SetupInstruction
from logweave.composition.finalizer import FinalizationReport, LateBindingFinalizer
from logweave.composition.extension import CompositionResult, LoggingExtension, compose

__all__ = [
    "PRIORITY_TAG",
    "Role",
    "ComponentDeclaration",
    "TagRegistry",
    "sort_by_priority",
    "LOG_DIR_PARAMETER",
    "DEFAULT_LOG_DIR_TEMPLATE",
    "LogDirectoryState",
    "ResolvedLogDirectory",
    "resolve_log_dir",
    "ensure_directory",
    "LoggerBinding",
    "PipelineAssembler",
    "SetupInstruction",
    "FinalizationReport",
    "LateBindingFinalizer",
    "CompositionResult",
    "LoggingExtension",
    "compose",
]
