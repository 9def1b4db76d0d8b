"""
Late-binding finalizer.

Runs after assembly, once every extension has declared its components:

- Takeover: replace the debugger's default logger declaration with an alias
  to the pipeline's debugger adapter, only when the host opted in.
- Directory propagation: hand the resolved log directory to the debugger
  facility unless someone set it first. An externally set directory is
  terminal and never written back.
"""

from __future__ import annotations

from dataclasses import dataclass

from logweave.composition.directory import LogDirectoryState, ResolvedLogDirectory
from logweave.container import Container
from logweave.debugger.defaults import DEFAULT_LOGGER_ID
from logweave.debugger.facility import DebugFacility
from logweave.logger.core import Logger


@dataclass(frozen=True)
class FinalizationReport:
    took_over_default_logger: bool
    claimed_log_directory: bool
    log_directory: str | None


class LateBindingFinalizer:

    def __init__(
        self,
        container: Container,
        facility: DebugFacility,
        default_logger_identity: str = DEFAULT_LOGGER_ID,
    ):
        self._container = container
        self._facility = facility
        self._default_logger_identity = default_logger_identity
        self._log = Logger.instance()

    def finalize(
        self,
        adapter_identity: str,
        log_directory: ResolvedLogDirectory,
        take_over: bool,
    ) -> FinalizationReport:
        took_over = take_over and self._take_over_default_logger(adapter_identity)

        claimed = False
        if log_directory.state is LogDirectoryState.RESOLVED:
            claimed = self._facility.claim_log_directory(log_directory.path)

        self._log.debug(
            "Finalized logging composition",
            tags={"composition", "finalize"},
            took_over_default_logger=took_over,
            claimed_log_directory=claimed,
        )
        return FinalizationReport(
            took_over_default_logger=took_over,
            claimed_log_directory=claimed,
            log_directory=self._facility.log_directory,
        )

    def _take_over_default_logger(self, adapter_identity: str) -> bool:
        existing = self._default_logger_identity
        # Only a real declaration is replaced; an alias means someone already took over
        if existing not in self._container.definitions:
            return False
        self._container.remove_definition(existing)
        self._container.add_alias(existing, adapter_identity)
        return True
