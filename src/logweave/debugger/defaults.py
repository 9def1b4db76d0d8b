"""
Default debugger logger registration.

Stands in for the debugger's own container integration: it declares the
conventional "debugger.logger" component and installs whatever that name
resolves to into the facility when the container initializes. The logging
extension may later replace the declaration with an alias to its adapter.

Usage:
    from logweave.debugger.defaults import register_default_debugger_logger
    register_default_debugger_logger(container, facility)
"""

from __future__ import annotations

from logweave.container import Container
from logweave.debugger.facility import DebugFacility, FileDebugLogger

DEFAULT_LOGGER_ID = "debugger.logger"


def register_default_debugger_logger(
    container: Container,
    facility: DebugFacility | None = None,
) -> None:
    """
    Declare debugger.logger and the initializer that installs it.

    Args:
        container: Container to populate.
        facility: Facility to install into. Defaults to singleton.
    """
    if facility is None:
        facility = DebugFacility.instance()

    def build() -> FileDebugLogger:
        return FileDebugLogger(facility.log_directory or container.parameters.get("logDir", "log"))

    container.add_definition(DEFAULT_LOGGER_ID, build).set_type(FileDebugLogger)

    def install(c: Container) -> None:
        if c.has_definition(DEFAULT_LOGGER_ID):
            facility.logger = c.get(DEFAULT_LOGGER_ID)

    container.add_initializer(install)
