"""
Composition run.

The compiler drives registered extensions through three phases:

1. load_configuration   every extension declares its components
2. before_compile       every extension wires against the full set of
                        declarations, including other extensions'
3. after_compile        late overrides that must see the wired result

Between 2 and 3 every "@name" reference in the container is validated.
Any exception aborts the run; a failed run never yields a container.
"""

from __future__ import annotations

from typing import Any

from logweave.container import Container
from logweave.errors import ConfigurationError
from logweave.logger.core import Logger


class CompilerExtension:
    """Base extension. Override the phases you need."""

    def __init__(self) -> None:
        self.name: str = ""

    def prefix(self, identity: str) -> str:
        """Namespace an identity under this extension: "logging.logger"."""
        return f"{self.name}.{identity}"

    def load_configuration(self, container: Container) -> None:
        pass

    def before_compile(self, container: Container) -> None:
        pass

    def after_compile(self, container: Container) -> None:
        pass


class Compiler:
    """
    Usage:
        compiler = Compiler(Container(parameters={"appDir": "/srv/app/app"}))
        compiler.add_extension("logging", LoggingExtension(config))
        container = compiler.compile()
    """

    def __init__(self, container: Container | None = None):
        self.container = container if container is not None else Container()
        self._extensions: dict[str, CompilerExtension] = {}
        self._compiled = False
        self._log = Logger.instance()

    def add_extension(self, name: str, extension: CompilerExtension) -> CompilerExtension:
        if self._compiled:
            raise ConfigurationError("Cannot add extensions after compile()")
        if name in self._extensions:
            raise ConfigurationError(f"Extension '{name}' is already registered")
        extension.name = name
        self._extensions[name] = extension
        return extension

    def get_extension(self, name: str) -> CompilerExtension:
        return self._extensions[name]

    @property
    def extensions(self) -> dict[str, Any]:
        return dict(self._extensions)

    def compile(self) -> Container:
        """Run all phases once. Raises ConfigurationError subclasses on failure."""
        if self._compiled:
            raise ConfigurationError("Container has already been compiled")

        tags = {"composition"}
        for name, extension in self._extensions.items():
            self._log.debug(f"load_configuration: {name}", tags=tags)
            extension.load_configuration(self.container)

        for name, extension in self._extensions.items():
            self._log.debug(f"before_compile: {name}", tags=tags)
            extension.before_compile(self.container)

        self.container.validate()

        for name, extension in self._extensions.items():
            self._log.debug(f"after_compile: {name}", tags=tags)
            extension.after_compile(self.container)

        self._compiled = True
        self._log.info(
            f"Composition complete: {self.container.count} components",
            tags=tags,
            extensions=list(self._extensions),
        )
        return self.container
