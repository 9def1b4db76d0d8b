"""
Component container.

Holds named component definitions and materializes them on demand.
A definition names a factory (class, callable, or "module.Class" string),
its arguments, tags, and setup calls applied after construction.

Usage:
    container = Container(parameters={"appDir": "/srv/app"})
    container.add_definition("mailer", "myapp.mail.Mailer", {"host": "%mailHost%"})
    container.add_definition("audit", AuditLog, ["@mailer"]).add_tag("audit")
    audit = container.get("audit")

String arguments starting with "@" are references to other components.
Placeholders like %name% are expanded against container parameters.
"""

from __future__ import annotations

import importlib
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from logweave.container.parameters import expand
from logweave.errors import (
    ComponentResolutionError,
    ConfigurationError,
    DuplicateIdentityError,
    UnknownComponentError,
)

REFERENCE_PREFIX = "@"


@dataclass(frozen=True)
class SetupCall:
    """A method call applied to the instance right after construction."""
    method: str
    args: tuple = ()


class Definition:
    """Declarative description of one component. Never instantiated itself."""

    def __init__(self, name: str, factory: Any = None, arguments: list | dict | None = None):
        self.name = name
        self.factory = factory
        self.arguments = arguments
        self.tags: dict[str, Any] = {}
        self.autowired = True
        self.setup: list[SetupCall] = []
        self._type: type | None = None

    def __repr__(self) -> str:
        return f"Definition({self.name!r}, factory={self.factory!r})"

    # ── Fluent setters ────────────────────────────────────────────

    def set_factory(self, factory: Any, arguments: list | dict | None = None) -> "Definition":
        self.factory = factory
        self.arguments = arguments
        return self

    def set_arguments(self, arguments: list | dict | None) -> "Definition":
        self.arguments = arguments
        return self

    def add_tag(self, tag: str, value: Any = True) -> "Definition":
        self.tags[tag] = value
        return self

    def get_tag(self, tag: str) -> Any:
        return self.tags.get(tag)

    def set_autowired(self, autowired: bool) -> "Definition":
        self.autowired = autowired
        return self

    def add_setup(self, method: str, *args: Any) -> "Definition":
        self.setup.append(SetupCall(method, tuple(args)))
        return self

    def set_type(self, cls: type) -> "Definition":
        """Declare the produced type when the factory is not a class."""
        self._type = cls
        return self

    # ── Resolution ────────────────────────────────────────────────

    def resolve_factory(self) -> Callable[..., Any]:
        """
        Resolve the factory to a callable.

        Dotted strings are imported lazily: "pkg.module.Class".

        Raises:
            ComponentResolutionError: If no factory is set or it cannot be imported.
        """
        factory = self.factory
        if factory is None:
            raise ComponentResolutionError(self.name, "no factory declared")
        if isinstance(factory, str):
            if "." not in factory:
                raise ComponentResolutionError(
                    self.name, f"factory '{factory}' is not a dotted 'module.Class' path"
                )
            module_path, attr = factory.rsplit(".", 1)
            try:
                module = importlib.import_module(module_path)
                factory = getattr(module, attr)
            except (ImportError, AttributeError) as exc:
                raise ComponentResolutionError(self.name, str(exc)) from exc
        if not callable(factory):
            raise ComponentResolutionError(self.name, f"factory {factory!r} is not callable")
        return factory

    @property
    def type(self) -> type | None:
        """Produced type: explicit, or the factory itself when it is a class."""
        if self._type is not None:
            return self._type
        if self.factory is None:
            return None
        factory = self.resolve_factory()
        return factory if isinstance(factory, type) else None

    def references(self) -> list[str]:
        """Names of all components referenced from arguments and setup calls."""
        found: list[str] = []
        _collect_references(self.arguments, found)
        for call in self.setup:
            _collect_references(call.args, found)
        return found


class Container:
    """
    Component container. Singleton accessor provided for hosts that keep
    one container per process; composition code takes it explicitly.
    """

    _instance: Optional["Container"] = None
    _lock = threading.Lock()

    def __init__(self, parameters: dict[str, Any] | None = None) -> None:
        self.parameters: dict[str, Any] = dict(parameters or {})
        self._definitions: dict[str, Definition] = {}
        self._aliases: dict[str, str] = {}
        self._instances: dict[str, object] = {}
        self._creating: set[str] = set()
        self._initializers: list[Callable[["Container"], None]] = []
        self._initialized = False

    @classmethod
    def instance(cls) -> "Container":
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

    # ── Definitions ───────────────────────────────────────────────

    def add_definition(
        self,
        name: str,
        factory: Any = None,
        arguments: list | dict | None = None,
    ) -> Definition:
        """
        Declare a component.

        Raises:
            DuplicateIdentityError: If the name is already a definition or alias.
        """
        if name in self._definitions or name in self._aliases:
            raise DuplicateIdentityError(name)
        definition = Definition(name, factory, arguments)
        self._definitions[name] = definition
        return definition

    def remove_definition(self, name: str) -> Definition:
        if name not in self._definitions:
            raise UnknownComponentError(name, self.names())
        self._instances.pop(name, None)
        return self._definitions.pop(name)

    def has_definition(self, name: str) -> bool:
        return self._resolve_alias(name) in self._definitions

    def get_definition(self, name: str) -> Definition:
        resolved = self._resolve_alias(name)
        if resolved not in self._definitions:
            raise UnknownComponentError(name, self.names())
        return self._definitions[resolved]

    @property
    def definitions(self) -> dict[str, Definition]:
        """All definitions in registration order (copy)."""
        return dict(self._definitions)

    def names(self) -> list[str]:
        return sorted(self._definitions)

    # ── Aliases ───────────────────────────────────────────────────

    def add_alias(self, alias: str, target: str) -> None:
        if alias in self._definitions or alias in self._aliases:
            raise DuplicateIdentityError(alias)
        self._aliases[alias] = target

    def is_alias(self, name: str) -> bool:
        return name in self._aliases

    @property
    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def _resolve_alias(self, name: str) -> str:
        seen = set()
        while name in self._aliases:
            if name in seen:
                raise ConfigurationError(f"Circular alias detected for '{name}'")
            seen.add(name)
            name = self._aliases[name]
        return name

    # ── Lookup ────────────────────────────────────────────────────

    def find_by_tag(self, tag: str) -> dict[str, Any]:
        """{name: tag value} for every definition carrying tag, in registration order."""
        return {
            name: definition.tags[tag]
            for name, definition in self._definitions.items()
            if tag in definition.tags
        }

    def find_by_type(self, cls: type) -> list[Definition]:
        """Every definition whose produced type is a subclass of cls."""
        found = []
        for definition in self._definitions.values():
            produced = definition.type
            if produced is not None and issubclass(produced, cls):
                found.append(definition)
        return found

    def get_by_type(self, cls: type) -> object:
        """The single autowired component producing cls."""
        candidates = [d for d in self.find_by_type(cls) if d.autowired]
        if not candidates:
            raise UnknownComponentError(cls.__name__, self.names())
        if len(candidates) > 1:
            names = ", ".join(d.name for d in candidates)
            raise ConfigurationError(
                f"Multiple autowired components of type {cls.__name__}: {names}"
            )
        return self.get(candidates[0].name)

    # ── Materialization ───────────────────────────────────────────

    def get(self, name: str) -> object:
        """
        Get a component instance, creating it on first access.
        Subsequent calls return the cached instance.
        """
        resolved = self._resolve_alias(name)
        if resolved in self._instances:
            return self._instances[resolved]

        definition = self.get_definition(resolved)
        if resolved in self._creating:
            raise ConfigurationError(f"Circular reference detected for component '{resolved}'")

        self._creating.add(resolved)
        try:
            instance = self._create(definition)
        finally:
            self._creating.discard(resolved)

        self._instances[resolved] = instance
        return instance

    def has_instance(self, name: str) -> bool:
        return self._resolve_alias(name) in self._instances

    def _create(self, definition: Definition) -> object:
        factory = definition.resolve_factory()
        arguments = self._resolve_value(definition.arguments)
        try:
            if arguments is None:
                instance = factory()
            elif isinstance(arguments, dict):
                instance = factory(**arguments)
            else:
                instance = factory(*arguments)
        except TypeError as exc:
            raise ComponentResolutionError(definition.name, str(exc)) from exc

        for call in definition.setup:
            method = getattr(instance, call.method, None)
            if method is None:
                raise ComponentResolutionError(
                    definition.name,
                    f"{type(instance).__name__} has no method '{call.method}'",
                )
            args = self._resolve_value(list(call.args))
            try:
                method(*args)
            except TypeError as exc:
                raise ComponentResolutionError(
                    definition.name, f"{call.method}() rejected its arguments: {exc}"
                ) from exc
        return instance

    def _resolve_value(self, value: Any) -> Any:
        if isinstance(value, str):
            if value.startswith(REFERENCE_PREFIX):
                return self.get(value[len(REFERENCE_PREFIX):])
            return expand(value, self.parameters)
        if isinstance(value, (list, tuple)):
            return [self._resolve_value(v) for v in value]
        if isinstance(value, dict):
            return {k: self._resolve_value(v) for k, v in value.items()}
        return value

    # ── Validation ────────────────────────────────────────────────

    def validate(self) -> None:
        """
        Check that every reference and alias resolves.

        Raises:
            UnknownComponentError: naming the referencing definition.
        """
        for name, definition in self._definitions.items():
            for ref in definition.references():
                if not self.has_definition(ref):
                    raise UnknownComponentError(ref, referenced_by=name)
        for alias, target in self._aliases.items():
            if not self.has_definition(target):
                raise UnknownComponentError(target, referenced_by=alias)

    # ── Initialization ────────────────────────────────────────────

    def add_initializer(self, initializer: Callable[["Container"], None]) -> None:
        """Register a callback run once by initialize()."""
        self._initializers.append(initializer)

    def initialize(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        for initializer in self._initializers:
            initializer(self)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def count(self) -> int:
        return len(self._definitions)


def reference(name: str) -> str:
    """Build an "@name" reference argument."""
    return f"{REFERENCE_PREFIX}{name}"


def _collect_references(value: Any, found: list[str]) -> None:
    if isinstance(value, str):
        if value.startswith(REFERENCE_PREFIX):
            found.append(value[len(REFERENCE_PREFIX):])
    elif isinstance(value, (list, tuple)):
        for item in value:
            _collect_references(item, found)
    elif isinstance(value, dict):
        for item in value.values():
            _collect_references(item, found)
