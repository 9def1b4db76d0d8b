"""
Pipeline assembler.

Turns the tag registry into setup instructions on the logger definition:

    push_handler(@h1), push_handler(@h2), ..., push_processor(@p1), ...

Handlers are all attached before any processor. Each chain is in ascending
priority order. Afterwards, every LoggerAware component in the container
gets set_logger(@logger).

Assembly is all-or-nothing. Before any instruction is written, every chain
member is checked to be buildable: its factory resolves, its declared
arguments fit the factory's signature, and it produces a Handler (handler
chain) or a callable (processor chain). Every LoggerAware component is
checked for a compatible set_logger().

Members whose factory is a plain function only get their produced type
checked when the definition declares it with set_type().
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable

from logweave.composition.sorting import sort_by_priority
from logweave.composition.tags import Role, TagRegistry
from logweave.container import Container, Definition, reference
from logweave.errors import CapabilityInjectionError, ComponentResolutionError, UnknownComponentError
from logweave.logger.aware import LoggerAware
from logweave.logger.core import Logger
from logweave.logger.handlers import Handler

PUSH_HANDLER = "push_handler"
PUSH_PROCESSOR = "push_processor"
SET_LOGGER = "set_logger"


@dataclass(frozen=True)
class SetupInstruction:
    target: str
    method: str
    argument: str


@dataclass(frozen=True)
class LoggerBinding:
    """The assembled plan. Immutable once returned."""
    logger: str
    handlers: tuple[str, ...]
    processors: tuple[str, ...]
    injections: tuple[str, ...] = ()

    def instructions(self) -> list[SetupInstruction]:
        """Handler attachments, then processor attachments, then injections."""
        logger_ref = reference(self.logger)
        steps = [SetupInstruction(self.logger, PUSH_HANDLER, reference(h)) for h in self.handlers]
        steps += [SetupInstruction(self.logger, PUSH_PROCESSOR, reference(p)) for p in self.processors]
        steps += [SetupInstruction(target, SET_LOGGER, logger_ref) for target in self.injections]
        return steps


class PipelineAssembler:

    def __init__(self, container: Container):
        self._container = container
        self._log = Logger.instance()

    def assemble(self, registry: TagRegistry, logger_identity: str) -> LoggerBinding:
        """
        Build both chains, find injection targets, then write setup calls.

        Raises:
            UnknownComponentError: logger or a chain member is not declared.
            ComponentResolutionError: a chain member cannot be built, or
                builds something that cannot take its place in the chain.
            CapabilityInjectionError: a LoggerAware component cannot take the logger.
        """
        self._require(logger_identity)

        handlers = tuple(sort_by_priority(registry.by_role(Role.HANDLER), registry.priority_of))
        processors = tuple(sort_by_priority(registry.by_role(Role.PROCESSOR), registry.priority_of))

        for identity in handlers:
            _check_member(self._require(identity), Role.HANDLER)
        for identity in processors:
            _check_member(self._require(identity), Role.PROCESSOR)

        binding = LoggerBinding(
            logger=logger_identity,
            handlers=handlers,
            processors=processors,
            injections=tuple(self._injection_targets(logger_identity)),
        )

        self.apply(binding)
        self._log.debug(
            f"Assembled '{logger_identity}': "
            f"{len(handlers)} handlers, {len(processors)} processors, "
            f"{len(binding.injections)} injections",
            tags={"composition", "assembly"},
            handlers=list(handlers),
            processors=list(processors),
        )
        return binding

    def apply(self, binding: LoggerBinding) -> None:
        for step in binding.instructions():
            self._container.get_definition(step.target).add_setup(step.method, step.argument)

    def _require(self, identity: str) -> Definition:
        if not self._container.has_definition(identity):
            raise UnknownComponentError(identity, self._container.names())
        return self._container.get_definition(identity)

    def _injection_targets(self, logger_identity: str) -> list[str]:
        targets = []
        for definition in self._container.find_by_type(LoggerAware):
            if definition.name == logger_identity:
                continue
            _check_injectable(definition)
            targets.append(definition.name)
        return targets


# ── Chain member checks ───────────────────────────────────────────

def _check_member(definition: Definition, role: Role) -> None:
    factory = definition.resolve_factory()
    _check_arguments(definition, factory)

    produced = definition.type
    if produced is None:
        return
    if role is Role.HANDLER and not issubclass(produced, Handler):
        raise ComponentResolutionError(
            definition.name, f"{produced.__name__} is not a Handler"
        )
    if role is Role.PROCESSOR and not _instances_callable(produced):
        raise ComponentResolutionError(
            definition.name, f"{produced.__name__} instances are not callable processors"
        )


def _check_arguments(definition: Definition, factory: Callable[..., Any]) -> None:
    """Bind the declared arguments without building anything."""
    try:
        signature = inspect.signature(factory)
    except (TypeError, ValueError):
        # builtins without introspectable signatures
        return

    arguments = definition.arguments
    try:
        if arguments is None:
            signature.bind()
        elif isinstance(arguments, dict):
            signature.bind(**arguments)
        else:
            signature.bind(*arguments)
    except TypeError as exc:
        raise ComponentResolutionError(
            definition.name, f"arguments do not fit {_factory_name(factory)}{signature}: {exc}"
        ) from exc


def _instances_callable(cls: type) -> bool:
    return any("__call__" in vars(klass) for klass in cls.__mro__ if klass is not object)


def _factory_name(factory: Callable[..., Any]) -> str:
    return getattr(factory, "__qualname__", None) or repr(factory)


# ── Injection checks ──────────────────────────────────────────────

def _check_injectable(definition: Definition) -> None:
    cls = definition.type
    try:
        attribute = inspect.getattr_static(cls, SET_LOGGER)
    except AttributeError:
        raise CapabilityInjectionError(definition.name, f"{cls.__name__} has no {SET_LOGGER}()") from None

    if getattr(attribute, "__isabstractmethod__", False):
        raise CapabilityInjectionError(
            definition.name, f"{cls.__name__} does not implement {SET_LOGGER}()"
        )

    # the call is instance.set_logger(logger); shape depends on the descriptor
    if isinstance(attribute, staticmethod):
        method, call_args = attribute.__func__, (None,)
    elif isinstance(attribute, classmethod):
        method, call_args = attribute.__func__, (cls, None)
    elif inspect.isfunction(attribute):
        method, call_args = attribute, (None, None)
    else:
        method, call_args = attribute, (None,)

    if not callable(method):
        raise CapabilityInjectionError(definition.name, f"{SET_LOGGER}() is not callable")
    try:
        inspect.signature(method).bind(*call_args)
    except TypeError as exc:
        raise CapabilityInjectionError(
            definition.name, f"{SET_LOGGER}() must accept exactly one logger argument ({exc})"
        ) from exc
    except ValueError:
        # No signature available (builtin); nothing to check
        pass
