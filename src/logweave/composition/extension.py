"""
Logging extension: the composition run for one logging pipeline.

Components it declares (with the default extension name "logging"):

    logging.logger                  Logger(name)
    logging.renderer                ExceptionRenderer(log dir)      not autowired
    logging.adapter                 DebuggerAdapter(@logger, @renderer, ...)
    logging.handler.<key>           configured handlers             not autowired
    logging.processor.priority      PriorityProcessor               priority 20
    logging.processor.exception     ExceptionProcessor(@renderer)   priority 100
    logging.processor.url           UrlProcessor(url, @renderer)    priority 10
    logging.processor.<key>         configured processors

The renderer is declared on its own and referenced by handle. The adapter
needs the logger, the processors attached to the logger need the renderer,
and the renderer needs the log directory resolved at the start of the run.
Folding the renderer into the logger would make the logger's construction
depend on itself.

Phases:
    load_configuration  resolve + create log dir, declare components
    before_compile      tag registry → assembler → setup calls on the logger
    after_compile       finalizer: default logger takeover, log dir propagation
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from logweave.composition.assembler import LoggerBinding, PipelineAssembler
from logweave.composition.directory import (
    LOG_DIR_PARAMETER,
    ResolvedLogDirectory,
    ensure_directory,
    resolve_log_dir,
)
from logweave.composition.finalizer import FinalizationReport, LateBindingFinalizer
from logweave.composition.tags import PRIORITY_TAG, Role, TagRegistry
from logweave.config import ComponentSpec, LoggingConfig, spec_priority
from logweave.container import Container, reference
from logweave.container.compiler import Compiler, CompilerExtension
from logweave.debugger.adapter import DebuggerAdapter
from logweave.debugger.facility import DebugFacility
from logweave.debugger.renderer import ExceptionRenderer
from logweave.logger.core import Logger
from logweave.logger.processors import ExceptionProcessor, PriorityProcessor, UrlProcessor

URL_PROCESSOR_PRIORITY = 10
PRIORITY_PROCESSOR_PRIORITY = 20
EXCEPTION_PROCESSOR_PRIORITY = 100


class LoggingExtension(CompilerExtension):

    TAG_HANDLER = Role.HANDLER.value
    TAG_PROCESSOR = Role.PROCESSOR.value
    TAG_PRIORITY = PRIORITY_TAG

    def __init__(
        self,
        config: LoggingConfig | dict | None = None,
        facility: DebugFacility | None = None,
    ):
        super().__init__()
        if not isinstance(config, LoggingConfig):
            config = LoggingConfig.from_dict(config)
        self.config = config
        self.facility = facility if facility is not None else DebugFacility.instance()
        self.log_directory: ResolvedLogDirectory | None = None
        self.binding: LoggerBinding | None = None
        self.report: FinalizationReport | None = None
        self._log = Logger.instance()

    # ── Phase 1 ───────────────────────────────────────────────────

    def load_configuration(self, container: Container) -> None:
        config = self.config
        parameters = container.parameters

        lookup = parameters
        if config.log_dir is not None:
            lookup = {**parameters, LOG_DIR_PARAMETER: config.log_dir}
        self.log_directory = resolve_log_dir(lookup, self.facility)
        ensure_directory(self.log_directory.path)
        self._log.debug(
            f"Log directory: {self.log_directory.path}",
            tags={"composition", "log_dir"},
            state=self.log_directory.state.value,
            source=self.log_directory.source,
        )

        section = parameters.get(self.name)
        if section is None:
            parameters[self.name] = {"name": config.name}
        elif isinstance(section, dict) and "name" not in section:
            section["name"] = config.name

        # an explicit log_dir option is what %logDir% means from here on
        if parameters.get(LOG_DIR_PARAMETER) is None or config.log_dir is not None:
            parameters[LOG_DIR_PARAMETER] = self.log_directory.path

        container.add_definition(self.prefix("logger"), Logger, [config.name])

        container.add_definition(
            self.prefix("adapter"),
            DebuggerAdapter,
            {
                "logger": reference(self.prefix("logger")),
                "renderer": reference(self.prefix("renderer")),
                "email": self.facility.email,
                "access_priority": config.access_priority,
            },
        )

        container.add_definition(
            self.prefix("renderer"),
            ExceptionRenderer,
            {"directory": self.log_directory.path},
        ).set_autowired(False)

        self._load_handlers(container)
        self._load_processors(container)

    def _load_handlers(self, container: Container) -> None:
        for key, spec in self.config.handler_specs.items():
            handler = self._declare(container, f"handler.{key}", spec, self.TAG_HANDLER, spec_priority(key, spec))
            handler.set_autowired(False)

    def _load_processors(self, container: Container) -> None:
        config = self.config

        if config.use_priority_processor:
            # custom debugger priorities become channel names
            processor = container.add_definition(self.prefix("processor.priority"), PriorityProcessor)
            processor.add_tag(self.TAG_PROCESSOR).add_tag(self.TAG_PRIORITY, PRIORITY_PROCESSOR_PRIORITY)

        container.add_definition(
            self.prefix("processor.exception"),
            ExceptionProcessor,
            {"renderer": reference(self.prefix("renderer"))},
        ).add_tag(self.TAG_PROCESSOR).add_tag(self.TAG_PRIORITY, EXCEPTION_PROCESSOR_PRIORITY)

        if config.debugger_base_url is not None:
            container.add_definition(
                self.prefix("processor.url"),
                UrlProcessor,
                {
                    "base_url": config.debugger_base_url,
                    "renderer": reference(self.prefix("renderer")),
                },
            ).add_tag(self.TAG_PROCESSOR).add_tag(self.TAG_PRIORITY, URL_PROCESSOR_PRIORITY)

        for key, spec in config.processor_specs.items():
            self._declare(container, f"processor.{key}", spec, self.TAG_PROCESSOR, spec_priority(key, spec))

    def _declare(self, container: Container, identity: str, spec: ComponentSpec, tag: str, priority: int):
        definition = container.add_definition(self.prefix(identity), spec.factory, spec.arguments)
        return definition.add_tag(tag).add_tag(self.TAG_PRIORITY, priority)

    # ── Phase 2 ───────────────────────────────────────────────────

    def before_compile(self, container: Container) -> None:
        registry = TagRegistry.from_container(container)
        self.binding = PipelineAssembler(container).assemble(registry, self.prefix("logger"))

    # ── Phase 3 ───────────────────────────────────────────────────

    def after_compile(self, container: Container) -> None:
        self.report = LateBindingFinalizer(container, self.facility).finalize(
            self.prefix("adapter"),
            self.log_directory,
            take_over=self.config.hook_to_debugger,
        )


@dataclass
class CompositionResult:
    container: Container
    extension: LoggingExtension

    @property
    def binding(self) -> LoggerBinding:
        return self.extension.binding

    @property
    def log_directory(self) -> ResolvedLogDirectory:
        return self.extension.log_directory

    @property
    def report(self) -> FinalizationReport:
        return self.extension.report

    @property
    def logger(self) -> Logger:
        return self.container.get(self.binding.logger)

    @property
    def adapter(self) -> DebuggerAdapter:
        return self.container.get(self.extension.prefix("adapter"))


def compose(
    config: LoggingConfig | dict | None = None,
    parameters: dict[str, Any] | None = None,
    facility: DebugFacility | None = None,
    container: Container | None = None,
    name: str = "logging",
    initialize: bool = True,
) -> CompositionResult:
    """
    Run one complete composition.

    Args:
        config: Extension options (LoggingConfig or dict).
        parameters: Merged into the container parameters (appDir, logDir, ...).
        facility: Debugger facility. Defaults to singleton.
        container: Existing container, possibly with other components declared.
        name: Extension name; prefixes every declared identity.
        initialize: Run container initializers after compiling.

    Raises:
        ConfigurationError: any failure. Nothing is returned half-wired.
    """
    if container is None:
        container = Container(parameters)
    elif parameters:
        container.parameters.update(parameters)

    extension = LoggingExtension(config, facility)
    compiler = Compiler(container)
    compiler.add_extension(name, extension)
    compiler.compile()

    if initialize:
        container.initialize()
    return CompositionResult(container=container, extension=extension)
