"""
Pydantic configuration schema for the logging extension.

Design principle: every option has a default, so an empty document is a
valid configuration (one logger, no handlers, built-in processors only).
Unknown options are rejected rather than ignored.

Usage:
    config = LoggingConfig.from_yaml("logging.yaml")

    # logging.yaml
    name: shop
    debugger_base_url: https://errors.example.com/
    handlers:
      10: logweave.logger.handlers.StreamHandler
      file:
        factory: logweave.logger.handlers.FileHandler
        arguments: {path: "%logDir%/shop.log", min_level: debug}
        priority: 20
    processors:
      request: myapp.logging.RequestProcessor
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    ValidationError,
    field_validator,
    model_validator,
)

from logweave.errors import ConfigurationError
from logweave.logger.records import LogLevel


class ComponentSpec(BaseModel):
    """
    How to build one handler or processor.

    Shorthand: a bare "module.Class" string (or a class) stands for
    {"factory": ...}.
    """
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    factory: Any
    arguments: Optional[Union[list[Any], dict[str, Any]]] = None
    priority: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _shorthand(cls, data: Any) -> Any:
        if isinstance(data, str) or callable(data):
            return {"factory": data}
        return data

    @field_validator("factory")
    @classmethod
    def _factory_is_usable(cls, value: Any) -> Any:
        if isinstance(value, str):
            if "." not in value.strip("."):
                raise ValueError(f"factory '{value}' must be a dotted 'module.Class' path")
            return value
        if not callable(value):
            raise ValueError(f"factory must be a dotted path or a callable, got {value!r}")
        return value


ComponentMap = dict[Union[int, str], Union[Literal[False], ComponentSpec]]


class LoggingConfig(BaseModel):
    """
    Top-level options.

    handlers / processors: key → component. Integer keys (or integer-like
    strings) double as priority unless the component sets one. A value of
    false disables one entry; false for the whole map disables all.
    """
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    handlers: Union[Literal[False], ComponentMap] = Field(default_factory=dict)
    processors: Union[Literal[False], ComponentMap] = Field(default_factory=dict)
    name: str = "app"
    hook_to_debugger: StrictBool = True
    debugger_base_url: Optional[str] = None
    use_priority_processor: StrictBool = True
    access_priority: str = "info"
    log_dir: Optional[str] = None

    source_yaml: Optional[str] = Field(None, exclude=True)

    @field_validator("access_priority")
    @classmethod
    def _known_level(cls, value: str) -> str:
        LogLevel.from_name(value)
        return value.lower()

    @field_validator("name")
    @classmethod
    def _non_empty_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value

    @property
    def handler_specs(self) -> dict[str, ComponentSpec]:
        return _enabled(self.handlers)

    @property
    def processor_specs(self) -> dict[str, ComponentSpec]:
        return _enabled(self.processors)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LoggingConfig":
        """Load and validate from a YAML file."""
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
        config = cls.from_dict(_load_yaml(raw))
        config.source_yaml = raw
        return config

    @classmethod
    def from_yaml_string(cls, yaml_string: str) -> "LoggingConfig":
        """Load and validate from a YAML string."""
        config = cls.from_dict(_load_yaml(yaml_string))
        config.source_yaml = yaml_string
        return config

    @classmethod
    def from_dict(cls, data: dict | None) -> "LoggingConfig":
        """
        Load and validate from a dict.

        Raises:
            ConfigurationError: unknown option or wrong-typed value.
        """
        try:
            return cls.model_validate(data or {})
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid logging configuration: {exc}") from exc

    def to_dict(self, exclude_none: bool = True) -> dict:
        return self.model_dump(exclude_none=exclude_none)


def spec_priority(key: Union[int, str], spec: ComponentSpec) -> int:
    """Explicit priority, else an integer key, else 0."""
    if spec.priority is not None:
        return spec.priority
    if isinstance(key, int) and not isinstance(key, bool):
        return key
    try:
        return int(str(key).strip())
    except ValueError:
        return 0


def _enabled(components: Any) -> dict[str, ComponentSpec]:
    if components is False:
        return {}
    return {str(key): spec for key, spec in components.items() if spec is not False}


def _load_yaml(raw: str) -> dict:
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Logging configuration must be a mapping, got {type(data).__name__}"
        )
    return data
