"""
Composition errors.

Every failure in a composition run is detected before the first record is
logged and aborts the run. All errors derive from ConfigurationError so a
host can refuse to start with a single except clause.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid declaration, option, or reference. Aborts composition."""


class DuplicateIdentityError(ConfigurationError):
    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"Component '{identity}' has already been registered")


class DuplicateRoleError(ConfigurationError):
    def __init__(self, identity: str, role: str):
        self.identity = identity
        self.role = role
        super().__init__(f"Component '{identity}' already holds role '{role}'")


class UnknownRoleError(ConfigurationError):
    def __init__(self, role: str, valid: list[str]):
        self.role = role
        super().__init__(f"Unknown role '{role}'. Valid roles: {', '.join(valid)}")


class UnknownComponentError(ConfigurationError):
    def __init__(
        self,
        identity: str,
        available: list[str] | None = None,
        referenced_by: str | None = None,
    ):
        self.identity = identity
        self.referenced_by = referenced_by
        if referenced_by is not None:
            message = f"Component '{referenced_by}' references unknown component '{identity}'"
        else:
            message = (
                f"Component '{identity}' not found. "
                f"Available: {', '.join(available) if available else 'none'}"
            )
        super().__init__(message)


class ComponentResolutionError(ConfigurationError):
    """A declaration exists but its factory cannot be materialized."""

    def __init__(self, identity: str, reason: str):
        self.identity = identity
        self.reason = reason
        super().__init__(f"Component '{identity}' cannot be created: {reason}")


class CapabilityInjectionError(ConfigurationError):
    """A LoggerAware component whose set_logger() cannot take the logger."""

    def __init__(self, identity: str, reason: str):
        self.identity = identity
        self.reason = reason
        super().__init__(f"Cannot inject logger into '{identity}': {reason}")


class DirectoryCreationError(ConfigurationError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Log dir {path} cannot be created")
