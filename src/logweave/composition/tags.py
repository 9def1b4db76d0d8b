"""
Tag registry.

Records, per component identity, the roles it plays in a logging pipeline
and its priority. Roles form a closed set validated at registration time.
by_role() preserves registration order; the priority sorter relies on it
to break ties.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable

from logweave.container import Container
from logweave.errors import (
    ConfigurationError,
    DuplicateIdentityError,
    DuplicateRoleError,
    UnknownComponentError,
    UnknownRoleError,
)

PRIORITY_TAG = "logweave.priority"


class Role(str, Enum):
    HANDLER = "logweave.handler"
    PROCESSOR = "logweave.processor"

    @classmethod
    def from_value(cls, value: "Role | str") -> "Role":
        """Accept a Role, its tag value, or its short name ("handler")."""
        if isinstance(value, Role):
            return value
        for member in cls:
            if value in (member.value, member.name.lower()):
                return member
        raise UnknownRoleError(str(value), [m.name.lower() for m in cls])


@dataclass(frozen=True)
class ComponentDeclaration:
    identity: str
    roles: frozenset[Role]
    priority: int = 0
    factory_ref: Any = None


class TagRegistry:
    """
    Usage:
        registry = TagRegistry()
        registry.register("logging.handler.file", [Role.HANDLER], priority=10)
        registry.by_role(Role.HANDLER)       # ["logging.handler.file"]
        registry.priority_of("logging.handler.file")   # 10
    """

    def __init__(self) -> None:
        self._declarations: dict[str, ComponentDeclaration] = {}
        self._by_role: dict[Role, list[str]] = {role: [] for role in Role}

    # ── Registration ──────────────────────────────────────────────

    def register(
        self,
        identity: str,
        roles: Iterable[Role | str] = (),
        priority: int = 0,
        factory_ref: Any = None,
    ) -> ComponentDeclaration:
        """
        Declare a component.

        Validation completes before anything is stored, so a failed call
        leaves the registry unchanged.

        Raises:
            DuplicateIdentityError: identity already registered.
            DuplicateRoleError: the same role listed twice.
            UnknownRoleError: a role outside the Role enumeration.
        """
        if identity in self._declarations:
            raise DuplicateIdentityError(identity)

        resolved: list[Role] = []
        for value in roles:
            role = Role.from_value(value)
            if role in resolved:
                raise DuplicateRoleError(identity, role.name.lower())
            resolved.append(role)

        declaration = ComponentDeclaration(
            identity=identity,
            roles=frozenset(resolved),
            priority=_coerce_priority(identity, priority),
            factory_ref=factory_ref,
        )
        self._declarations[identity] = declaration
        for role in resolved:
            self._by_role[role].append(identity)
        return declaration

    def add_role(self, identity: str, role: Role | str) -> ComponentDeclaration:
        """Give an already registered component one more role."""
        declaration = self.get(identity)
        resolved = Role.from_value(role)
        if resolved in declaration.roles:
            raise DuplicateRoleError(identity, resolved.name.lower())

        updated = replace(declaration, roles=declaration.roles | {resolved})
        self._declarations[identity] = updated
        self._by_role[resolved].append(identity)
        return updated

    # ── Queries ───────────────────────────────────────────────────

    def by_role(self, role: Role | str) -> list[str]:
        """Identities holding role, in registration order. Empty if none."""
        return list(self._by_role[Role.from_value(role)])

    def priority_of(self, identity: str) -> int:
        """Declared priority; 0 when none was declared."""
        return self.get(identity).priority

    def get(self, identity: str) -> ComponentDeclaration:
        if identity not in self._declarations:
            raise UnknownComponentError(identity, sorted(self._declarations))
        return self._declarations[identity]

    def __contains__(self, identity: str) -> bool:
        return identity in self._declarations

    def __len__(self) -> int:
        return len(self._declarations)

    @property
    def identities(self) -> list[str]:
        return list(self._declarations)

    # ── Construction ──────────────────────────────────────────────

    @classmethod
    def from_container(cls, container: Container) -> "TagRegistry":
        """
        Build a registry from role tags on container definitions.

        Definitions are visited in container registration order. The
        definition itself becomes the factory_ref.
        """
        registry = cls()
        for name, definition in container.definitions.items():
            roles = [role for role in Role if role.value in definition.tags]
            if not roles:
                continue
            registry.register(
                name,
                roles,
                priority=definition.get_tag(PRIORITY_TAG) or 0,
                factory_ref=definition,
            )
        return registry


def _coerce_priority(identity: str, value: Any) -> int:
    """Integers, and strings holding integers ("10", "-5"). Nothing else."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Priority of '{identity}' must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ConfigurationError(
        f"Priority of '{identity}' must be an integer, got {value!r}"
    )
