"""
Parameter placeholder expansion.

    expand("%appDir%/../log", {"appDir": "/srv/app"})  →  "/srv/app/../log"
    expand("%db.host%", {"db": {"host": "x"}})         →  "x"
    expand("100%%", {})                                 →  "100%"

A string that is exactly one placeholder returns the raw parameter value,
which may be any type. Placeholders inside parameter values are expanded
recursively.
"""

from __future__ import annotations

import re
from typing import Any

from logweave.errors import ConfigurationError

_PLACEHOLDER = re.compile(r"%([\w.-]*)%")
_WHOLE = re.compile(r"^%([\w.-]+)%$")


def expand(value: Any, parameters: dict[str, Any], _stack: tuple[str, ...] = ()) -> Any:
    """Expand %name% placeholders in value against parameters."""
    if isinstance(value, list):
        return [expand(v, parameters, _stack) for v in value]
    if isinstance(value, dict):
        return {k: expand(v, parameters, _stack) for k, v in value.items()}
    if not isinstance(value, str) or "%" not in value:
        return value

    whole = _WHOLE.match(value)
    if whole:
        return _lookup(whole.group(1), parameters, _stack)

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if not name:
            return "%"
        resolved = _lookup(name, parameters, _stack)
        if isinstance(resolved, (dict, list)):
            raise ConfigurationError(
                f"Unable to concatenate non-scalar parameter '{name}' into '{value}'"
            )
        return str(resolved)

    return _PLACEHOLDER.sub(replace, value)


def _lookup(name: str, parameters: dict[str, Any], stack: tuple[str, ...]) -> Any:
    if name in stack:
        chain = " -> ".join(stack + (name,))
        raise ConfigurationError(f"Circular reference detected for parameters: {chain}")

    node: Any = parameters
    for part in name.split("."):
        if not isinstance(node, dict) or part not in node:
            raise ConfigurationError(f"Missing parameter '{name}'")
        node = node[part]

    return expand(node, parameters, stack + (name,))
