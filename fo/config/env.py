# ==============================
# Environment Accessor
# ==============================
"""
Read-only environment lookup handed to the request handler.

The handler resolves a tool's declared variable names through this interface
and never touches os.environ. loader.load_environment() builds the process
snapshot; tests pass a MappingEnv directly.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Protocol


class EnvAccessor(Protocol):
    def get(self, name: str) -> Optional[str]: ...


class MappingEnv:
    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(values or {})

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __repr__(self) -> str:
        # names only
        return f"MappingEnv(keys={sorted(self._values)})"


def resolve_declared(env: EnvAccessor, names: Iterable[str]) -> Dict[str, str]:
    """Subset of env for the declared names; unset names are omitted."""
    resolved: Dict[str, str] = {}
    for name in names:
        value = env.get(name)
        if value is not None:
            resolved[name] = value
    return resolved
