# ==============================
# Tool Registry
# ==============================
"""
Registry of mounted tools.

Design:
- Registry stores tool name -> ToolRegistration (descriptor + webhook secret)
- Each registration gets its own ToolHandler, bound to that tool's secret
- Built from an AgentConfig at gateway startup, or registered by hand in tests
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fo.config.env import EnvAccessor
from fo.contracts.config_schema import AgentConfig
from fo.governance.security import SecurityRedactor
from fo.tools.base import ToolDescriptor
from fo.webhook.handler import ToolHandler


@dataclass(frozen=True)
class ToolRegistration:
    tool: ToolDescriptor
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.tool.name


class ToolRegistry:
    def __init__(
        self,
        *,
        env: Optional[EnvAccessor] = None,
        redactor: Optional[SecurityRedactor] = None,
    ) -> None:
        self.env = env
        self.redactor = redactor
        self._tools: Dict[str, ToolRegistration] = {}

    def register(self, tool: ToolDescriptor, *, secret: str, overwrite: bool = False) -> ToolRegistration:
        if not overwrite and tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        handler = ToolHandler(tool, secret=secret, env=self.env, redactor=self.redactor)
        reg = ToolRegistration(tool=tool, handler=handler)
        self._tools[tool.name] = reg
        return reg

    def resolve(self, name: str) -> ToolRegistration:
        reg = self._tools.get(name)
        if reg is None:
            raise KeyError(f"Unknown tool: {name}")
        return reg

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> List[str]:
        return sorted(self._tools)

    def list(self) -> List[Dict[str, Any]]:
        return [self._tools[name].tool.describe() for name in self.names()]

    @classmethod
    def from_config(
        cls,
        config: AgentConfig,
        *,
        env: Optional[EnvAccessor] = None,
        redactor: Optional[SecurityRedactor] = None,
    ) -> "ToolRegistry":
        registry = cls(env=env, redactor=redactor)
        for registration in config.tools.custom:
            registry.register(registration.tool, secret=registration.webhook_secret)
        return registry
