# ==============================
# Agent Config Contracts
# ==============================
"""
Typed agent configuration: identity, prebuilt tool switches, custom tool
registrations.

No validation logic here beyond types; fo.tools.define.define_config() enforces
the identity and registration rules and is the supported constructor.
Registrations carry ToolDescriptor objects (with their execute callables), so
these are plain frozen dataclasses rather than pydantic models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from fo.tools.base import ToolDescriptor


AGENT_EMAIL_DOMAIN = "foibleai.com"


@dataclass(frozen=True)
class AgentIdentity:
    name: str
    # subdomain only: "atlas" -> atlas@foibleai.com
    email: str

    @property
    def address(self) -> str:
        return f"{self.email}@{AGENT_EMAIL_DOMAIN}"


@dataclass(frozen=True)
class CustomToolRegistration:
    tool: ToolDescriptor
    webhook_url: str
    webhook_secret: str


@dataclass(frozen=True)
class ToolsConfig:
    email: bool = True
    calendar: bool = True
    browser: bool = False
    custom: Tuple[CustomToolRegistration, ...] = ()

    def enabled_builtins(self) -> List[str]:
        return [name for name in ("email", "calendar", "browser") if getattr(self, name)]


@dataclass(frozen=True)
class AgentConfig:
    agent: AgentIdentity
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    instructions: Optional[str] = None
    env: Tuple[str, ...] = ()
