# ==============================
# Tool Descriptor
# ==============================
"""
Immutable description of one callable tool.

Rules:
- Build descriptors with fo.tools.define.define_tool(); it validates name and
  description up front.
- execute() is called only by the request handler, and only with the value
  produced by `parameters.validate(...)`.
- env lists variable names the tool needs. Names are declared here and
  resolved per call; a tool never sees variables it did not declare.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Tuple, Union

from fo.contracts.tool_schema import ToolContext
from fo.contracts.validation import ParamsSchema


ExecuteFn = Callable[[Any, ToolContext], Union[Awaitable[Any], Any]]


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    parameters: ParamsSchema
    env: Tuple[str, ...]
    execute: ExecuteFn

    def describe(self) -> Dict[str, Any]:
        """JSON-friendly manifest (no execute function, no secrets)."""
        manifest: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "env": list(self.env),
        }
        json_schema = getattr(self.parameters, "json_schema", None)
        if callable(json_schema):
            manifest["parameters"] = json_schema()
        return manifest
