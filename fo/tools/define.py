# ==============================
# Tool & Config Definition
# ==============================
"""
Constructors for tool descriptors and agent configs.

Both validate eagerly: a bad name, description, identity or registration
fails here, at import time of the user's tool module, never at call time.

Example:

    class QueryParams(BaseModel):
        query: str = Field(..., description="Contact name, email, or deal name")

    async def run(params: QueryParams, ctx: ToolContext):
        ctx.log(f"Searching CRM for: {params.query}")
        return await crm.search(ctx.env["SALESFORCE_TOKEN"], params.query)

    query_crm = define_tool(
        name="query_crm",
        description="Look up a contact or deal in Salesforce CRM",
        parameters=QueryParams,
        env=["SALESFORCE_TOKEN"],
        execute=run,
    )
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from fo.contracts.config_schema import (
    AGENT_EMAIL_DOMAIN,
    AgentConfig,
    AgentIdentity,
    CustomToolRegistration,
    ToolsConfig,
)
from fo.contracts.validation import as_schema
from fo.tools.base import ExecuteFn, ToolDescriptor
from fo.utils.validation import AGENT_EMAIL_RE, check_description, check_tool_name, is_blank


RESERVED_AGENT_NAMES = frozenset({"fo", "maybelle", "admin", "support", "noreply", "help"})


# ==============================
# Errors
# ==============================
class ToolDefinitionError(ValueError):
    """A tool descriptor could not be created."""


class InvalidToolName(ToolDefinitionError):
    pass


class InvalidDescription(ToolDefinitionError):
    pass


class ConfigDefinitionError(ValueError):
    """An agent config could not be created."""


# ==============================
# define_tool
# ==============================
def define_tool(
    *,
    name: str,
    description: str,
    parameters: Any,
    execute: ExecuteFn,
    env: Optional[Iterable[str]] = None,
) -> ToolDescriptor:
    problem = check_tool_name(name)
    if problem:
        raise InvalidToolName(problem)

    problem = check_description(name, description)
    if problem:
        raise InvalidDescription(problem)

    if not callable(execute):
        raise ToolDefinitionError(f'Tool "{name}" execute must be callable.')

    return ToolDescriptor(
        name=name,
        description=description,
        parameters=as_schema(parameters),
        env=_ordered_unique(env or ()),
        execute=execute,
    )


def _ordered_unique(names: Iterable[str]) -> Tuple[str, ...]:
    if isinstance(names, str):
        names = [names]
    return tuple(dict.fromkeys(names))


# ==============================
# define_config
# ==============================
def define_config(
    *,
    agent: Union[AgentIdentity, Mapping[str, str]],
    tools: Union[ToolsConfig, Mapping[str, Any], None] = None,
    instructions: Optional[str] = None,
    env: Optional[Sequence[str]] = None,
) -> AgentConfig:
    """
    Define the agent configuration.

    tools may be a ToolsConfig or a mapping with email/calendar/browser flags
    and a `custom` list of CustomToolRegistration (or mappings with tool,
    webhook_url, webhook_secret).
    """
    identity = agent if isinstance(agent, AgentIdentity) else AgentIdentity(**dict(agent))
    _check_identity(identity)

    tools_cfg = _coerce_tools(tools)
    for registration in tools_cfg.custom:
        _check_registration(registration)

    return AgentConfig(
        agent=identity,
        tools=tools_cfg,
        instructions=instructions,
        env=tuple(env or ()),
    )


def _check_identity(identity: AgentIdentity) -> None:
    if is_blank(identity.name):
        raise ConfigDefinitionError("agent.name must be a non-empty string")

    if "@" in identity.email:
        raise ConfigDefinitionError(
            'agent.email should be just the subdomain (e.g. "atlas"), not a full address. '
            f"Fo will provision atlas@{AGENT_EMAIL_DOMAIN} for you."
        )

    if not AGENT_EMAIL_RE.fullmatch(identity.email):
        raise ConfigDefinitionError(
            f'agent.email "{identity.email}" is invalid. '
            "Must start with a lowercase letter and contain only lowercase letters, numbers, and hyphens."
        )

    if identity.email in RESERVED_AGENT_NAMES:
        raise ConfigDefinitionError(f'agent.email "{identity.email}" is reserved. Choose a different name.')


def _coerce_tools(tools: Union[ToolsConfig, Mapping[str, Any], None]) -> ToolsConfig:
    if tools is None:
        return ToolsConfig()
    if isinstance(tools, ToolsConfig):
        return tools
    data: Dict[str, Any] = dict(tools)
    custom = tuple(
        reg if isinstance(reg, CustomToolRegistration) else CustomToolRegistration(**dict(reg))
        for reg in data.pop("custom", None) or ()
    )
    return ToolsConfig(custom=custom, **data)


def _check_registration(registration: CustomToolRegistration) -> None:
    if not isinstance(registration.tool, ToolDescriptor):
        raise ConfigDefinitionError(
            "Each custom tool must be created with define_tool(). "
            "Check your tools are ToolDescriptor instances."
        )

    name = registration.tool.name
    if not registration.webhook_url.startswith("https://"):
        raise ConfigDefinitionError(
            f'Custom tool "{name}" has an invalid webhook_url. '
            f'Must be an HTTPS URL (e.g. "https://my-app.com/tools/{name}").'
        )

    if not registration.webhook_secret:
        raise ConfigDefinitionError(
            f'Custom tool "{name}" is missing a webhook_secret. '
            "Provide a secret to verify webhook calls from Fo."
        )
