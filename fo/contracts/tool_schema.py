# ==============================
# Tool Contracts
# ==============================
"""
Wire and runtime contracts for tool webhooks.

These models define the envelope Fo posts to a tool endpoint and the context a
tool's execute function receives. Field names are snake_case in Python; the
wire format keeps the camelCase names via aliases.

Intended usage:
- WebhookPayload parses an already-verified request body
- ToolContext is built fresh per call by the request handler (or the testing
  harness) and never shared across calls
"""

# ==============================
# Imports
# ==============================
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

# ==============================
# Typing
# ==============================
LogSink = Callable[[str], None]


# ==============================
# Enums
# ==============================
class WebhookErrorCode(str, Enum):
    """Failure classes for one webhook call, each terminal for that call."""
    METHOD_NOT_ALLOWED = "method_not_allowed"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    INVALID_JSON = "invalid_json"
    INVALID_PAYLOAD = "invalid_payload"
    INVALID_PARAMS = "invalid_params"
    EXECUTION_FAILED = "execution_failed"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS: Dict[WebhookErrorCode, int] = {
    WebhookErrorCode.METHOD_NOT_ALLOWED: 405,
    WebhookErrorCode.BAD_REQUEST: 400,
    WebhookErrorCode.UNAUTHORIZED: 401,
    WebhookErrorCode.INVALID_JSON: 400,
    WebhookErrorCode.INVALID_PAYLOAD: 400,
    WebhookErrorCode.INVALID_PARAMS: 422,
    WebhookErrorCode.EXECUTION_FAILED: 500,
}


# ==============================
# Models
# ==============================
class MessageContext(BaseModel):
    """
    The inbound message that triggered the tool call.

    Passed through to the tool as sent; nothing here is required, so a sparse
    message never blocks a correctly signed call.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    sender: Optional[str] = Field(default=None, alias="from", description="Email address of the person who sent the message.")
    to: Optional[str] = Field(default=None, description="The agent's email address.")
    subject: Optional[str] = Field(default=None)
    body: Optional[str] = Field(default=None)
    thread_id: Optional[str] = Field(default=None, alias="threadId")
    message_id: Optional[str] = Field(default=None, alias="messageId")


class AgentContext(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    email: str


class WebhookContext(BaseModel):
    """Caller-supplied part of the tool context (everything except env and log)."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    message: MessageContext
    agent: AgentContext


class WebhookPayload(BaseModel):
    """JSON body of a tool webhook call."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    tool: str = Field(..., description="Name of the tool being called.")
    params: Any = Field(default_factory=dict, description="Raw tool parameters, validated by the tool schema.")
    context: WebhookContext
    agent_id: str = Field(..., alias="agentId")
    request_id: str = Field(..., alias="requestId")
    timestamp: int = Field(..., description="Unix timestamp (seconds) set by the signer.")

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class ToolContext:
    """
    What a tool receives at execution time.

    env holds only the variables the tool declared, resolved for this call.
    log is a tool-scoped sink; the handler tags entries with tool name and
    request id. extra carries any additional keys Fo sent in the envelope
    context, next to message and agent.
    """

    message: MessageContext
    agent: AgentContext
    env: Mapping[str, str]
    log: LogSink
    extra: Mapping[str, Any] = field(default_factory=dict)
