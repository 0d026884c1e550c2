# ==============================
# Testing Harness
# ==============================
"""
Helpers for testing tools and webhook handlers without a live Fo server.

Example:

    def test_my_tool_returns_rows():
        ctx = create_mock_context(env={"MY_API_KEY": "test-key"})
        result = my_tool.execute(MyParams(query="revenue"), ctx)
        assert ctx.logs == ["querying revenue"]

    async def test_handler_end_to_end():
        signed = create_signed_request("my_tool", {"query": "revenue"}, SECRET)
        response = await create_tool_handler(my_tool, secret=SECRET).handle(signed.to_raw_request())
        assert response.status_code == 200
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from fo.contracts.tool_schema import (
    AgentContext,
    LogSink,
    MessageContext,
    ToolContext,
    WebhookContext,
    WebhookPayload,
)
from fo.webhook.handler import RawRequest
from fo.webhook.signing import AGENT_ID_HEADER, REQUEST_ID_HEADER, sign_payload

__all__ = [
    "MockToolContext",
    "SignedRequest",
    "create_mock_context",
    "create_signed_request",
    "sign_payload",
]

DEFAULT_MESSAGE: Dict[str, str] = {
    "from": "user@example.com",
    "to": "agent@foibleai.com",
    "subject": "Test subject",
    "body": "Test email body",
    "threadId": "thread_test_123",
    "messageId": "msg_test_123",
}

DEFAULT_AGENT: Dict[str, str] = {
    "name": "TestAgent",
    "email": "agent@foibleai.com",
}

DEFAULT_AGENT_ID = "test-agent"
DEFAULT_REQUEST_ID = "req_test_123"


@dataclass(frozen=True)
class MockToolContext(ToolContext):
    """ToolContext whose log calls are captured, in order, in `logs`."""

    logs: List[str] = field(default_factory=list)


def _wire_keys(model: Any, data: Mapping[str, Any]) -> Dict[str, Any]:
    # "thread_id" and "threadId" both land on the wire name
    out: Dict[str, Any] = {}
    for key, value in data.items():
        info = model.model_fields.get(key)
        out[(info.alias or key) if info is not None else key] = value
    return out


def _merge_model(model: Any, defaults: Dict[str, Any], override: Union[Mapping[str, Any], Any, None]) -> Any:
    if override is None:
        return model.model_validate(defaults)
    if isinstance(override, model):
        return override
    merged = dict(defaults)
    merged.update(_wire_keys(model, dict(override)))
    return model.model_validate(merged)


def create_mock_context(
    *,
    message: Union[MessageContext, Mapping[str, Any], None] = None,
    agent: Union[AgentContext, Mapping[str, Any], None] = None,
    env: Optional[Mapping[str, str]] = None,
    log: Optional[LogSink] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> MockToolContext:
    """
    Mock ToolContext for unit-testing execute functions.

    Mapping overrides for message/agent merge over the defaults (wire names,
    e.g. "from", "threadId", or their snake_case field names). Every log line lands in `.logs`; a `log`
    override additionally receives each line.
    """
    logs: List[str] = []

    def capture(line: str) -> None:
        logs.append(line)
        if log is not None:
            log(line)

    return MockToolContext(
        message=_merge_model(MessageContext, DEFAULT_MESSAGE, message),
        agent=_merge_model(AgentContext, DEFAULT_AGENT, agent),
        env=dict(env or {}),
        log=capture,
        extra=dict(extra or {}),
        logs=logs,
    )


@dataclass(frozen=True)
class SignedRequest:
    body: str
    headers: Dict[str, str]
    payload: WebhookPayload

    def to_raw_request(self, *, method: str = "POST") -> RawRequest:
        return RawRequest.from_body(self.body, headers=self.headers, method=method)


def create_signed_request(
    tool_name: str,
    params: Any,
    secret: str,
    *,
    message: Union[MessageContext, Mapping[str, Any], None] = None,
    agent: Union[AgentContext, Mapping[str, Any], None] = None,
    agent_id: str = DEFAULT_AGENT_ID,
    request_id: str = DEFAULT_REQUEST_ID,
    context_extra: Optional[Mapping[str, Any]] = None,
    now: Optional[float] = None,
) -> SignedRequest:
    """
    Build a complete, signed webhook call for `tool_name`.

    `now` (unix seconds) pins both the envelope and header timestamps, e.g.
    `now=time.time() - 400` yields a correctly signed but stale request.
    `context_extra` adds keys to the envelope context next to message and
    agent; the handler hands them to the tool as `ctx.extra`.
    """
    ctx = create_mock_context(message=message, agent=agent)
    timestamp = int(time.time() if now is None else now)

    payload = WebhookPayload(
        tool=tool_name,
        params=params,
        context=WebhookContext(message=ctx.message, agent=ctx.agent, **dict(context_extra or {})),
        agent_id=agent_id,
        request_id=request_id,
        timestamp=timestamp,
    )
    body = payload.model_dump_json(by_alias=True)
    signed = sign_payload(body, secret, now=timestamp)

    headers = {
        "content-type": "application/json",
        AGENT_ID_HEADER: agent_id,
        REQUEST_ID_HEADER: request_id,
    }
    headers.update(signed.as_headers())
    return SignedRequest(body=body, headers=headers, payload=payload)
