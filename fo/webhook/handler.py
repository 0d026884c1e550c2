# ==============================
# Tool Webhook Handler
# ==============================
"""
Request pipeline for one tool webhook call.

Stages (each failure is terminal for the call, no retries):
  received -> authenticated -> parsed -> validated -> executed -> responded

  405  method is not POST
  400  body could not be read
  401  signature/timestamp verification failed (body is never parsed)
  400  body is not JSON, or not a webhook envelope
  422  params rejected by the tool's schema (execute is never called)
  200  {"success": true, "result": ...}
  500  {"success": false, "error": ...} when execute raises, or its result
       has no JSON form

Rules:
- The handler keeps no state between calls. Context, env subset and log sink
  are built per call.
- env holds only the tool's declared names, looked up through the injected
  EnvAccessor.
- Tool exceptions are caught here, logged with traceback, and returned as a
  message only.
- The handler does not time out tool execution; the hosting server owns
  cancellation.
"""

from __future__ import annotations

import inspect
import json
import logging
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from pydantic import TypeAdapter, ValidationError

from fo.config.env import EnvAccessor, MappingEnv, resolve_declared
from fo.contracts.tool_schema import ToolContext, WebhookErrorCode, WebhookPayload
from fo.contracts.validation import ValidationFailure
from fo.governance.security import SecurityRedactor
from fo.logging.logger import WEBHOOK_LOGGER_NAME, LogContext, tool_log_sink, with_context
from fo.tools.base import ToolDescriptor
from fo.webhook.signing import check_signature

BodyReader = Callable[[], Awaitable[Union[bytes, str]]]


# ==============================
# Request / Response
# ==============================
@dataclass(frozen=True)
class RawRequest:
    method: str
    headers: Mapping[str, Any]
    read_body: BodyReader

    @classmethod
    def from_body(cls, body: Union[bytes, str], *, headers: Mapping[str, Any], method: str = "POST") -> "RawRequest":
        async def _read() -> Union[bytes, str]:
            return body

        return cls(method=method, headers=headers, read_body=_read)


@dataclass(frozen=True)
class HandlerResponse:
    status_code: int
    body: Dict[str, Any]
    code: Optional[WebhookErrorCode] = None

    @property
    def ok(self) -> bool:
        return self.code is None

    @classmethod
    def failure(cls, code: WebhookErrorCode, body: Dict[str, Any]) -> "HandlerResponse":
        return cls(status_code=code.http_status, body=body, code=code)


@dataclass
class _Call:
    """Per-call scratch values; created and discarded inside handle()."""
    payload: WebhookPayload
    log_ctx: LogContext
    env: Dict[str, str] = field(default_factory=dict)


# ==============================
# Handler
# ==============================
class ToolHandler:
    def __init__(
        self,
        tool: ToolDescriptor,
        *,
        secret: str,
        env: Optional[EnvAccessor] = None,
        logger: Optional[logging.Logger] = None,
        tool_logger: Optional[logging.Logger] = None,
        redactor: Optional[SecurityRedactor] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError(f'Tool "{tool.name}" handler requires a non-empty webhook secret.')
        self.tool = tool
        self._secret = secret
        self.env: EnvAccessor = env if env is not None else MappingEnv()
        self.logger = logger or logging.getLogger(WEBHOOK_LOGGER_NAME)
        self.tool_logger = tool_logger
        self.redactor = redactor or SecurityRedactor()
        self.clock = clock

    def __repr__(self) -> str:
        return f"ToolHandler(tool={self.tool.name!r})"

    async def __call__(self, request: RawRequest) -> HandlerResponse:
        return await self.handle(request)

    async def handle(self, request: RawRequest) -> HandlerResponse:
        log = with_context(self.logger, LogContext(tool=self.tool.name))

        if request.method.upper() != "POST":
            return HandlerResponse.failure(WebhookErrorCode.METHOD_NOT_ALLOWED, {"error": "Method not allowed"})

        try:
            raw = await request.read_body()
        except Exception:
            log.warning("webhook body read failed", exc_info=True, extra={"event": "webhook.body_error"})
            return HandlerResponse.failure(WebhookErrorCode.BAD_REQUEST, {"error": "Failed to read request body"})

        verdict = check_signature(raw, request.headers, self._secret, now=self.clock())
        if not verdict.ok:
            log.warning(
                "webhook rejected: %s",
                verdict.kind.value if verdict.kind else "unknown",
                extra={"event": "webhook.unauthorized"},
            )
            return HandlerResponse.failure(WebhookErrorCode.UNAUTHORIZED, {"error": verdict.message})

        try:
            data = json.loads(raw)
        except ValueError:
            return HandlerResponse.failure(WebhookErrorCode.INVALID_JSON, {"error": "Invalid JSON body"})

        try:
            payload = WebhookPayload.model_validate(data)
        except ValidationError:
            return HandlerResponse.failure(WebhookErrorCode.INVALID_PAYLOAD, {"error": "Invalid webhook payload"})

        call = _Call(
            payload=payload,
            log_ctx=LogContext(tool=self.tool.name, request_id=payload.request_id, agent_id=payload.agent_id),
        )
        return await self._run(call)

    async def _run(self, call: _Call) -> HandlerResponse:
        log = with_context(self.logger, call.log_ctx)

        outcome = self.tool.parameters.validate(call.payload.params)
        if isinstance(outcome, ValidationFailure):
            log.info(
                "tool params rejected (%d issues)",
                len(outcome.issues),
                extra={"event": "webhook.invalid_params", "params": self.redactor.redact_any(call.payload.params)},
            )
            return HandlerResponse.failure(
                WebhookErrorCode.INVALID_PARAMS,
                {"error": "Invalid tool parameters", "details": outcome.issues},
            )

        call.env = resolve_declared(self.env, self.tool.env)
        redactor = self.redactor.with_literals(call.env.values())
        context = ToolContext(
            message=call.payload.context.message,
            agent=call.payload.context.agent,
            env=MappingProxyType(dict(call.env)),
            log=tool_log_sink(call.log_ctx, logger=self.tool_logger, redactor=redactor),
            extra=MappingProxyType(dict(call.payload.context.model_extra or {})),
        )

        started = time.monotonic()
        try:
            result = self.tool.execute(outcome.value, context)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            log.exception(
                "tool execution failed: %s",
                redactor.redact_text(repr(exc)),
                extra={"event": "webhook.execution_failed", "params": redactor.redact_any(call.payload.params)},
            )
            message = str(exc) or "Tool execution failed"
            return HandlerResponse.failure(
                WebhookErrorCode.EXECUTION_FAILED,
                {"success": False, "error": message},
            )

        try:
            payload = _jsonable(result)
        except Exception:
            log.exception(
                "tool result is not JSON serializable (%s)",
                type(result).__name__,
                extra={"event": "webhook.result_not_serializable"},
            )
            return HandlerResponse.failure(
                WebhookErrorCode.EXECUTION_FAILED,
                {"success": False, "error": "Tool returned a result that is not JSON serializable"},
            )

        log.info(
            "tool executed in %dms",
            int((time.monotonic() - started) * 1000),
            extra={"event": "webhook.executed"},
        )
        return HandlerResponse(status_code=200, body={"success": True, "result": payload})


_RESULT_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


def _jsonable(value: Any) -> Any:
    """
    Plain JSON data for a tool result (models, dataclasses, datetimes, ...).

    Raises for values with no JSON form. NaN and infinities become null.
    """
    return json.loads(_RESULT_ADAPTER.dump_json(value))


def create_tool_handler(
    tool: ToolDescriptor,
    *,
    secret: str,
    env: Optional[EnvAccessor] = None,
    logger: Optional[logging.Logger] = None,
    redactor: Optional[SecurityRedactor] = None,
    clock: Callable[[], float] = time.time,
) -> ToolHandler:
    """
    Build the webhook handler for one tool.

    Mount it behind any async HTTP server by adapting the incoming request to
    RawRequest; fo_gateway.api does this for FastAPI.
    """
    return ToolHandler(tool, secret=secret, env=env, logger=logger, redactor=redactor, clock=clock)
