# ==============================
# Logging Bootstrap
# ==============================
"""
Logging bootstrap.

Goals:
- Centralize logger configuration using Settings.logging.
- Structured context fields for webhook calls (tool, request_id, agent_id, event,
  and redacted params on rejection/failure events).
- stdlib logging + JSON-lines formatter.

Logger names:
- "fo.webhook": handler decisions (rejections, failures, completions)
- "fo.tool": lines tools write through context.log
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fo.config.schema import Settings
from fo.contracts.tool_schema import LogSink
from fo.governance.security import SecurityRedactor

CONTEXT_FIELDS = ("tool", "request_id", "agent_id", "event", "params")

TOOL_LOGGER_NAME = "fo.tool"
WEBHOOK_LOGGER_NAME = "fo.webhook"


@dataclass(frozen=True)
class LogContext:
    tool: Optional[str] = None
    request_id: Optional[str] = None
    agent_id: Optional[str] = None


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in CONTEXT_FIELDS:
            if getattr(record, k, None) is not None:
                payload[k] = getattr(record, k)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def bootstrap_logger(settings: Settings) -> logging.Logger:
    """
    Configure root logger based on settings.
    Returns a named logger ("fo").
    """
    level = getattr(logging, settings.logging.level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    # clear existing handlers to avoid duplicates in reload
    root.handlers = []

    if settings.logging.console:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(JsonLineFormatter())
        root.addHandler(handler)

    return logging.getLogger("fo")


class ContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter whose per-call `extra` merges over the bound context."""

    def process(self, msg: Any, kwargs: Any) -> Any:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def with_context(logger: logging.Logger, ctx: LogContext) -> logging.LoggerAdapter:
    return ContextAdapter(
        logger,
        {
            "tool": ctx.tool,
            "request_id": ctx.request_id,
            "agent_id": ctx.agent_id,
        },
    )


def tool_log_sink(
    ctx: LogContext,
    *,
    logger: Optional[logging.Logger] = None,
    redactor: Optional[SecurityRedactor] = None,
) -> LogSink:
    """
    Build the context.log callable for one tool call.

    Lines are prefixed "[fo:tool:<name>] [<request id>]" and carry the same
    values as structured fields, so they correlate in plain and JSON output.
    """
    adapter = with_context(logger or logging.getLogger(TOOL_LOGGER_NAME), ctx)
    prefix = f"[fo:tool:{ctx.tool}] [{ctx.request_id}]"

    def log(message: str) -> None:
        text = str(message)
        if redactor is not None:
            text = redactor.redact_text(text)
        adapter.info("%s %s", prefix, text)

    return log
