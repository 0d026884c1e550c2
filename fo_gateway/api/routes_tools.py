# ==============================
# Tool Webhook Routes
# ==============================
"""
HTTP surface for mounted tools.

GET  /            -> manifests of mounted tools (no secrets)
ANY  /{tool_name} -> that tool's ToolHandler

Every method is routed to the handler so the handler itself answers 405 with
its own error body.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from fo.tools.registry import ToolRegistry
from fo.webhook.handler import RawRequest
from fo_gateway.api.deps import get_registry


router = APIRouter()

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.get("")
def list_tools(registry: ToolRegistry = Depends(get_registry)) -> Dict[str, Any]:
    return {"tools": registry.list()}


@router.api_route("/{tool_name}", methods=ALL_METHODS)
async def call_tool(
    tool_name: str,
    request: Request,
    registry: ToolRegistry = Depends(get_registry),
) -> JSONResponse:
    if not registry.has(tool_name):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": f"Unknown tool '{tool_name}'"},
        )

    handler = registry.resolve(tool_name).handler
    response = await handler.handle(
        RawRequest(method=request.method, headers=request.headers, read_body=request.body)
    )
    return JSONResponse(status_code=response.status_code, content=jsonable_encoder(response.body))
