# ==============================
# Testing Fixtures
# ==============================
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient
from pydantic import BaseModel

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from fo.config.env import MappingEnv
from fo.config.schema import Settings
from fo.contracts.tool_schema import ToolContext
from fo.tools.base import ToolDescriptor
from fo.tools.define import define_tool
from fo.tools.registry import ToolRegistry
from fo.webhook.handler import ToolHandler, create_tool_handler
from fo_gateway.api import deps as gateway_deps
from fo_gateway.api.http_app import create_app

SECRET = "test-webhook-secret-abc123"


class EchoParams(BaseModel):
    value: float


class RecordingTool:
    """Wraps an echo tool and records every execute call."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.tool = define_tool(
            name="echo_tool",
            description="Doubles the given value",
            parameters=EchoParams,
            env=["ECHO_API_KEY", "ECHO_REGION"],
            execute=self._execute,
        )

    async def _execute(self, params: EchoParams, ctx: ToolContext) -> Dict[str, Any]:
        self.calls.append({"params": params, "env": dict(ctx.env)})
        ctx.log(f"doubling {params.value}")
        return {"doubled": params.value * 2}


@pytest.fixture
def secret() -> str:
    return SECRET


@pytest.fixture
def recording_tool() -> RecordingTool:
    return RecordingTool()


@pytest.fixture
def echo_tool(recording_tool: RecordingTool) -> ToolDescriptor:
    return recording_tool.tool


@pytest.fixture
def env() -> MappingEnv:
    """Ambient environment with declared, undeclared and unset names."""
    return MappingEnv(
        {
            "ECHO_API_KEY": "echo-key-value",
            "DATABASE_URL": "postgres://should-not-leak",
            "AWS_SECRET_ACCESS_KEY": "unrelated-secret",
        }
    )


@pytest.fixture
def handler(echo_tool: ToolDescriptor, env: MappingEnv) -> ToolHandler:
    return create_tool_handler(echo_tool, secret=SECRET, env=env)


@pytest.fixture
def registry(echo_tool: ToolDescriptor, env: MappingEnv) -> ToolRegistry:
    reg = ToolRegistry(env=env)
    reg.register(echo_tool, secret=SECRET)
    return reg


@pytest.fixture
def app_client(registry: ToolRegistry) -> TestClient:
    """FastAPI test client wired to the provided registry."""
    gateway_deps.clear_caches()
    app = create_app(Settings(), configure_logging=False)
    app.dependency_overrides[gateway_deps.get_registry] = lambda: registry
    return TestClient(app)
