# ==============================
# Config Schemas (Pydantic)
# ==============================
"""
Pydantic settings models for the Fo tool gateway.

Notes:
- No env reads here. No file IO here. Pure types + defaults.
- loader.py builds a single Settings object with precedence merging.
- Webhook replay bounds are fixed constants in fo.webhook.signing and are
  deliberately not configurable.

Precedence (implemented in loader.py):
env > .env > configs/*.yaml > defaults
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


# ==============================
# App Settings
# ==============================


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    env: str = Field(default="local", description="Environment name (local/stage/prod)")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    config_file: str = Field(default="fo_config.py", description="Agent config module, relative to repo root")
    tools_prefix: str = Field(default="/tools", description="Mount prefix for tool webhook routes")


# ==============================
# Logging Settings
# ==============================


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="INFO")
    redact: bool = Field(default=True)
    redact_patterns: List[str] = Field(default_factory=list)
    console: bool = Field(default=True)


# ==============================
# Root Settings
# ==============================


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    app: AppConfig = Field(default_factory=AppConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    repo_root: str = Field(default=".", description="Resolved repo root (set by loader)")
