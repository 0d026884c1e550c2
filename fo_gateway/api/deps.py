# ==============================
# API Dependencies / Singletons
# ==============================
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from fo.config.agent_file import load_agent_config
from fo.config.env import MappingEnv
from fo.config.loader import load_environment, load_settings
from fo.config.schema import Settings
from fo.contracts.config_schema import AgentConfig
from fo.governance.security import SecurityRedactor
from fo.tools.registry import ToolRegistry


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def get_environment() -> MappingEnv:
    settings = get_settings()
    return load_environment(repo_root=settings.repo_root)


@lru_cache(maxsize=1)
def get_agent_config() -> AgentConfig:
    settings = get_settings()
    return load_agent_config(Path(settings.repo_root) / settings.app.config_file)


@lru_cache(maxsize=1)
def get_registry() -> ToolRegistry:
    settings = get_settings()
    return ToolRegistry.from_config(
        get_agent_config(),
        env=get_environment(),
        redactor=SecurityRedactor.from_settings(settings),
    )


def clear_caches() -> None:
    for fn in (get_settings, get_environment, get_agent_config, get_registry):
        fn.cache_clear()
