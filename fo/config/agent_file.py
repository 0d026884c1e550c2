# ==============================
# Agent Config File Loader
# ==============================
"""
Discovery and import of the user's agent config module.

The config module is plain Python (fo_config.py by default) that builds an
AgentConfig with define_config() and exposes it as `config`.
"""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Iterable, List, Optional, Union

from fo.config.env import EnvAccessor
from fo.contracts.config_schema import AgentConfig

CONFIG_FILENAMES = ("fo_config.py",)


class AgentConfigError(RuntimeError):
    pass


def find_agent_config(cwd: Union[str, Path, None] = None, names: Iterable[str] = CONFIG_FILENAMES) -> Optional[Path]:
    base = Path(cwd) if cwd is not None else Path.cwd()
    for name in names:
        candidate = base / name
        if candidate.is_file():
            return candidate.resolve()
    return None


def _import_module(path: Path) -> ModuleType:
    module_name = f"fo_user_config_{abs(hash(str(path)))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise AgentConfigError(f"Cannot import config module {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module


def load_agent_config(path: Union[str, Path]) -> AgentConfig:
    p = Path(path)
    if not p.is_file():
        raise AgentConfigError(f"Config file not found: {p}")
    try:
        module = _import_module(p)
    except AgentConfigError:
        raise
    except Exception as exc:
        raise AgentConfigError(f"Failed to load {p.name}: {exc}") from exc

    config = getattr(module, "config", None)
    if not isinstance(config, AgentConfig):
        raise AgentConfigError(f"{p.name} must define `config = define_config(...)`")
    return config


def check_env_vars(required: Iterable[str], env: EnvAccessor) -> List[str]:
    """Names from `required` that are unset or empty."""
    return [name for name in required if not env.get(name)]
