# ==============================
# Config Loader (only env reader)
# ==============================
"""
Config loader for the Fo tool gateway.

Rules:
- This is the ONLY place allowed to read os.environ and .env.
- Everything else receives a validated Settings object, or an EnvAccessor
  snapshot built by load_environment().

Precedence:
env > .env > configs/*.yaml > defaults

Testability:
- All functions accept injected paths and env dict.
- No hardcoded absolute paths.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from fo.config.env import MappingEnv
from fo.config.schema import Settings

ENV_PREFIX = "FO__"


# ==============================
# YAML Helpers
# ==============================


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    raw = path.read_text(encoding="utf-8").strip()
    if not raw:
        return {}
    data = yaml.safe_load(raw)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge dictionaries: override wins.
    """
    out: Dict[str, Any] = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    # configs/app.yaml may be written either as `app: {...}` or as the bare section
    inner = data.get(name)
    if isinstance(inner, dict) and len(data) == 1:
        return inner
    return data


# ==============================
# .env Loader
# ==============================


def _read_dotenv(dotenv_path: Path) -> Dict[str, str]:
    """
    Minimal .env parser (KEY=VALUE).
    - Ignores comments and blank lines.
    - Strips surrounding quotes.
    """
    if not dotenv_path.exists():
        return {}
    envs: Dict[str, str] = {}
    for line in dotenv_path.read_text(encoding="utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#") or "=" not in s:
            continue
        key, val = s.split("=", 1)
        key = key.strip()
        val = val.strip().strip('"').strip("'")
        if key:
            envs[key] = val
    return envs


def _coerce(v: str) -> Any:
    vs = v.strip()
    if vs.lower() in {"true", "false"}:
        return vs.lower() == "true"
    if vs.isdigit() or (vs.startswith("-") and vs[1:].isdigit()):
        return int(vs)
    if "." in vs:
        try:
            return float(vs)
        except ValueError:
            pass
    return vs


def _apply_env_overrides(cfg: Dict[str, Any], env: Dict[str, str]) -> Dict[str, Any]:
    """
    Apply environment overrides with FO__ style nesting.

Example:
  FO__APP__DEBUG=true
  FO__APP__PORT=8001
  FO__LOGGING__LEVEL=DEBUG

Rules:
- Split by '__' after prefix FO__
- Lowercase keys for dict insertion
- Coerce booleans/ints/floats when obvious
    """
    out = dict(cfg)
    for k, v in env.items():
        if not k.startswith(ENV_PREFIX):
            continue
        path = k[len(ENV_PREFIX) :].split("__")
        if not path or any(not p for p in path):
            continue
        cur: Dict[str, Any] = out
        for i, seg in enumerate(path):
            key = seg.lower()
            if i == len(path) - 1:
                cur[key] = _coerce(v)
            else:
                nxt = cur.get(key)
                nxt = dict(nxt) if isinstance(nxt, dict) else {}
                cur[key] = nxt
                cur = nxt
    return out


def _effective_env(root: Path, dotenv_file: Optional[str], env: Optional[Dict[str, str]]) -> Dict[str, str]:
    env_vars = dict(env) if env is not None else dict(os.environ)
    dotenv_path = Path(dotenv_file) if dotenv_file else (root / ".env")
    # .env should not override real env; real env wins
    for k, v in _read_dotenv(dotenv_path).items():
        env_vars.setdefault(k, v)
    return env_vars


def _resolve_root(repo_root: Optional[str]) -> Path:
    return Path(repo_root or os.getcwd()).expanduser().resolve()


# ==============================
# Public Loader API
# ==============================


def load_settings(
    *,
    repo_root: Optional[str] = None,
    configs_dir: Optional[str] = None,
    dotenv_file: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
) -> Settings:
    """
    Load and validate Settings.

Inputs:
- repo_root: defaults to current working directory
- configs_dir: defaults to <repo_root>/configs
- dotenv_file: defaults to <repo_root>/.env
- env: injected env vars (defaults to os.environ)
    """
    root = _resolve_root(repo_root)
    cfg_dir = root / (configs_dir or "configs")

    merged: Dict[str, Any] = {}
    merged = _deep_merge(merged, {"app": _section(_read_yaml(cfg_dir / "app.yaml"), "app")})
    merged = _deep_merge(merged, {"logging": _section(_read_yaml(cfg_dir / "logging.yaml"), "logging")})

    merged = _apply_env_overrides(merged, _effective_env(root, dotenv_file, env))

    # repo_root is always the resolved path, never an override
    merged["repo_root"] = str(root)

    try:
        return Settings.model_validate(merged)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def load_environment(
    *,
    repo_root: Optional[str] = None,
    dotenv_file: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
) -> MappingEnv:
    """
    Snapshot of the process environment merged with .env (real env wins).

    This is what tool handlers resolve declared variable names against.
    """
    root = _resolve_root(repo_root)
    return MappingEnv(_effective_env(root, dotenv_file, env))
