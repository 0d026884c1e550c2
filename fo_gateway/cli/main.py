# ==============================
# CLI Entrypoint
# ==============================
"""
CLI for Fo tool projects.

Supported commands:
  fo validate
  fo validate --config path/to/fo_config.py
  fo validate --no-ping

validate prints a JSON report of every check and exits 1 if any failed.
Warnings never fail the run.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from fo.config.agent_file import AgentConfigError, check_env_vars, find_agent_config, load_agent_config
from fo.config.env import EnvAccessor
from fo.config.loader import load_environment
from fo.contracts.config_schema import AgentConfig, CustomToolRegistration

PING_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class Check:
    name: str
    status: str  # pass | fail | warn
    detail: str = ""


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False, default=str))


def _ping(url: str) -> Optional[str]:
    """None when reachable; any HTTP response counts, even 405."""
    try:
        requests.head(url, timeout=PING_TIMEOUT_SECONDS, allow_redirects=False)
    except requests.RequestException as exc:
        return str(exc)
    return None


def _check_tool(reg: CustomToolRegistration, env: EnvAccessor, *, ping: bool) -> Check:
    name = f"tool:{reg.tool.name}"
    if not reg.webhook_url.startswith("https://"):
        return Check(name, "fail", "webhook_url must be an HTTPS URL")
    if not reg.webhook_secret:
        return Check(name, "fail", "missing webhook_secret")
    missing = check_env_vars(reg.tool.env, env)
    if missing:
        return Check(name, "fail", f"missing env vars: {', '.join(missing)}")
    if ping:
        problem = _ping(reg.webhook_url)
        if problem is not None:
            return Check(name, "fail", f"unreachable: {reg.webhook_url}")
        return Check(name, "pass", f"reachable at {reg.webhook_url}")
    return Check(name, "pass", reg.webhook_url)


def run_checks(config: AgentConfig, env: EnvAccessor, *, ping: bool = True) -> List[Check]:
    checks: List[Check] = []

    identity = config.agent
    if identity.name and identity.email:
        checks.append(Check("agent", "pass", f"{identity.name} -> {identity.address}"))
    else:
        checks.append(Check("agent", "fail", "Missing agent.name or agent.email"))

    if config.instructions and config.instructions.strip():
        checks.append(Check("instructions", "pass", f"{len(config.instructions.split())} words"))
    else:
        checks.append(Check("instructions", "warn", "No custom instructions; agent uses Fo defaults only"))

    builtins = config.tools.enabled_builtins()
    if builtins:
        checks.append(Check("prebuilt_tools", "pass", ", ".join(builtins)))
    else:
        checks.append(Check("prebuilt_tools", "warn", "No prebuilt tools enabled"))

    for reg in config.tools.custom:
        checks.append(_check_tool(reg, env, ping=ping))

    if config.env:
        missing = check_env_vars(config.env, env)
        if missing:
            checks.append(Check("env", "fail", f"missing: {', '.join(missing)}"))
        else:
            checks.append(Check("env", "pass", ", ".join(config.env)))

    return checks


def cmd_validate(*, config_path: Optional[str], ping: bool, env: Optional[EnvAccessor] = None) -> int:
    path = Path(config_path) if config_path else find_agent_config()
    if path is None:
        _print_json({"ok": False, "checks": [asdict(Check("config", "fail", "fo_config.py not found"))]})
        return 1

    try:
        config = load_agent_config(path)
    except (AgentConfigError, ValueError) as exc:
        _print_json({"ok": False, "checks": [asdict(Check("config", "fail", str(exc)))]})
        return 1

    env = env if env is not None else load_environment(repo_root=str(path.parent))
    checks = [Check("config", "pass", path.name)] + run_checks(config, env, ping=ping)
    failed = [c for c in checks if c.status == "fail"]
    report: Dict[str, Any] = {
        "ok": not failed,
        "passed": sum(1 for c in checks if c.status == "pass"),
        "failed": len(failed),
        "checks": [asdict(c) for c in checks],
    }
    _print_json(report)
    return 1 if failed else 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="fo")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_validate = sub.add_parser("validate", help="Validate fo_config.py and custom tools")
    ap_validate.add_argument("--config", help="Path to the agent config module", default=None)
    ap_validate.add_argument("--no-ping", action="store_true", help="Skip webhook URL reachability checks")

    args = ap.parse_args(argv)

    if args.cmd == "validate":
        return cmd_validate(config_path=args.config, ping=not args.no_ping)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
