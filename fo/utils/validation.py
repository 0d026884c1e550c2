# ==============================
# Validation Helpers
# ==============================
"""
Reusable name/text validators shared by tool and config definitions.

No side effects. Each helper returns a message on failure and None on success,
so callers can raise the error type that fits their contract.
"""

from __future__ import annotations

import re
from typing import Optional


TOOL_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")
AGENT_EMAIL_RE = re.compile(r"^[a-z][a-z0-9-]*$")

MAX_TOOL_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 1024


def check_tool_name(name: str) -> Optional[str]:
    if not isinstance(name, str) or not TOOL_NAME_RE.fullmatch(name):
        return (
            f'Tool name "{name}" is invalid. '
            "Must start with a lowercase letter and contain only lowercase letters, numbers, and underscores."
        )
    if len(name) > MAX_TOOL_NAME_LENGTH:
        return f'Tool name "{name}" is too long. Maximum {MAX_TOOL_NAME_LENGTH} characters.'
    return None


def check_description(name: str, description: str) -> Optional[str]:
    if not isinstance(description, str) or not description.strip():
        return f'Tool "{name}" must have a non-empty description.'
    if len(description) > MAX_DESCRIPTION_LENGTH:
        return f'Tool "{name}" description is too long. Maximum {MAX_DESCRIPTION_LENGTH} characters.'
    return None


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()
