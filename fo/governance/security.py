# ==============================
# Security & Redaction
# ==============================
"""
Security redaction helpers.

Goals:
- Keep secrets out of anything the gateway logs: handler events, request
  params, and lines a tool writes through context.log.
- Deterministic and testable.
- Configurable patterns via Settings.logging.redact_patterns (and defaults here).

Besides regex patterns and key hints, a redactor can carry literal values.
The tool log sink uses this to mask the env values resolved for a call, since
those are the secrets a tool is most likely to echo by accident.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Pattern

from fo.config.schema import Settings

DEFAULT_MASK = "[REDACTED]"

DEFAULT_KEY_HINTS: List[str] = [
    "password",
    "passwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "authorization",
    "signature",
    "cookie",
    "private_key",
]

DEFAULT_PATTERNS: List[str] = [
    r"sk-[A-Za-z0-9]{20,}",
    r"(?i)api[_-]?key\s*[:=]\s*\S+",
    r"(?i)authorization\s*:\s*bearer\s+\S+",
    r"sha256=[0-9a-f]{64}",
]

# literal values shorter than this are too likely to collide with ordinary text
MIN_LITERAL_LENGTH = 4


def _compile(patterns: Iterable[str]) -> List[Pattern[str]]:
    compiled: List[Pattern[str]] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error:
            continue
    return compiled


class SecurityRedactor:
    def __init__(
        self,
        *,
        patterns: Optional[List[str]] = None,
        key_hints: Optional[List[str]] = None,
        literals: Iterable[str] = (),
        mask: str = DEFAULT_MASK,
        enabled: bool = True,
    ) -> None:
        self.mask = mask
        self.enabled = enabled
        self._pattern_src = list(patterns or DEFAULT_PATTERNS)
        self.key_hints = [k.lower() for k in (key_hints or DEFAULT_KEY_HINTS)]
        self.patterns = _compile(self._pattern_src)
        # longest first so overlapping values mask fully
        self.literals = sorted({v for v in literals if v and len(v) >= MIN_LITERAL_LENGTH}, key=len, reverse=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SecurityRedactor":
        extra = settings.logging.redact_patterns
        return cls(
            patterns=(DEFAULT_PATTERNS + list(extra)) if extra else None,
            enabled=settings.logging.redact,
        )

    def with_literals(self, literals: Iterable[str]) -> "SecurityRedactor":
        return SecurityRedactor(
            patterns=self._pattern_src,
            key_hints=self.key_hints,
            literals=list(self.literals) + list(literals),
            mask=self.mask,
            enabled=self.enabled,
        )

    def redact_text(self, text: str) -> str:
        if not self.enabled:
            return text
        out = text
        for value in self.literals:
            out = out.replace(value, self.mask)
        for p in self.patterns:
            out = p.sub(self.mask, out)
        return out

    def redact_any(self, obj: Any) -> Any:
        return self._redact_any(obj)

    def _redact_any(self, x: Any) -> Any:
        if not self.enabled or x is None:
            return x
        if isinstance(x, str):
            return self.redact_text(x)
        if isinstance(x, (int, float, bool)):
            return x
        if isinstance(x, (list, tuple)):
            return [self._redact_any(i) for i in x]
        if isinstance(x, dict):
            out: Dict[str, Any] = {}
            for k, v in x.items():
                ks = str(k).lower()
                if any(h in ks for h in self.key_hints):
                    out[k] = self.mask
                else:
                    out[k] = self._redact_any(v)
            return out
        return self.redact_text(str(x))
