# ==============================
# Webhook Signing & Verification
# ==============================
"""
HMAC-SHA256 request signing with timestamp-bound replay protection.

Wire format:
    x-fo-timestamp: <unix seconds>
    x-fo-signature: sha256=<hex HMAC-SHA256(secret, "<timestamp>.<raw body>")>

Rules:
- The signed message is the timestamp header text, a literal ".", and the
  exact raw body. Never a re-serialized body.
- Requests older than 5 minutes or more than 60 seconds in the future are
  rejected. Both bounds are fixed.
- Signatures are compared with hmac.compare_digest.
- Nothing here logs, and nothing here ever sees a parsed body.

check_signature() returns a VerificationResult; verify_webhook() is the
raising form for callers that prefer exceptions.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

SIGNATURE_HEADER = "x-fo-signature"
TIMESTAMP_HEADER = "x-fo-timestamp"
AGENT_ID_HEADER = "x-fo-agent-id"
REQUEST_ID_HEADER = "x-fo-request-id"

SIGNATURE_PREFIX = "sha256="

# replay window, milliseconds
TIMESTAMP_TOLERANCE_MS = 5 * 60 * 1000
FUTURE_TOLERANCE_MS = 60 * 1000

Body = Union[str, bytes]


class VerificationErrorKind(str, Enum):
    MISSING_HEADER = "missing_header"
    INVALID_TIMESTAMP = "invalid_timestamp"
    STALE_OR_FUTURE_TIMESTAMP = "stale_or_future_timestamp"
    INVALID_SIGNATURE = "invalid_signature"


class WebhookVerificationError(Exception):
    def __init__(self, kind: VerificationErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class VerificationResult:
    ok: bool
    kind: Optional[VerificationErrorKind] = None
    message: str = ""

    @classmethod
    def passed(cls) -> "VerificationResult":
        return cls(ok=True)

    @classmethod
    def failed(cls, kind: VerificationErrorKind, message: str) -> "VerificationResult":
        return cls(ok=False, kind=kind, message=message)

    def raise_for_failure(self) -> None:
        if not self.ok and self.kind is not None:
            raise WebhookVerificationError(self.kind, self.message)


@dataclass(frozen=True)
class SignedHeaders:
    signature: str
    timestamp: str

    def as_headers(self) -> dict:
        return {SIGNATURE_HEADER: self.signature, TIMESTAMP_HEADER: self.timestamp}


# ==============================
# Signing
# ==============================
def _as_bytes(body: Body) -> bytes:
    return body if isinstance(body, bytes) else body.encode("utf-8")


def compute_signature(body: Body, secret: str, timestamp: str) -> str:
    message = timestamp.encode("utf-8") + b"." + _as_bytes(body)
    digest = hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def sign_payload(body: Body, secret: str, *, now: Optional[float] = None) -> SignedHeaders:
    """Sign a raw body the way Fo does. `now` is unix seconds (defaults to time.time())."""
    timestamp = str(int(time.time() if now is None else now))
    return SignedHeaders(signature=compute_signature(body, secret, timestamp), timestamp=timestamp)


# ==============================
# Verification
# ==============================
def get_header(headers: Mapping[str, Any], name: str) -> Optional[str]:
    """Case-insensitive header lookup; list values yield their first item."""
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if str(key).lower() == lowered:
                value = candidate
                break
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return value


def check_signature(
    body: Body,
    headers: Mapping[str, Any],
    secret: str,
    *,
    now: Optional[float] = None,
) -> VerificationResult:
    signature = get_header(headers, SIGNATURE_HEADER)
    timestamp = get_header(headers, TIMESTAMP_HEADER)

    if not signature:
        return VerificationResult.failed(VerificationErrorKind.MISSING_HEADER, f"Missing {SIGNATURE_HEADER} header")
    if not timestamp:
        return VerificationResult.failed(VerificationErrorKind.MISSING_HEADER, f"Missing {TIMESTAMP_HEADER} header")

    try:
        ts = int(timestamp)
    except ValueError:
        return VerificationResult.failed(VerificationErrorKind.INVALID_TIMESTAMP, f"Invalid {TIMESTAMP_HEADER} header")

    # integer milliseconds; ts is unbounded and must never meet a float
    now_ms = int((time.time() if now is None else now) * 1000)
    age_ms = now_ms - ts * 1000
    if age_ms > TIMESTAMP_TOLERANCE_MS or age_ms < -FUTURE_TOLERANCE_MS:
        return VerificationResult.failed(
            VerificationErrorKind.STALE_OR_FUTURE_TIMESTAMP,
            "Webhook timestamp is too old or too far in the future. "
            "Check that your server clock is synchronized.",
        )

    expected = compute_signature(body, secret, timestamp).encode("utf-8")
    received = signature.encode("utf-8")
    if not hmac.compare_digest(expected, received):
        return VerificationResult.failed(VerificationErrorKind.INVALID_SIGNATURE, "Invalid webhook signature")

    return VerificationResult.passed()


def verify_webhook(
    body: Body,
    headers: Mapping[str, Any],
    secret: str,
    *,
    now: Optional[float] = None,
) -> None:
    """
    Verify a webhook call came from Fo.

    body must be the raw request body (before JSON parsing).
    Raises WebhookVerificationError; inspect `.kind` to tell causes apart.
    """
    check_signature(body, headers, secret, now=now).raise_for_failure()
