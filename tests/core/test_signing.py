# ==============================
# Webhook Signing Tests
# ==============================
from __future__ import annotations

import hashlib
import hmac
import time
from unittest.mock import patch

import pytest

from fo.webhook import signing
from fo.webhook.signing import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    VerificationErrorKind,
    WebhookVerificationError,
    check_signature,
    compute_signature,
    sign_payload,
    verify_webhook,
)

SECRET = "test-webhook-secret-abc123"
BODY = '{"tool":"my_tool","params":{}}'
NOW = 1_700_000_000.0


def _headers(signature: str, timestamp: str) -> dict:
    return {SIGNATURE_HEADER: signature, TIMESTAMP_HEADER: timestamp}


def _expected(body: str, secret: str, timestamp: str) -> str:
    digest = hmac.new(secret.encode(), f"{timestamp}.{body}".encode(), hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def test_signature_matches_wire_format() -> None:
    signed = sign_payload(BODY, SECRET, now=NOW + 0.9)
    assert signed.timestamp == "1700000000"
    assert signed.signature == _expected(BODY, SECRET, "1700000000")


def test_round_trip_verifies() -> None:
    signed = sign_payload(BODY, SECRET, now=NOW)
    result = check_signature(BODY, signed.as_headers(), SECRET, now=NOW)
    assert result.ok is True
    verify_webhook(BODY, signed.as_headers(), SECRET, now=NOW)


def test_bytes_and_text_bodies_sign_identically() -> None:
    body = '{"name":"Zoë"}'
    assert compute_signature(body, SECRET, "1") == compute_signature(body.encode("utf-8"), SECRET, "1")


@pytest.mark.parametrize("index", [0, 7, len(BODY) // 2, len(BODY) - 1])
def test_single_byte_mutation_fails(index: int) -> None:
    signed = sign_payload(BODY, SECRET, now=NOW)
    raw = bytearray(BODY.encode())
    raw[index] ^= 0x01
    result = check_signature(bytes(raw), signed.as_headers(), SECRET, now=NOW)
    assert result.ok is False
    assert result.kind is VerificationErrorKind.INVALID_SIGNATURE


def test_tampered_body_raises() -> None:
    signed = sign_payload(BODY, SECRET, now=NOW)
    tampered = '{"tool":"evil_tool","params":{}}'
    with pytest.raises(WebhookVerificationError) as excinfo:
        verify_webhook(tampered, signed.as_headers(), SECRET, now=NOW)
    assert excinfo.value.kind is VerificationErrorKind.INVALID_SIGNATURE


def test_wrong_secret_fails() -> None:
    signed = sign_payload(BODY, "wrong-secret", now=NOW)
    result = check_signature(BODY, signed.as_headers(), SECRET, now=NOW)
    assert result.kind is VerificationErrorKind.INVALID_SIGNATURE


def test_signature_of_different_length_fails() -> None:
    signed = sign_payload(BODY, SECRET, now=NOW)
    result = check_signature(BODY, _headers(signed.signature[:-2], signed.timestamp), SECRET, now=NOW)
    assert result.kind is VerificationErrorKind.INVALID_SIGNATURE


def test_signature_over_reserialized_body_is_rejected() -> None:
    # same JSON value, different bytes
    spaced = '{"tool": "my_tool", "params": {}}'
    signed = sign_payload(spaced, SECRET, now=NOW)
    result = check_signature(BODY, signed.as_headers(), SECRET, now=NOW)
    assert result.kind is VerificationErrorKind.INVALID_SIGNATURE


def test_stale_timestamp_rejected() -> None:
    ts = str(int(NOW) - 301)
    result = check_signature(BODY, _headers(_expected(BODY, SECRET, ts), ts), SECRET, now=NOW)
    assert result.kind is VerificationErrorKind.STALE_OR_FUTURE_TIMESTAMP


def test_replay_window_boundary_accepts_299_seconds() -> None:
    ts = str(int(NOW) - 299)
    result = check_signature(BODY, _headers(_expected(BODY, SECRET, ts), ts), SECRET, now=NOW)
    assert result.ok is True


def test_replay_window_is_inclusive_at_exactly_300_seconds() -> None:
    ts = str(int(NOW) - 300)
    result = check_signature(BODY, _headers(_expected(BODY, SECRET, ts), ts), SECRET, now=NOW)
    assert result.ok is True


def test_future_timestamp_within_skew_accepted() -> None:
    ts = str(int(NOW) + 60)
    result = check_signature(BODY, _headers(_expected(BODY, SECRET, ts), ts), SECRET, now=NOW)
    assert result.ok is True


def test_future_timestamp_beyond_skew_rejected() -> None:
    ts = str(int(NOW) + 61)
    result = check_signature(BODY, _headers(_expected(BODY, SECRET, ts), ts), SECRET, now=NOW)
    assert result.kind is VerificationErrorKind.STALE_OR_FUTURE_TIMESTAMP


def test_stale_check_uses_wall_clock_by_default() -> None:
    old = str(int(time.time()) - 400)
    with pytest.raises(WebhookVerificationError) as excinfo:
        verify_webhook(BODY, _headers(_expected(BODY, SECRET, old), old), SECRET)
    assert excinfo.value.kind is VerificationErrorKind.STALE_OR_FUTURE_TIMESTAMP


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {SIGNATURE_HEADER: "sha256=abc"},
        {TIMESTAMP_HEADER: "1700000000"},
        {SIGNATURE_HEADER: "", TIMESTAMP_HEADER: "1700000000"},
    ],
)
def test_missing_headers_fail_before_any_hmac(headers: dict) -> None:
    with patch.object(signing.hmac, "new", side_effect=AssertionError("HMAC computed")):
        result = check_signature(BODY, headers, SECRET, now=NOW)
    assert result.kind is VerificationErrorKind.MISSING_HEADER


@pytest.mark.parametrize("ts", ["abc", "12.5", "1e9"])
def test_non_integer_timestamp_rejected(ts: str) -> None:
    result = check_signature(BODY, _headers("sha256=00", ts), SECRET, now=NOW)
    assert result.kind is VerificationErrorKind.INVALID_TIMESTAMP


@pytest.mark.parametrize("ts", ["1" + "0" * 400, "9" * 400, "-" + "9" * 400])
def test_huge_timestamp_is_out_of_window_not_a_crash(ts: str) -> None:
    result = check_signature(BODY, _headers("sha256=00", ts), SECRET, now=NOW)
    assert result.ok is False
    assert result.kind is VerificationErrorKind.STALE_OR_FUTURE_TIMESTAMP


def test_headers_are_case_insensitive_and_lists_use_first_value() -> None:
    signed = sign_payload(BODY, SECRET, now=NOW)
    headers = {"X-Fo-Signature": [signed.signature, "sha256=bogus"], "X-FO-TIMESTAMP": signed.timestamp}
    assert check_signature(BODY, headers, SECRET, now=NOW).ok is True


def test_comparison_uses_constant_time_digest() -> None:
    signed = sign_payload(BODY, SECRET, now=NOW)
    with patch.object(signing.hmac, "compare_digest", wraps=hmac.compare_digest) as spy:
        check_signature(BODY, signed.as_headers(), SECRET, now=NOW)
    spy.assert_called_once()
    expected, received = spy.call_args.args
    assert isinstance(expected, bytes) and isinstance(received, bytes)
