"""Identifier and verification-code helpers."""

from __future__ import annotations

import hmac
import secrets
import time

VERIFICATION_CODE_LENGTH = 6


def now_seconds() -> int:
    """Return the current UNIX timestamp in seconds."""
    return int(time.time())


def generate_verification_code() -> str:
    """Return a random six digit numeric code for email verification."""
    return "".join(secrets.choice("0123456789") for _ in range(VERIFICATION_CODE_LENGTH))


def generate_token(prefix: str = "prod") -> str:
    """Return a random URL-safe identifier with the given prefix."""
    return f"{prefix}_{secrets.token_urlsafe(12)}"


def codes_match(expected: str, provided: str) -> bool:
    """Compare two verification codes in constant time."""
    return hmac.compare_digest(str(expected).strip(), str(provided).strip())
