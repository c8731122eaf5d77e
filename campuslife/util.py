"""
Small utilities shared across the package.

Ids are ULIDs so that records created after a deletion never collide with
surviving ones (sequential ids derived from collection length would).
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone

# Crockford base32: no I, L, O or U
ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
ULID_LENGTH = 26


def new_id(*, timestamp_ms: int | None = None) -> str:
    """
    New 26-character ULID: 48 bits of milliseconds then 80 random bits.

    Ids created later sort after earlier ones.
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    if timestamp_ms < 0 or timestamp_ms >> 48:
        raise ValueError(f"timestamp_ms does not fit in 48 bits: {timestamp_ms}")

    value = (timestamp_ms << 80) | secrets.randbits(80)
    digits = []
    while len(digits) < ULID_LENGTH:
        value, rem = divmod(value, 32)
        digits.append(ALPHABET[rem])
    return "".join(reversed(digits))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the document's timestamp format)."""
    return utc_now().isoformat()
