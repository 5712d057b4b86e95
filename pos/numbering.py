"""Transaction number generation."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

TRANSACTION_NUMBER_PREFIX = "TRX"
# 40 random bits per number; stations generate numbers without coordinating.
_SUFFIX_HEX_CHARS = 10


def generate_transaction_number(now: datetime | None = None) -> str:
    """
    Build a human-readable number like ``TRX20261019143015123-9F3A1C0B7E``.

    The millisecond timestamp keeps numbers roughly sortable and the random
    suffix keeps two stations from colliding within the same millisecond.
    """
    moment = now or datetime.now(timezone.utc)
    stamp = f"{moment:%Y%m%d%H%M%S}{moment.microsecond // 1000:03d}"
    suffix = uuid4().hex[:_SUFFIX_HEX_CHARS].upper()
    return f"{TRANSACTION_NUMBER_PREFIX}{stamp}-{suffix}"
