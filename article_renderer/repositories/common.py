from __future__ import annotations

from datetime import UTC, datetime


def utc_now_iso() -> str:
    """Millisecond-precision UTC timestamp with a ``Z`` suffix, as CMS webhooks expect."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
