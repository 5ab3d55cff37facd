"""Timestamp coercion. Unparsable values become None, never "now"."""

from __future__ import annotations

import math
from datetime import datetime, timezone

from moment_engine.models.domain import Timestamp


def to_epoch_ms(value: Timestamp) -> float | None:
    """Accept epoch millis, an ISO-8601 string or a datetime (naive means UTC)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp() * 1000
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp() * 1000
    return None


def to_iso(value: Timestamp) -> str | None:
    ms = to_epoch_ms(value)
    if ms is None:
        return None
    try:
        return ms_to_iso(ms)
    except (OverflowError, OSError, ValueError):
        return None


def ms_to_iso(ms: float) -> str:
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_ms(now: datetime | None = None) -> float:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.timestamp() * 1000
