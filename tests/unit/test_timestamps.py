"""Tests for timestamp coercion."""

from datetime import datetime, timezone

from moment_engine.models.timestamps import ms_to_iso, now_ms, to_epoch_ms, to_iso

EPOCH_MS = 1741600800000  # 2025-03-10T10:00:00Z


def test_accepts_every_timestamp_form():
    assert to_epoch_ms(EPOCH_MS) == EPOCH_MS
    assert to_epoch_ms("2025-03-10T10:00:00Z") == EPOCH_MS
    assert to_epoch_ms("2025-03-10T10:00:00") == EPOCH_MS
    assert to_epoch_ms(datetime(2025, 3, 10, 10, tzinfo=timezone.utc)) == EPOCH_MS
    assert to_epoch_ms(datetime(2025, 3, 10, 10)) == EPOCH_MS


def test_unparsable_is_none():
    assert to_epoch_ms(None) is None
    assert to_epoch_ms("") is None
    assert to_epoch_ms("yesterday") is None
    assert to_epoch_ms(float("nan")) is None
    assert to_epoch_ms(True) is None
    assert to_iso("yesterday") is None


def test_iso_format():
    assert ms_to_iso(EPOCH_MS) == "2025-03-10T10:00:00.000Z"
    assert to_iso("2025-03-10T10:00:00+00:00") == "2025-03-10T10:00:00.000Z"


def test_now_ms_uses_explicit_now():
    assert now_ms(datetime(2025, 3, 10, 10, tzinfo=timezone.utc)) == EPOCH_MS
