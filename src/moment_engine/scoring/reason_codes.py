"""Machine-readable reason codes emitted by the qualification gate."""

from __future__ import annotations

from enum import StrEnum


class ReasonCode(StrEnum):
    FAIL_SINGLE_SOURCE = "FAIL_SINGLE_SOURCE"
    FAIL_LOW_SIGNAL_COUNT = "FAIL_LOW_SIGNAL_COUNT"
    FAIL_LOW_SIGNAL_DENSITY = "FAIL_LOW_SIGNAL_DENSITY"
    FAIL_LOW_VELOCITY = "FAIL_LOW_VELOCITY"
    FAIL_LOW_COHERENCE = "FAIL_LOW_COHERENCE"
    FAIL_LOW_LEGIBILITY = "FAIL_LOW_LEGIBILITY"
    FAIL_LOW_OVERALL = "FAIL_LOW_OVERALL"
    FAIL_EVALUATION_ERROR = "FAIL_EVALUATION_ERROR"
