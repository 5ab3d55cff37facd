"""Decision surfacing: should we act on a moment now?

Works from counts and timestamps only, independent of the quality score.
Signal strength and confidence trajectory are inferred from age (first seen
to now) and recency (last confirmed to now) plus a density proxy. The base
decision then passes through a downgrade-only compatibility filter, so ACT
is only ever returned for STRONG + ACCELERATING evidence.
"""

from __future__ import annotations

import math
from datetime import datetime

from moment_engine.models.domain import (
    ConfidenceTrajectory,
    DecisionInputs,
    DecisionState,
    DecisionSurface,
    EvidenceSurface,
    SignalStrength,
)
from moment_engine.models.timestamps import ms_to_iso, now_ms, to_epoch_ms
from moment_engine.observability.logger import get_logger

logger = get_logger("decision")

MAX_SIGNAL_COUNT = 10_000
MAX_SOURCE_COUNT = 1_000

RATIONALE_WEAK = "Insufficient signal density/breadth to act confidently right now."
RATIONALE_WEAKENING = "Signals appear to be weakening; wait for renewed confirmation."
RATIONALE_ACT = "Strong and accelerating signals suggest a timely action window."
RATIONALE_VOLATILE = "Strong but volatile signals; refresh to avoid false timing."
RATIONALE_REFRESH = "Signals are present but not decisive; refresh for confirmation."
RATIONALE_DOWNGRADED_WAIT = (
    "Not enough evidence for action timing yet; wait for stronger acceleration or breadth."
)
RATIONALE_MODERATE_REFRESH = "Moderate signal without acceleration; refresh later to confirm direction."
RATIONALE_FALLBACK = "Unable to confidently evaluate evidence; defaulting to safe WAIT."


def clamp_int(n, lo: int, hi: int) -> int:
    try:
        f = float(n)
    except (TypeError, ValueError):
        return lo
    if not math.isfinite(f):
        return lo
    return max(lo, min(hi, math.trunc(f)))


class _Evidence:
    """Counts and elapsed times derived once per call."""

    def __init__(self, inputs: DecisionInputs, now: float) -> None:
        self.signals = clamp_int(inputs.signal_count, 0, MAX_SIGNAL_COUNT)
        self.sources = clamp_int(inputs.source_count, 0, MAX_SOURCE_COUNT)
        self.first_ms = to_epoch_ms(inputs.first_seen_at)
        self.last_ms = to_epoch_ms(inputs.last_confirmed_at)
        self.age_hours = abs(now - self.first_ms) / 3_600_000 if self.first_ms is not None else None
        self.recency_mins = abs(now - self.last_ms) / 60_000 if self.last_ms is not None else None


def derive_signal_strength(ev: _Evidence) -> SignalStrength:
    r = ev.recency_mins
    very_recent = r is not None and r <= 180
    recent = r is not None and r <= 24 * 60
    n, s = ev.signals, ev.sources

    if (
        (very_recent and s >= 3 and n >= 7)
        or (very_recent and n >= 14)
        or (recent and s >= 4 and n >= 10)
    ):
        return SignalStrength.STRONG
    if (
        (recent and s >= 2 and n >= 6)
        or (very_recent and n >= 8)
        or (recent and s >= 3 and n >= 5)
    ):
        return SignalStrength.MODERATE
    return SignalStrength.WEAK


def derive_trajectory(ev: _Evidence) -> ConfidenceTrajectory:
    if ev.first_ms is None and ev.last_ms is None:
        return ConfidenceTrajectory.STABLE

    age, r = ev.age_hours, ev.recency_mins
    n, s = ev.signals, ev.sources

    dense = n >= 10 or (n >= 7 and s >= 2) or (n >= 5 and s >= 3)
    very_recent = r is not None and r <= 90
    recent = r is not None and r <= 240
    newish = age is not None and age <= 24
    if dense and (very_recent or (recent and newish)):
        return ConfidenceTrajectory.ACCELERATING

    if r is not None and r >= 24 * 60 and age is not None and age >= 36:
        return ConfidenceTrajectory.WEAKENING

    older = age is not None and age >= 48
    mid_recency = r is not None and 240 < r < 24 * 60
    if older and mid_recency and (n >= 12 or (n >= 9 and s >= 2)):
        return ConfidenceTrajectory.VOLATILE

    return ConfidenceTrajectory.STABLE


def enforce_compatibility(
    decision: DecisionState, strength: SignalStrength, trajectory: ConfidenceTrajectory
) -> DecisionState:
    """Downgrade-only. Never returns a more aggressive state than it was given."""
    if strength == SignalStrength.WEAK:
        return DecisionState.WAIT
    if trajectory == ConfidenceTrajectory.WEAKENING and decision == DecisionState.ACT:
        return DecisionState.WAIT

    if strength == SignalStrength.MODERATE:
        if decision == DecisionState.ACT:
            return DecisionState.REFRESH
        if trajectory != ConfidenceTrajectory.ACCELERATING and decision == DecisionState.REFRESH:
            return DecisionState.WAIT
        return decision

    if trajectory != ConfidenceTrajectory.ACCELERATING and decision == DecisionState.ACT:
        return DecisionState.REFRESH
    return decision


def _base_decision(
    strength: SignalStrength, trajectory: ConfidenceTrajectory
) -> tuple[DecisionState, str]:
    if strength == SignalStrength.WEAK:
        return DecisionState.WAIT, RATIONALE_WEAK
    if trajectory == ConfidenceTrajectory.WEAKENING:
        return DecisionState.WAIT, RATIONALE_WEAKENING
    if strength == SignalStrength.STRONG and trajectory == ConfidenceTrajectory.ACCELERATING:
        return DecisionState.ACT, RATIONALE_ACT
    if strength == SignalStrength.STRONG and trajectory == ConfidenceTrajectory.VOLATILE:
        return DecisionState.REFRESH, RATIONALE_VOLATILE
    return DecisionState.REFRESH, RATIONALE_REFRESH


def _evidence_surface(ev: _Evidence) -> EvidenceSurface:
    velocity = None
    if ev.age_hours is not None:
        velocity = round(ev.signals / max(ev.age_hours, 1.0), 2)
    return EvidenceSurface(
        signal_count=ev.signals,
        source_count=ev.sources,
        first_seen_at=ms_to_iso(ev.first_ms) if ev.first_ms is not None else None,
        last_confirmed_at=ms_to_iso(ev.last_ms) if ev.last_ms is not None else None,
        age_hours=round(ev.age_hours, 2) if ev.age_hours is not None else None,
        recency_mins=round(ev.recency_mins, 2) if ev.recency_mins is not None else None,
        velocity_per_hour=velocity,
    )


def surface_decision(inputs: DecisionInputs, now: datetime | None = None) -> DecisionSurface:
    """Classify strength and trajectory and recommend ACT, WAIT or REFRESH. Never raises."""
    try:
        ev = _Evidence(inputs, now_ms(now))
        trajectory = derive_trajectory(ev)
        strength = derive_signal_strength(ev)

        decision, rationale = _base_decision(strength, trajectory)
        decision = enforce_compatibility(decision, strength, trajectory)

        if (
            decision == DecisionState.WAIT
            and strength != SignalStrength.WEAK
            and trajectory != ConfidenceTrajectory.WEAKENING
        ):
            rationale = RATIONALE_DOWNGRADED_WAIT
        if (
            decision == DecisionState.REFRESH
            and strength == SignalStrength.MODERATE
            and trajectory != ConfidenceTrajectory.ACCELERATING
        ):
            rationale = RATIONALE_MODERATE_REFRESH

        return DecisionSurface(
            decision_state=decision,
            confidence_trajectory=trajectory,
            signal_strength=strength,
            decision_rationale=rationale,
            evidence=_evidence_surface(ev),
        )
    except Exception as e:
        logger.error("decision_surfacing_failed", error=str(e), error_type=type(e).__name__)
        return DecisionSurface(
            decision_state=DecisionState.WAIT,
            confidence_trajectory=ConfidenceTrajectory.STABLE,
            signal_strength=SignalStrength.WEAK,
            decision_rationale=RATIONALE_FALLBACK,
        )
