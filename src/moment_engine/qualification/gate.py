"""Weighted overall score, threshold checks and maturity classification."""

from __future__ import annotations

from dataclasses import dataclass

from moment_engine.models.domain import Maturity, QualityScore, QualityThresholds, QualityWeights
from moment_engine.scoring.bounds import clamp01
from moment_engine.scoring.reason_codes import ReasonCode


@dataclass(frozen=True)
class ComponentScores:
    signal_density: float
    velocity: float
    narrative_coherence: float
    cultural_legibility: float


def compute_overall_score(components: ComponentScores, weights: QualityWeights | None = None) -> float:
    """Convex combination of clamped components; weights re-normalized, all-zero gives 0."""
    w = weights or QualityWeights()
    pairs = [
        (components.signal_density, w.signal_density),
        (components.velocity, w.velocity),
        (components.narrative_coherence, w.narrative_coherence),
        (components.cultural_legibility, w.cultural_legibility),
    ]
    w_sum = sum(weight for _, weight in pairs)
    if not w_sum > 0:
        return 0.0
    return clamp01(sum(clamp01(c) * (weight / w_sum) for c, weight in pairs))


def evaluate_against_thresholds(
    score: QualityScore,
    thresholds: QualityThresholds | None,
    unique_sources_count: int,
    total_signals: int,
) -> tuple[bool, list[ReasonCode]]:
    t = thresholds or QualityThresholds()
    reasons: list[ReasonCode] = []

    if unique_sources_count < t.min_unique_sources:
        reasons.append(ReasonCode.FAIL_SINGLE_SOURCE)
    if total_signals < t.min_total_signals:
        reasons.append(ReasonCode.FAIL_LOW_SIGNAL_COUNT)
    if score.signal_density < t.min_signal_density:
        reasons.append(ReasonCode.FAIL_LOW_SIGNAL_DENSITY)
    if score.velocity < t.min_velocity:
        reasons.append(ReasonCode.FAIL_LOW_VELOCITY)
    if score.narrative_coherence < t.min_narrative_coherence:
        reasons.append(ReasonCode.FAIL_LOW_COHERENCE)
    if score.cultural_legibility < t.min_cultural_legibility:
        reasons.append(ReasonCode.FAIL_LOW_LEGIBILITY)
    if score.overall < t.min_overall:
        reasons.append(ReasonCode.FAIL_LOW_OVERALL)

    return not reasons, reasons


def classify_maturity(velocity_score: float, total_signals: int) -> Maturity:
    v = clamp01(velocity_score)
    n = total_signals
    if n < 6 and v >= 0.62:
        return Maturity.EMERGING
    if n >= 6 and v >= 0.52:
        return Maturity.FORMING
    if n >= 12 and v < 0.52:
        return Maturity.ESTABLISHED
    if v < 0.35:
        return Maturity.EXPIRED
    return Maturity.FORMING
