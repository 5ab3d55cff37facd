"""Quality firewall: every moment candidate is scored and gated here before surfacing."""

from __future__ import annotations

from moment_engine.config.settings import Settings
from moment_engine.exceptions import ConfigurationError
from moment_engine.models.domain import (
    Explainability,
    MomentCandidate,
    Qualification,
    QualifyOptions,
    QualityScore,
    QualityThresholds,
    QualityWeights,
    VelocityOptions,
)
from moment_engine.observability.logger import get_logger
from moment_engine.qualification.gate import (
    ComponentScores,
    classify_maturity,
    compute_overall_score,
    evaluate_against_thresholds,
)
from moment_engine.scoring.bounds import clamp01
from moment_engine.scoring.legibility import MAX_PHRASES, score_cultural_legibility
from moment_engine.scoring.narrative import score_narrative_coherence
from moment_engine.scoring.reason_codes import ReasonCode
from moment_engine.scoring.signal_density import score_signal_density
from moment_engine.scoring.velocity import score_velocity

logger = get_logger("qualification")

MAX_QUALIFY_PHRASES = 18
MAX_SIGNAL_KEYWORDS = 24
MAX_LEGIBILITY_FALLBACK_CHARS = 220

_ZERO_SCORE = QualityScore(
    signal_density=0.0,
    velocity=0.0,
    narrative_coherence=0.0,
    cultural_legibility=0.0,
    overall=0.0,
)


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def extract_phrases(candidate: MomentCandidate) -> list[str]:
    """Candidate title and description, then each signal's title and summary."""
    raw = [candidate.title, candidate.description]
    for sig in candidate.signals or ():
        raw.extend([sig.title, sig.summary])
    return [p for p in (_text(r) for r in raw) if p][:MAX_QUALIFY_PHRASES]


def extract_keywords(candidate: MomentCandidate) -> list[str] | None:
    if candidate.keywords is not None:
        return list(candidate.keywords)
    kws = []
    for sig in candidate.signals or ():
        for k in sig.keywords or ():
            v = str(k).strip() if k is not None else ""
            if v:
                kws.append(v)
    return kws[:MAX_SIGNAL_KEYWORDS] or None


def _qualify(candidate: MomentCandidate, opts: QualifyOptions) -> Qualification:
    signals = list(candidate.signals or ())

    density = score_signal_density(signals)
    velocity = score_velocity(signals, opts.velocity)

    phrases = extract_phrases(candidate)
    narrative = score_narrative_coherence(phrases, extract_keywords(candidate))

    legibility_text = (
        _text(candidate.title)
        or _text(candidate.description)
        or " | ".join(phrases)[:MAX_LEGIBILITY_FALLBACK_CHARS]
    )
    legibility = score_cultural_legibility(legibility_text, phrases[:MAX_PHRASES])

    components = ComponentScores(
        signal_density=clamp01(density.score),
        velocity=clamp01(velocity.score),
        narrative_coherence=clamp01(narrative.score),
        cultural_legibility=clamp01(legibility.score),
    )
    score = QualityScore(
        signal_density=components.signal_density,
        velocity=components.velocity,
        narrative_coherence=components.narrative_coherence,
        cultural_legibility=components.cultural_legibility,
        overall=compute_overall_score(components, opts.weights),
    )

    passed, reasons = evaluate_against_thresholds(
        score, opts.thresholds, density.unique_sources_count, density.total_signals
    )
    maturity = None
    if passed or opts.compute_maturity_on_fail:
        maturity = classify_maturity(velocity.score, density.total_signals)

    return Qualification(
        passed=passed,
        score=score,
        reasons=tuple(reasons),
        maturity=maturity,
        explain=Explainability(
            unique_sources=density.unique_sources,
            total_signals=density.total_signals,
            first_seen_at=candidate.first_seen_at,
            collapsed_from_ids=candidate.collapsed_from_ids,
        ),
    )


def qualify_moment(candidate: MomentCandidate, options: QualifyOptions | None = None) -> Qualification:
    """Score a candidate and gate it. Never raises; failures come back as a flagged fail."""
    opts = options or QualifyOptions()
    try:
        return _qualify(candidate, opts)
    except Exception as e:
        logger.error(
            "qualification_failed",
            candidate_id=getattr(candidate, "id", None),
            error=str(e),
            error_type=type(e).__name__,
        )
        return Qualification(
            passed=False,
            score=_ZERO_SCORE,
            reasons=(ReasonCode.FAIL_EVALUATION_ERROR,),
        )


class MomentQualifier:
    """qualify_moment bound to weights, thresholds and velocity options from Settings."""

    def __init__(self, settings: Settings) -> None:
        weights = QualityWeights(
            signal_density=settings.w_signal_density,
            velocity=settings.w_velocity,
            narrative_coherence=settings.w_narrative_coherence,
            cultural_legibility=settings.w_cultural_legibility,
        )
        thresholds = QualityThresholds(
            min_overall=settings.min_overall,
            min_signal_density=settings.min_signal_density,
            min_velocity=settings.min_velocity,
            min_narrative_coherence=settings.min_narrative_coherence,
            min_cultural_legibility=settings.min_cultural_legibility,
            min_unique_sources=settings.min_unique_sources,
            min_total_signals=settings.min_total_signals,
        )
        for name, value in {**vars(weights), **vars(thresholds)}.items():
            if value < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")

        self.options = QualifyOptions(
            weights=weights,
            thresholds=thresholds,
            velocity=VelocityOptions(
                bin_ms=settings.velocity_bin_ms,
                bins=settings.velocity_bins,
                recent_portion=settings.velocity_recent_portion,
            ),
            compute_maturity_on_fail=settings.compute_maturity_on_fail,
        )

    def qualify(self, candidate: MomentCandidate) -> Qualification:
        return qualify_moment(candidate, self.options)
