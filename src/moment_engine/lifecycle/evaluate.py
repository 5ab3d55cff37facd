"""Health check of a stored moment against a fresh evidence window.

Age alone never invalidates a moment. Health is judged from signal integrity
(SIS: volume and source breadth in the window) and identity continuity (ICS:
keyword and entity overlap with the stored canonical identity). Title-only
single-source evidence is noisy, so it gets a lower ICS floor.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime

from moment_engine.models.domain import (
    HealthExplain,
    InvalidReason,
    LifecycleSignal,
    LifecycleThresholds,
    MomentHealth,
    MomentHealthState,
    MomentRecord,
    SignalContext,
)
from moment_engine.models.timestamps import ms_to_iso, now_ms
from moment_engine.observability.logger import get_logger
from moment_engine.scoring.bounds import clamp01
from moment_engine.similarity.jaccard import jaccard
from moment_engine.text.sources import canonical_source

logger = get_logger("lifecycle")


def _clean(values: Iterable | None) -> list[str]:
    return [v.strip().lower() for v in (values or ()) if isinstance(v, str) and v.strip()]


def _pct(x: float) -> int:
    return math.floor(x * 100 + 0.5)


def _active_sources(signals: tuple[LifecycleSignal, ...]) -> list[str]:
    seen = dict.fromkeys(
        canonical_source(s.source) for s in signals if isinstance(s.source, str) and s.source.strip()
    )
    return list(seen)


def compute_sis(signals: tuple[LifecycleSignal, ...]) -> float:
    volume = clamp01(len(signals) / 3)
    diversity = clamp01(len(_active_sources(signals)) / 2)
    return clamp01(0.75 * volume + 0.25 * diversity)


def compute_ics(
    record: MomentRecord, signals: tuple[LifecycleSignal, ...]
) -> tuple[float, float, float]:
    """Returns (ics, keyword_continuity, entity_continuity)."""
    evidence_kw: list[str] = []
    evidence_en: list[str] = []
    for s in signals:
        evidence_kw.extend(_clean(s.keywords))
        evidence_en.extend(_clean(s.entities))
    kw = jaccard(_clean(record.signature_keywords), evidence_kw)
    en = jaccard(_clean(record.anchor_entities), evidence_en)
    return clamp01(0.6 * kw + 0.4 * en), kw, en


def evaluate_moment_lifecycle(
    record: MomentRecord,
    context: SignalContext,
    thresholds: LifecycleThresholds | None = None,
    now: datetime | None = None,
) -> MomentHealth:
    th = thresholds or LifecycleThresholds()
    evaluated_at = ms_to_iso(now_ms(now))
    window = context.window_label
    signals = tuple(context.signals or ())
    window_line = f"Evidence window: {window}."
    count_line = f"Signals matched to this moment: {len(signals)}."

    if not _clean(record.signature_keywords) and not _clean(record.anchor_entities):
        return MomentHealth(
            state=MomentHealthState.INVALID,
            sis=0.0,
            ics=0.0,
            evaluated_at=evaluated_at,
            window_label=window,
            invalid_reason=InvalidReason.CANONICAL_MISSING,
            explain=HealthExplain(
                signal=(window_line, count_line),
                identity=(
                    "Canonical identity missing (signature keywords and anchor entities empty).",
                    "Refusing lifecycle evaluation to protect credibility.",
                ),
            ),
        )

    sis = compute_sis(signals)
    if not signals or sis < th.min_sis_existence:
        return MomentHealth(
            state=MomentHealthState.INVALID,
            sis=sis,
            ics=0.0,
            evaluated_at=evaluated_at,
            window_label=window,
            invalid_reason=InvalidReason.NO_EVIDENCE,
            explain=HealthExplain(
                signal=(
                    window_line,
                    count_line,
                    f"SIS below existence minimum ({th.min_sis_existence}).",
                ),
                identity=("Identity continuity cannot be evaluated without evidence.",),
            ),
        )

    ics, kw, en = compute_ics(record, signals)
    sources = _active_sources(signals)
    single_source = len(sources) <= 1
    min_ics = th.min_ics_single_source if single_source else th.min_ics_multi_source
    signal_lines = (
        window_line,
        count_line,
        f"Active sources: {len(sources)} ({', '.join(sources)}).",
    )
    continuity_lines = (
        f"Keyword continuity: {_pct(kw)}%.",
        f"Entity continuity: {_pct(en)}%.",
    )

    if ics < min_ics:
        mode = "single-source" if single_source else "multi-source"
        logger.info("moment_identity_drift", moment_id=record.moment_id, ics=round(ics, 4))
        return MomentHealth(
            state=MomentHealthState.INVALID,
            sis=sis,
            ics=ics,
            evaluated_at=evaluated_at,
            window_label=window,
            invalid_reason=InvalidReason.IDENTITY_DRIFT,
            explain=HealthExplain(
                signal=signal_lines,
                identity=(
                    *continuity_lines,
                    f"Identity continuity below minimum ({min_ics}) for {mode} mode.",
                ),
            ),
        )

    state = MomentHealthState.WEAK if sis < th.min_sis_valid else MomentHealthState.VALID
    return MomentHealth(
        state=state,
        sis=sis,
        ics=ics,
        evaluated_at=evaluated_at,
        window_label=window,
        explain=HealthExplain(
            signal=signal_lines,
            identity=(
                *continuity_lines,
                "Identity continuity within acceptable range for this evidence mode.",
            ),
        ),
    )
