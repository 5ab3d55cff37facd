"""Metric recording helpers for pipeline runs."""

from __future__ import annotations

from moment_engine.models.domain import DecisionSurface, Qualification
from moment_engine.observability.logger import get_logger
from moment_engine.observability.tracing import StageSpan

logger = get_logger("metrics")


def log_cluster_metrics(
    trace_id: str,
    item_count: int,
    cluster_count: int,
    sizes: list[int],
    cohesion: list[float],
) -> None:
    logger.info(
        "cluster_metrics",
        trace_id=trace_id,
        item_count=item_count,
        cluster_count=cluster_count,
        sizes=sizes,
        cohesion=[round(c, 4) for c in cohesion],
    )


def log_qualification_metrics(trace_id: str, moment_id: str, q: Qualification) -> None:
    logger.info(
        "qualification_metrics",
        trace_id=trace_id,
        moment_id=moment_id,
        passed=q.passed,
        overall=round(q.score.overall, 4),
        signal_density=round(q.score.signal_density, 4),
        velocity=round(q.score.velocity, 4),
        narrative_coherence=round(q.score.narrative_coherence, 4),
        cultural_legibility=round(q.score.cultural_legibility, 4),
        reasons=[str(r) for r in q.reasons],
        maturity=str(q.maturity) if q.maturity else None,
    )


def log_decision(trace_id: str, moment_id: str, d: DecisionSurface) -> None:
    logger.info(
        "decision_surfaced",
        trace_id=trace_id,
        moment_id=moment_id,
        decision=str(d.decision_state),
        trajectory=str(d.confidence_trajectory),
        strength=str(d.signal_strength),
    )


def log_stage(trace_id: str, span: StageSpan) -> None:
    log = logger.warning if span.failed else logger.info
    log(
        "stage_finished",
        trace_id=trace_id,
        stage=span.stage,
        duration_ms=round(span.duration_ms, 2),
        failed=span.failed,
        **span.counts,
    )
