"""Moment pipeline orchestrator: collect, cluster, qualify, surface, store."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from moment_engine.clustering.engine import Cluster, build_clusters, max_clusters_for
from moment_engine.clustering.representative import cluster_cohesion, time_bounds, to_candidate
from moment_engine.config.settings import Settings
from moment_engine.decision.surfacing import surface_decision
from moment_engine.exceptions import CollectionError, SourceTimeoutError
from moment_engine.lifecycle.evaluate import evaluate_moment_lifecycle
from moment_engine.models.domain import (
    DecisionInputs,
    DecisionSurface,
    LifecycleSignal,
    MomentCandidate,
    MomentHealth,
    Qualification,
    RawItem,
    RunTrace,
    SignalContext,
)
from moment_engine.models.schemas import MomentReport, RunReport, ScoreReport
from moment_engine.observability.logger import get_logger
from moment_engine.observability.metrics import (
    log_cluster_metrics,
    log_decision,
    log_qualification_metrics,
    log_stage,
)
from moment_engine.observability.tracing import TraceContext
from moment_engine.protocols.collector import SignalCollector
from moment_engine.protocols.moment_store import MomentStore
from moment_engine.qualification.qualify import MomentQualifier
from moment_engine.storage.records import build_moment_record
from moment_engine.text.entities import extract_entities

logger = get_logger("moment_pipeline")


@dataclass
class SurfacedMoment:
    candidate: MomentCandidate
    qualification: Qualification
    decision: DecisionSurface
    health: MomentHealth | None = None
    stored: bool = False


@dataclass
class PipelineResult:
    moments: list[SurfacedMoment]
    trace: RunTrace
    failed_sources: list[str] = field(default_factory=list)

    @property
    def qualified(self) -> list[SurfacedMoment]:
        return [m for m in self.moments if m.qualification.passed]

    def to_report(self) -> RunReport:
        return RunReport(
            trace_id=self.trace.trace_id,
            latency_ms=round(self.trace.latency_ms, 2),
            item_count=self.trace.item_count,
            cluster_count=self.trace.cluster_count,
            qualified_count=self.trace.qualified_count,
            failed_sources=self.failed_sources,
            moments=[_moment_report(m) for m in self.moments],
        )


def _moment_report(m: SurfacedMoment) -> MomentReport:
    q = m.qualification
    return MomentReport(
        moment_id=m.candidate.id,
        name=m.candidate.title or m.candidate.id,
        passed=q.passed,
        reasons=[str(r) for r in q.reasons],
        maturity=str(q.maturity) if q.maturity else None,
        score=ScoreReport(
            signal_density=round(q.score.signal_density, 4),
            velocity=round(q.score.velocity, 4),
            narrative_coherence=round(q.score.narrative_coherence, 4),
            cultural_legibility=round(q.score.cultural_legibility, 4),
            overall=round(q.score.overall, 4),
        ),
        sources=list(q.explain.unique_sources) if q.explain else [],
        signal_count=q.explain.total_signals if q.explain else len(m.candidate.signals),
        decision_state=str(m.decision.decision_state),
        confidence_trajectory=str(m.decision.confidence_trajectory),
        signal_strength=str(m.decision.signal_strength),
        decision_rationale=m.decision.decision_rationale,
        health=str(m.health.state) if m.health else None,
        stored=m.stored,
    )


def _lifecycle_context(c: Cluster, window_label: str) -> SignalContext:
    return SignalContext(
        window_label=window_label,
        signals=tuple(
            LifecycleSignal(
                source=it.source,
                text=it.raw.title,
                keywords=it.tokens,
                entities=tuple(extract_entities(it.raw.title)),
            )
            for it in c.items
        ),
    )


class MomentPipeline:
    def __init__(
        self,
        collectors: Sequence[SignalCollector],
        store: MomentStore,
        settings: Settings,
        qualifier: MomentQualifier | None = None,
    ) -> None:
        self._collectors = list(collectors)
        self._store = store
        self._settings = settings
        self._qualifier = qualifier or MomentQualifier(settings)

    async def _collect_one(self, collector: SignalCollector) -> list[RawItem]:
        try:
            return await asyncio.wait_for(
                collector.collect(), timeout=self._settings.source_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise SourceTimeoutError(
                f"{collector.name} timed out after {self._settings.source_timeout_seconds}s"
            ) from e

    async def collect(self) -> tuple[list[RawItem], list[str]]:
        """Fan out to every collector. Failed or slow sources contribute nothing."""
        if not self._collectors:
            return [], []
        tasks = [asyncio.create_task(self._collect_one(c)) for c in self._collectors]
        _, pending = await asyncio.wait(tasks, timeout=self._settings.collection_budget_seconds)
        for t in pending:
            t.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        items: list[RawItem] = []
        failed: list[str] = []
        for collector, task in zip(self._collectors, tasks):
            if task in pending:
                logger.warning("source_over_budget", source=collector.name)
                failed.append(collector.name)
                continue
            exc = task.exception()
            if exc is not None:
                if isinstance(exc, CollectionError):
                    logger.warning("source_failed", source=collector.name, error=str(exc))
                else:
                    logger.error(
                        "source_crashed",
                        source=collector.name,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                failed.append(collector.name)
                continue
            items.extend(task.result() or [])
        return items, failed

    def cluster(self, items: list[RawItem]) -> list[Cluster]:
        s = self._settings
        cap = max_clusters_for(len(items), s.max_clusters_floor, s.max_clusters_ceiling)
        return build_clusters(
            items,
            max_clusters=cap,
            merge_threshold=s.cluster_merge_threshold,
            near_duplicate_threshold=s.near_duplicate_threshold,
            centroid_size=s.centroid_size,
            same_category=s.same_category_clustering,
        )

    async def _process_cluster(
        self, c: Cluster, trace: TraceContext, now: datetime | None
    ) -> SurfacedMoment:
        candidate = to_candidate(c, self._settings.centroid_size)
        qualification = self._qualifier.qualify(candidate)
        log_qualification_metrics(trace.trace_id, candidate.id, qualification)

        first_ms, last_ms = time_bounds(c)
        decision = surface_decision(
            DecisionInputs(
                signal_count=len(c.items),
                source_count=len(c.sources),
                first_seen_at=first_ms,
                last_confirmed_at=last_ms,
                quality_score=qualification.score.overall,
            ),
            now=now,
        )
        log_decision(trace.trace_id, candidate.id, decision)

        moment = SurfacedMoment(candidate=candidate, qualification=qualification, decision=decision)

        existing = await self._store.get(candidate.id)
        if existing is not None:
            moment.health = evaluate_moment_lifecycle(
                existing, _lifecycle_context(c, trace.window_label), now=now
            )
        elif qualification.passed:
            record = build_moment_record(
                candidate,
                qualification,
                self._qualifier.options.thresholds,
                decay_horizon_hours=self._settings.decay_horizon_hours,
                now=now,
            )
            moment.stored = await self._store.put_if_absent(record)
        return moment

    async def run(self, now: datetime | None = None) -> PipelineResult:
        trace = TraceContext(started_at=now)

        with trace.stage("collection", sources=len(self._collectors)) as span:
            items, failed = await self.collect()
            span.record(items=len(items), failed_sources=len(failed))
        log_stage(trace.trace_id, span)

        with trace.stage("clustering", items=len(items)) as span:
            clusters = self.cluster(items)
            span.record(clusters=len(clusters))
        log_stage(trace.trace_id, span)
        log_cluster_metrics(
            trace.trace_id,
            len(items),
            len(clusters),
            [c.size for c in clusters],
            [cluster_cohesion(c, self._settings.centroid_size) for c in clusters],
        )

        moments: list[SurfacedMoment] = []
        with trace.stage("qualification", clusters=len(clusters)) as span:
            for c in clusters:
                moments.append(await self._process_cluster(c, trace, now))
            qualified = sum(1 for m in moments if m.qualification.passed)
            span.record(qualified=qualified, stored=sum(1 for m in moments if m.stored))
        log_stage(trace.trace_id, span)

        run_trace = trace.to_trace(
            item_count=len(items),
            cluster_count=len(clusters),
            qualified_count=qualified,
            failed_sources=failed,
        )
        logger.info(
            "pipeline_complete",
            trace_id=trace.trace_id,
            items=len(items),
            clusters=len(clusters),
            qualified=qualified,
            failed_sources=failed,
            latency_ms=round(run_trace.latency_ms, 2),
        )
        return PipelineResult(moments=moments, trace=run_trace, failed_sources=failed)
