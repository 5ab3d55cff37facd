"""Per-run stage timing for the moment pipeline."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from moment_engine.models.domain import RunTrace


@dataclass
class StageSpan:
    """One pipeline stage. Offsets are milliseconds since the run started."""

    stage: str
    offset_ms: float
    finished_ms: float = 0.0
    failed: bool = False
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return max(0.0, self.finished_ms - self.offset_ms)

    def record(self, **counts: int) -> None:
        self.counts.update(counts)

    def as_dict(self) -> dict:
        return {
            "name": self.stage,
            "start_ms": round(self.offset_ms, 3),
            "end_ms": round(self.finished_ms, 3),
            "duration_ms": round(self.duration_ms, 3),
            "failed": self.failed,
            **self.counts,
        }


class TraceContext:
    """Collects stage spans for one pipeline run and folds them into a RunTrace."""

    def __init__(self, started_at: datetime | None = None, trace_id: str | None = None) -> None:
        self.trace_id = trace_id or uuid4().hex
        self.started_at = started_at or datetime.now(timezone.utc)
        self.stages: list[StageSpan] = []
        self._t0 = time.perf_counter()

    def _offset_ms(self) -> float:
        return (time.perf_counter() - self._t0) * 1000

    @contextmanager
    def stage(self, name: str, **counts: int):
        s = StageSpan(stage=name, offset_ms=self._offset_ms(), counts=dict(counts))
        try:
            yield s
        except BaseException:
            s.failed = True
            raise
        finally:
            s.finished_ms = self._offset_ms()
            self.stages.append(s)

    @property
    def window_label(self) -> str:
        return f"run {self.trace_id[:8]}"

    def to_trace(
        self,
        item_count: int,
        cluster_count: int,
        qualified_count: int,
        failed_sources: list[str],
    ) -> RunTrace:
        return RunTrace(
            trace_id=self.trace_id,
            timestamp=self.started_at,
            latency_ms=self._offset_ms(),
            item_count=item_count,
            cluster_count=cluster_count,
            qualified_count=qualified_count,
            failed_sources=list(failed_sources),
            spans=[s.as_dict() for s in self.stages],
        )
