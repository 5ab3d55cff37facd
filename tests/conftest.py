"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from moment_engine.config.settings import Settings
from moment_engine.models.domain import (
    LifecycleStatus,
    MomentCandidate,
    MomentRecord,
    QualificationSnapshot,
    QualityThresholds,
    RawItem,
    Signal,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def ago(**kwargs) -> str:
    """ISO timestamp the given timedelta before NOW."""
    return (NOW - timedelta(**kwargs)).isoformat().replace("+00:00", "Z")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings():
    return Settings(log_level="WARNING")


@pytest.fixture
def open_thresholds():
    """Every gate at zero, so any non-empty candidate passes."""
    return QualityThresholds(
        min_overall=0.0,
        min_signal_density=0.0,
        min_velocity=0.0,
        min_narrative_coherence=0.0,
        min_cultural_legibility=0.0,
        min_unique_sources=0,
        min_total_signals=0,
    )


@pytest.fixture
def single_source_candidate():
    """Five near-identical posts from one source within one minute."""
    return MomentCandidate(
        id="moment:single",
        signals=tuple(
            Signal(source="hn", id=str(i), created_at=ago(seconds=10 * i), title="test test test")
            for i in range(5)
        ),
    )


@pytest.fixture
def burst_candidate():
    """Eight posts from four sources sharing six meaningful tokens.

    Half arrived in the last hour and half twenty hours ago.
    """
    shared = "postgres vector search extension release planner"
    extras = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel"]
    sources = ["hn", "reddit", "lobsters", "devto"]
    signals = []
    for i, extra in enumerate(extras):
        created = ago(minutes=20 + 10 * i) if i < 4 else ago(hours=20, minutes=i)
        signals.append(
            Signal(
                source=sources[i % 4],
                id=f"s{i}",
                created_at=created,
                title=f"{shared} {extra}",
            )
        )
    return MomentCandidate(id="moment:burst", signals=tuple(signals))


@pytest.fixture
def raw_items():
    return [
        RawItem(source="hn", id="1", title="Postgres adds native vector search", created_at=ago(hours=3), weight=120),
        RawItem(source="reddit", id="2", title="Native vector search lands in Postgres", created_at=ago(hours=1), weight=40),
        RawItem(source="hn", id="3", title="Rust compiler release speeds builds", created_at=ago(hours=2), weight=60),
    ]


@pytest.fixture
def moment_record():
    return MomentRecord(
        moment_id="moment:abc123",
        name="Postgres ships native vector search",
        sources=("hn", "reddit"),
        qualified_at="2025-03-10T12:00:00.000Z",
        decay_horizon_hours=72,
        lifecycle_status=LifecycleStatus.ACTIVE,
        snapshot=QualificationSnapshot(
            velocity_score=0.7,
            coherence_score=0.6,
            overall_score=0.72,
            qualification_threshold=0.68,
        ),
        signature_keywords=("postgre", "vector", "search"),
        anchor_entities=("postgres",),
        qualification_hash="0" * 64,
    )
