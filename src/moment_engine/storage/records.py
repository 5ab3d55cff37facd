"""Build the immutable record written for each qualified moment."""

from __future__ import annotations

import hashlib
import json
from datetime import datetime

from moment_engine.models.domain import (
    LifecycleStatus,
    MomentCandidate,
    MomentRecord,
    Qualification,
    QualificationSnapshot,
    QualityThresholds,
)
from moment_engine.models.timestamps import ms_to_iso, now_ms, to_iso
from moment_engine.text.entities import anchor_entities


def qualification_hash(candidate: MomentCandidate, qualification: Qualification) -> str:
    """SHA-256 over the canonical JSON of everything that was scored."""
    payload = {
        "moment_id": candidate.id,
        "title": candidate.title,
        "keywords": list(candidate.keywords or ()),
        "signals": [
            {
                "source": s.source,
                "id": s.id,
                "created_at": to_iso(s.created_at),
                "title": s.title,
            }
            for s in candidate.signals
        ],
        "score": {
            "signal_density": round(qualification.score.signal_density, 6),
            "velocity": round(qualification.score.velocity, 6),
            "narrative_coherence": round(qualification.score.narrative_coherence, 6),
            "cultural_legibility": round(qualification.score.cultural_legibility, 6),
            "overall": round(qualification.score.overall, 6),
        },
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def build_moment_record(
    candidate: MomentCandidate,
    qualification: Qualification,
    thresholds: QualityThresholds,
    decay_horizon_hours: int = 72,
    now: datetime | None = None,
) -> MomentRecord:
    sources = qualification.explain.unique_sources if qualification.explain else ()
    return MomentRecord(
        moment_id=candidate.id,
        name=candidate.title or candidate.id,
        sources=tuple(sources),
        qualified_at=ms_to_iso(now_ms(now)),
        decay_horizon_hours=decay_horizon_hours,
        lifecycle_status=LifecycleStatus.ACTIVE,
        snapshot=QualificationSnapshot(
            velocity_score=qualification.score.velocity,
            coherence_score=qualification.score.narrative_coherence,
            overall_score=qualification.score.overall,
            qualification_threshold=thresholds.min_overall,
        ),
        signature_keywords=tuple(candidate.keywords or ()),
        anchor_entities=tuple(anchor_entities(s.title for s in candidate.signals)),
        qualification_hash=qualification_hash(candidate, qualification),
    )
