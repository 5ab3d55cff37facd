"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from moment_engine.scoring.reason_codes import ReasonCode

# Epoch millis, ISO-8601 string or datetime. None when unknown.
Timestamp = int | float | str | datetime | None


class Maturity(StrEnum):
    EMERGING = "emerging"
    FORMING = "forming"
    ESTABLISHED = "established"
    EXPIRED = "expired"


class DecisionState(StrEnum):
    ACT = "ACT"
    WAIT = "WAIT"
    REFRESH = "REFRESH"


class ConfidenceTrajectory(StrEnum):
    ACCELERATING = "ACCELERATING"
    STABLE = "STABLE"
    WEAKENING = "WEAKENING"
    VOLATILE = "VOLATILE"


class SignalStrength(StrEnum):
    WEAK = "WEAK"
    MODERATE = "MODERATE"
    STRONG = "STRONG"


class LifecycleStatus(StrEnum):
    ACTIVE = "active"
    COOLING = "cooling"
    HISTORICAL = "historical"


class MomentHealthState(StrEnum):
    VALID = "VALID"
    WEAK = "WEAK"
    INVALID = "INVALID"


class InvalidReason(StrEnum):
    NO_EVIDENCE = "NO_EVIDENCE"
    IDENTITY_DRIFT = "IDENTITY_DRIFT"
    CANONICAL_MISSING = "CANONICAL_MISSING"


@dataclass(frozen=True)
class RawItem:
    source: str
    title: str
    id: str | None = None
    summary: str | None = None
    keywords: tuple[str, ...] = ()
    created_at: Timestamp = None
    url: str | None = None
    category: str | None = None
    weight: float = 0.0  # upstream popularity, e.g. HN points


@dataclass(frozen=True)
class Signal:
    source: str
    id: str | None = None
    created_at: Timestamp = None
    title: str | None = None
    summary: str | None = None
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class MomentCandidate:
    id: str
    signals: tuple[Signal, ...] = ()
    title: str | None = None
    description: str | None = None
    keywords: tuple[str, ...] | None = None
    first_seen_at: str | None = None
    collapsed_from_ids: tuple[str, ...] | None = None


@dataclass(frozen=True)
class QualityWeights:
    signal_density: float = 0.28
    velocity: float = 0.22
    narrative_coherence: float = 0.28
    cultural_legibility: float = 0.22


@dataclass(frozen=True)
class QualityThresholds:
    min_overall: float = 0.68
    min_signal_density: float = 0.55
    min_velocity: float = 0.45
    min_narrative_coherence: float = 0.55
    min_cultural_legibility: float = 0.50
    min_unique_sources: int = 2
    min_total_signals: int = 4


@dataclass(frozen=True)
class VelocityOptions:
    bin_ms: int = 60 * 60 * 1000
    bins: int = 12
    recent_portion: float = 0.25


@dataclass(frozen=True)
class QualifyOptions:
    weights: QualityWeights = field(default_factory=QualityWeights)
    thresholds: QualityThresholds = field(default_factory=QualityThresholds)
    velocity: VelocityOptions = field(default_factory=VelocityOptions)
    compute_maturity_on_fail: bool = False


@dataclass(frozen=True)
class QualityScore:
    signal_density: float
    velocity: float
    narrative_coherence: float
    cultural_legibility: float
    overall: float


@dataclass(frozen=True)
class Explainability:
    unique_sources: tuple[str, ...]
    total_signals: int
    first_seen_at: str | None = None
    collapsed_from_ids: tuple[str, ...] | None = None


@dataclass(frozen=True)
class Qualification:
    passed: bool
    score: QualityScore
    reasons: tuple[ReasonCode, ...]
    maturity: Maturity | None = None
    explain: Explainability | None = None


@dataclass(frozen=True)
class DecisionInputs:
    signal_count: int
    source_count: int
    first_seen_at: Timestamp = None
    last_confirmed_at: Timestamp = None
    quality_score: float | None = None
    evidence_text: str | None = None  # carried for callers; not scored


@dataclass(frozen=True)
class EvidenceSurface:
    signal_count: int
    source_count: int
    first_seen_at: str | None = None
    last_confirmed_at: str | None = None
    age_hours: float | None = None
    recency_mins: float | None = None
    velocity_per_hour: float | None = None


@dataclass(frozen=True)
class DecisionSurface:
    decision_state: DecisionState
    confidence_trajectory: ConfidenceTrajectory
    signal_strength: SignalStrength
    decision_rationale: str
    evidence: EvidenceSurface | None = None


@dataclass(frozen=True)
class QualificationSnapshot:
    velocity_score: float
    coherence_score: float
    overall_score: float
    qualification_threshold: float


@dataclass(frozen=True)
class MomentRecord:
    moment_id: str
    name: str
    sources: tuple[str, ...]
    qualified_at: str
    decay_horizon_hours: int
    lifecycle_status: LifecycleStatus
    snapshot: QualificationSnapshot
    signature_keywords: tuple[str, ...]
    anchor_entities: tuple[str, ...]
    qualification_hash: str


@dataclass(frozen=True)
class LifecycleSignal:
    source: str
    text: str
    keywords: tuple[str, ...] = ()
    entities: tuple[str, ...] = ()


@dataclass(frozen=True)
class SignalContext:
    window_label: str
    signals: tuple[LifecycleSignal, ...] = ()


@dataclass(frozen=True)
class LifecycleThresholds:
    min_sis_existence: float = 0.18
    min_sis_valid: float = 0.55
    min_ics_single_source: float = 0.25
    min_ics_multi_source: float = 0.45


@dataclass(frozen=True)
class HealthExplain:
    signal: tuple[str, ...]
    identity: tuple[str, ...]


@dataclass(frozen=True)
class MomentHealth:
    state: MomentHealthState
    sis: float
    ics: float
    evaluated_at: str
    window_label: str
    explain: HealthExplain
    invalid_reason: InvalidReason | None = None


@dataclass
class RunTrace:
    trace_id: str
    timestamp: datetime
    latency_ms: float
    item_count: int
    cluster_count: int
    qualified_count: int
    failed_sources: list[str]
    spans: list[dict]
