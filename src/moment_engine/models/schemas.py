"""Pydantic models for loosely-typed external payloads and JSON reports.

Each inbound payload has one boundary converter that turns it into the strict
domain dataclass. Payloads that are not mappings fail validation; individual
malformed fields degrade to their defaults instead.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from moment_engine.models.domain import DecisionInputs, MomentCandidate, RawItem, Signal


def _str_or_none(v: Any) -> str | None:
    if v is None:
        return None
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return str(v) if not isinstance(v, float) or math.isfinite(v) else None
    if isinstance(v, str):
        return v.strip() or None
    return None


def _str_list(v: Any) -> list[str]:
    if isinstance(v, str):
        v = v.split(",")
    if not isinstance(v, (list, tuple)):
        return []
    return [s.strip() for s in v if isinstance(s, str) and s.strip()]


def _timestamp(v: Any) -> int | float | str | datetime | None:
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float, str, datetime)):
        return v
    return None


def _number(v: Any, default: float = 0.0) -> float:
    if isinstance(v, bool):
        return default
    try:
        f = float(v)
    except (TypeError, ValueError):
        return default
    return f if math.isfinite(f) else default


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RawItemPayload(_Payload):
    source: str = "unknown"
    title: str = ""
    id: str | None = None
    summary: str | None = Field(default=None, validation_alias=AliasChoices("summary", "description"))
    keywords: list[str] = Field(default_factory=list)
    created_at: int | float | str | datetime | None = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt", "createdAtISO")
    )
    url: str | None = None
    category: str | None = None
    weight: float = Field(default=0.0, validation_alias=AliasChoices("weight", "score"))

    @field_validator("source", mode="before")
    @classmethod
    def _source(cls, v: Any) -> str:
        return _str_or_none(v) or "unknown"

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("id", "summary", "url", "category", mode="before")
    @classmethod
    def _optional_str(cls, v: Any) -> str | None:
        return _str_or_none(v)

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, v: Any) -> list[str]:
        return _str_list(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at(cls, v: Any):
        return _timestamp(v)

    @field_validator("weight", mode="before")
    @classmethod
    def _weight(cls, v: Any) -> float:
        return _number(v)


class SignalPayload(_Payload):
    source: str | None = None
    id: str | None = None
    created_at: int | float | str | datetime | None = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt")
    )
    title: str | None = None
    summary: str | None = None
    keywords: list[str] = Field(default_factory=list)

    @field_validator("source", "id", "title", "summary", mode="before")
    @classmethod
    def _optional_str(cls, v: Any) -> str | None:
        return _str_or_none(v)

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, v: Any) -> list[str]:
        return _str_list(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at(cls, v: Any):
        return _timestamp(v)


class CandidatePayload(_Payload):
    id: str = ""
    signals: list[SignalPayload] = Field(default_factory=list)
    title: str | None = None
    description: str | None = None
    keywords: list[str] | None = None
    first_seen_at: str | None = Field(
        default=None, validation_alias=AliasChoices("first_seen_at", "firstSeenAt")
    )
    collapsed_from_ids: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("collapsed_from_ids", "collapsedFromIds")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, v: Any) -> str:
        return _str_or_none(v) or ""

    @field_validator("title", "description", "first_seen_at", mode="before")
    @classmethod
    def _optional_str(cls, v: Any) -> str | None:
        return _str_or_none(v)

    @field_validator("signals", mode="before")
    @classmethod
    def _signals(cls, v: Any) -> list:
        if not isinstance(v, (list, tuple)):
            return []
        return [s for s in v if isinstance(s, dict)]

    @field_validator("keywords", "collapsed_from_ids", mode="before")
    @classmethod
    def _optional_list(cls, v: Any) -> list[str] | None:
        return _str_list(v) if v is not None else None


class DecisionInputsPayload(_Payload):
    signal_count: float = Field(default=0, validation_alias=AliasChoices("signal_count", "signalCount"))
    source_count: float = Field(default=0, validation_alias=AliasChoices("source_count", "sourceCount"))
    first_seen_at: int | float | str | datetime | None = Field(
        default=None, validation_alias=AliasChoices("first_seen_at", "firstSeenAt")
    )
    last_confirmed_at: int | float | str | datetime | None = Field(
        default=None, validation_alias=AliasChoices("last_confirmed_at", "lastConfirmedAt")
    )
    quality_score: float | None = Field(
        default=None, validation_alias=AliasChoices("quality_score", "qualityScore")
    )
    evidence_text: str | None = Field(
        default=None, validation_alias=AliasChoices("evidence_text", "evidenceText")
    )

    @field_validator("signal_count", "source_count", mode="before")
    @classmethod
    def _count(cls, v: Any) -> float:
        return _number(v)

    @field_validator("first_seen_at", "last_confirmed_at", mode="before")
    @classmethod
    def _ts(cls, v: Any):
        return _timestamp(v)

    @field_validator("quality_score", mode="before")
    @classmethod
    def _quality(cls, v: Any) -> float | None:
        return _number(v) if v is not None else None

    @field_validator("evidence_text", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _str_or_none(v)


def to_raw_item(payload: Any) -> RawItem:
    p = RawItemPayload.model_validate(payload)
    return RawItem(
        source=p.source,
        title=p.title,
        id=p.id,
        summary=p.summary,
        keywords=tuple(p.keywords),
        created_at=p.created_at,
        url=p.url,
        category=p.category,
        weight=p.weight,
    )


def to_candidate_from_payload(payload: Any) -> MomentCandidate:
    p = CandidatePayload.model_validate(payload)
    signals = tuple(
        Signal(
            source=s.source or "unknown",
            id=s.id,
            created_at=s.created_at,
            title=s.title,
            summary=s.summary,
            keywords=tuple(s.keywords),
        )
        for s in p.signals
    )
    return MomentCandidate(
        id=p.id,
        signals=signals,
        title=p.title,
        description=p.description,
        keywords=tuple(p.keywords) if p.keywords is not None else None,
        first_seen_at=p.first_seen_at,
        collapsed_from_ids=tuple(p.collapsed_from_ids) if p.collapsed_from_ids is not None else None,
    )


def to_decision_inputs(payload: Any) -> DecisionInputs:
    p = DecisionInputsPayload.model_validate(payload)
    return DecisionInputs(
        signal_count=int(p.signal_count),
        source_count=int(p.source_count),
        first_seen_at=p.first_seen_at,
        last_confirmed_at=p.last_confirmed_at,
        quality_score=p.quality_score,
        evidence_text=p.evidence_text,
    )


class ScoreReport(BaseModel):
    signal_density: float
    velocity: float
    narrative_coherence: float
    cultural_legibility: float
    overall: float


class MomentReport(BaseModel):
    moment_id: str
    name: str
    passed: bool
    reasons: list[str]
    maturity: str | None = None
    score: ScoreReport
    sources: list[str]
    signal_count: int
    decision_state: str
    confidence_trajectory: str
    signal_strength: str
    decision_rationale: str
    health: str | None = None
    stored: bool = False


class RunReport(BaseModel):
    trace_id: str
    latency_ms: float
    item_count: int
    cluster_count: int
    qualified_count: int
    failed_sources: list[str]
    moments: list[MomentReport]
