"""Tests for Pydantic payload schemas and boundary converters."""

import pytest
from pydantic import ValidationError

from moment_engine.models.schemas import (
    MomentReport,
    RunReport,
    ScoreReport,
    to_candidate_from_payload,
    to_decision_inputs,
    to_raw_item,
)


def test_raw_item_defaults():
    item = to_raw_item({})
    assert item.source == "unknown"
    assert item.title == ""
    assert item.keywords == ()
    assert item.weight == 0.0


def test_raw_item_aliases():
    item = to_raw_item(
        {
            "source": " reddit ",
            "title": "  Native vector search lands  ",
            "description": "Summary text",
            "createdAtISO": "2025-03-10T11:00:00Z",
            "score": "42",
            "keywords": "postgres, vector ,",
            "unexpected": "ignored",
        }
    )
    assert item.source == "reddit"
    assert item.title == "Native vector search lands"
    assert item.summary == "Summary text"
    assert item.created_at == "2025-03-10T11:00:00Z"
    assert item.weight == 42.0
    assert item.keywords == ("postgres", "vector")


def test_raw_item_malformed_fields_degrade():
    item = to_raw_item(
        {"title": 123, "id": 7, "weight": "lots", "created_at": {"bad": True}, "keywords": [1, "ok"]}
    )
    assert item.title == ""
    assert item.id == "7"
    assert item.weight == 0.0
    assert item.created_at is None
    assert item.keywords == ("ok",)


def test_raw_item_rejects_non_mapping():
    with pytest.raises(ValidationError):
        to_raw_item("not a dict")


def test_candidate_payload():
    candidate = to_candidate_from_payload(
        {
            "id": "moment:x",
            "title": "Vector search",
            "firstSeenAt": "2025-03-10T09:00:00.000Z",
            "collapsedFromIds": ["moment:y"],
            "signals": [
                {"source": "hn", "id": 1, "createdAt": 1741600800000, "title": "A"},
                "garbage",
                {"title": "no source"},
            ],
        }
    )
    assert candidate.id == "moment:x"
    assert candidate.first_seen_at == "2025-03-10T09:00:00.000Z"
    assert candidate.collapsed_from_ids == ("moment:y",)
    assert candidate.keywords is None
    assert len(candidate.signals) == 2
    assert candidate.signals[0].id == "1"
    assert candidate.signals[0].created_at == 1741600800000
    assert candidate.signals[1].source == "unknown"


def test_candidate_payload_empty_keywords_kept():
    candidate = to_candidate_from_payload({"id": "m", "keywords": []})
    assert candidate.keywords == ()


def test_decision_inputs_payload():
    inputs = to_decision_inputs(
        {"signalCount": "12", "sourceCount": 3.9, "lastConfirmedAt": "2025-03-10T11:50:00Z", "qualityScore": None}
    )
    assert inputs.signal_count == 12
    assert inputs.source_count == 3
    assert inputs.first_seen_at is None
    assert inputs.last_confirmed_at == "2025-03-10T11:50:00Z"
    assert inputs.quality_score is None


def test_decision_inputs_bad_counts():
    inputs = to_decision_inputs({"signal_count": None, "source_count": float("inf")})
    assert inputs.signal_count == 0
    assert inputs.source_count == 0


def test_run_report_serialization():
    report = RunReport(
        trace_id="abc123",
        latency_ms=12.5,
        item_count=3,
        cluster_count=2,
        qualified_count=1,
        failed_sources=["slow"],
        moments=[
            MomentReport(
                moment_id="moment:x",
                name="Vector search",
                passed=True,
                reasons=[],
                maturity="forming",
                score=ScoreReport(
                    signal_density=0.6,
                    velocity=0.7,
                    narrative_coherence=0.6,
                    cultural_legibility=0.8,
                    overall=0.7,
                ),
                sources=["hn", "reddit"],
                signal_count=4,
                decision_state="WAIT",
                confidence_trajectory="STABLE",
                signal_strength="MODERATE",
                decision_rationale="...",
            )
        ],
    )
    data = report.model_dump()
    assert data["failed_sources"] == ["slow"]
    assert data["moments"][0]["stored"] is False
    assert data["moments"][0]["health"] is None
