"""Tests for the quality gate and qualify_moment."""

from dataclasses import replace

import pytest

from moment_engine.config.settings import Settings
from moment_engine.exceptions import ConfigurationError
from moment_engine.models.domain import (
    Maturity,
    MomentCandidate,
    QualifyOptions,
    QualityScore,
    QualityThresholds,
    QualityWeights,
    Signal,
)
from moment_engine.qualification import qualify as qualify_module
from moment_engine.qualification.gate import (
    ComponentScores,
    classify_maturity,
    compute_overall_score,
    evaluate_against_thresholds,
)
from moment_engine.qualification.qualify import (
    MomentQualifier,
    extract_keywords,
    extract_phrases,
    qualify_moment,
)
from moment_engine.scoring.reason_codes import ReasonCode


def _score(**overrides):
    base = dict(
        signal_density=1.0,
        velocity=1.0,
        narrative_coherence=1.0,
        cultural_legibility=1.0,
        overall=1.0,
    )
    base.update(overrides)
    return QualityScore(**base)


class TestOverallScore:
    def test_all_ones(self):
        assert compute_overall_score(ComponentScores(1, 1, 1, 1)) == pytest.approx(1.0)

    def test_weights_are_renormalized(self):
        weights = QualityWeights(signal_density=2, velocity=0, narrative_coherence=0, cultural_legibility=0)
        assert compute_overall_score(ComponentScores(0.4, 1, 1, 1), weights) == pytest.approx(0.4)

    def test_zero_weights(self):
        weights = QualityWeights(0, 0, 0, 0)
        assert compute_overall_score(ComponentScores(1, 1, 1, 1), weights) == 0.0

    def test_components_are_clamped(self):
        score = compute_overall_score(ComponentScores(5, -1, float("nan"), 1))
        assert 0.0 <= score <= 1.0
        assert score == pytest.approx(0.28 + 0.22)


class TestThresholds:
    def test_all_pass(self):
        passed, reasons = evaluate_against_thresholds(_score(), QualityThresholds(), 3, 6)
        assert passed
        assert reasons == []

    def test_exact_threshold_passes(self):
        t = QualityThresholds()
        score = _score(signal_density=t.min_signal_density, overall=t.min_overall)
        passed, _ = evaluate_against_thresholds(score, t, t.min_unique_sources, t.min_total_signals)
        assert passed

    def test_reason_order(self):
        zero = _score(
            signal_density=0, velocity=0, narrative_coherence=0, cultural_legibility=0, overall=0
        )
        passed, reasons = evaluate_against_thresholds(zero, None, 0, 0)
        assert not passed
        assert reasons == [
            ReasonCode.FAIL_SINGLE_SOURCE,
            ReasonCode.FAIL_LOW_SIGNAL_COUNT,
            ReasonCode.FAIL_LOW_SIGNAL_DENSITY,
            ReasonCode.FAIL_LOW_VELOCITY,
            ReasonCode.FAIL_LOW_COHERENCE,
            ReasonCode.FAIL_LOW_LEGIBILITY,
            ReasonCode.FAIL_LOW_OVERALL,
        ]


@pytest.mark.parametrize(
    "velocity,signals,expected",
    [
        (0.7, 3, Maturity.EMERGING),
        (0.6, 8, Maturity.FORMING),
        (0.4, 15, Maturity.ESTABLISHED),
        (0.2, 3, Maturity.EXPIRED),
        (0.5, 3, Maturity.FORMING),
        (0.3, 8, Maturity.EXPIRED),
    ],
)
def test_classify_maturity(velocity, signals, expected):
    assert classify_maturity(velocity, signals) == expected


def test_extract_phrases_order_and_cap():
    candidate = MomentCandidate(
        id="m",
        title="  Title  ",
        description="",
        signals=tuple(Signal(source="hn", title=f"t{i}", summary=f"s{i}") for i in range(20)),
    )
    phrases = extract_phrases(candidate)
    assert phrases[:3] == ["Title", "t0", "s0"]
    assert len(phrases) == 18


def test_extract_keywords_prefers_candidate():
    candidate = MomentCandidate(
        id="m",
        keywords=("a",),
        signals=(Signal(source="hn", keywords=("b",)),),
    )
    assert extract_keywords(candidate) == ["a"]


def test_extract_keywords_from_signals():
    candidate = MomentCandidate(
        id="m",
        signals=(Signal(source="hn", keywords=("b", " ", "c")),),
    )
    assert extract_keywords(candidate) == ["b", "c"]
    assert extract_keywords(MomentCandidate(id="m")) is None


class TestQualifyMoment:
    def test_single_source_fails(self, single_source_candidate):
        q = qualify_moment(single_source_candidate)
        assert not q.passed
        assert q.reasons[0] == ReasonCode.FAIL_SINGLE_SOURCE
        assert ReasonCode.FAIL_LOW_COHERENCE in q.reasons
        assert q.score.signal_density == pytest.approx(0.0875)
        assert q.score.narrative_coherence == 0.0
        assert q.maturity is None

    def test_maturity_on_fail(self, single_source_candidate):
        q = qualify_moment(single_source_candidate, QualifyOptions(compute_maturity_on_fail=True))
        assert not q.passed
        assert q.maturity == Maturity.EMERGING

    def test_burst_fails_default_density(self, burst_candidate):
        q = qualify_moment(burst_candidate)
        assert not q.passed
        assert ReasonCode.FAIL_LOW_SIGNAL_DENSITY in q.reasons
        assert ReasonCode.FAIL_SINGLE_SOURCE not in q.reasons
        assert ReasonCode.FAIL_LOW_VELOCITY not in q.reasons

    def test_burst_passes_open_thresholds(self, burst_candidate, open_thresholds):
        q = qualify_moment(burst_candidate, QualifyOptions(thresholds=open_thresholds))
        assert q.passed
        assert q.reasons == ()
        assert q.maturity == Maturity.FORMING
        assert q.explain.unique_sources == ("devto", "hn", "lobsters", "reddit")
        assert q.explain.total_signals == 8

    def test_raised_velocity_floor(self, burst_candidate, open_thresholds):
        thresholds = replace(open_thresholds, min_velocity=0.99)
        q = qualify_moment(burst_candidate, QualifyOptions(thresholds=thresholds))
        assert not q.passed
        assert q.reasons == (ReasonCode.FAIL_LOW_VELOCITY,)

    def test_empty_candidate(self):
        q = qualify_moment(MomentCandidate(id="empty"))
        assert not q.passed
        assert q.score.overall == 0.0
        assert ReasonCode.FAIL_LOW_SIGNAL_COUNT in q.reasons

    def test_explain_carries_candidate_metadata(self, burst_candidate):
        candidate = replace(
            burst_candidate,
            first_seen_at="2025-03-09T16:00:00.000Z",
            collapsed_from_ids=("moment:old",),
        )
        q = qualify_moment(candidate)
        assert q.explain.first_seen_at == "2025-03-09T16:00:00.000Z"
        assert q.explain.collapsed_from_ids == ("moment:old",)

    def test_deterministic(self, burst_candidate):
        assert qualify_moment(burst_candidate) == qualify_moment(burst_candidate)

    def test_scores_bounded(self, burst_candidate, single_source_candidate):
        for candidate in (burst_candidate, single_source_candidate):
            s = qualify_moment(candidate).score
            for value in (s.signal_density, s.velocity, s.narrative_coherence, s.cultural_legibility, s.overall):
                assert 0.0 <= value <= 1.0

    def test_internal_error_is_reported(self, burst_candidate, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(qualify_module, "score_velocity", boom)
        q = qualify_moment(burst_candidate)
        assert not q.passed
        assert q.reasons == (ReasonCode.FAIL_EVALUATION_ERROR,)
        assert q.score.overall == 0.0
        assert q.explain is None


class TestMomentQualifier:
    def test_uses_settings(self, burst_candidate):
        qualifier = MomentQualifier(
            Settings(
                min_overall=0,
                min_signal_density=0,
                min_velocity=0,
                min_narrative_coherence=0,
                min_cultural_legibility=0,
            )
        )
        assert qualifier.options.thresholds.min_unique_sources == 2
        assert qualifier.qualify(burst_candidate).passed

    def test_negative_weight_rejected(self):
        with pytest.raises(ConfigurationError):
            MomentQualifier(Settings(w_velocity=-0.1))

    def test_negative_threshold_rejected(self):
        with pytest.raises(ConfigurationError):
            MomentQualifier(Settings(min_total_signals=-1))
