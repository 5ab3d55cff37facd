"""Evidence breadth: score = diversity * (0.25 + 0.75 * clamp(1 - (dominance - 0.25)))."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from moment_engine.scoring.bounds import clamp01
from moment_engine.text.sources import canonical_source


@dataclass(frozen=True)
class SignalDensityResult:
    score: float
    unique_sources: tuple[str, ...] = ()
    unique_sources_count: int = 0
    total_signals: int = 0
    by_source: dict[str, int] = field(default_factory=dict)


def _dedupe(signals: Iterable) -> list[tuple[str, str]]:
    out: list[tuple[str, str]] = []
    seen: set[tuple[str, str]] = set()
    for i, s in enumerate(signals or []):
        source = getattr(s, "source", None)
        if not isinstance(source, str):
            continue
        source = canonical_source(source)
        raw_id = getattr(s, "id", None)
        sid = str(raw_id).strip() if raw_id is not None else ""
        key = (source, sid or f"idx:{i}")
        if key in seen:
            continue
        seen.add(key)
        out.append(key)
    return out


def score_signal_density(signals: Iterable) -> SignalDensityResult:
    """Reward evidence spread across many sources; punish one source dominating."""
    normalized = _dedupe(signals)
    total = len(normalized)
    if total == 0:
        return SignalDensityResult(score=0.0)

    by_source: dict[str, int] = {}
    for source, _ in normalized:
        by_source[source] = by_source.get(source, 0) + 1

    unique = tuple(sorted(by_source))
    diversity = clamp01(len(unique) / total)
    dominance = clamp01(max(by_source.values()) / total)
    penalty = clamp01(0.25 + 0.75 * clamp01(1 - (dominance - 0.25)))

    return SignalDensityResult(
        score=clamp01(diversity * penalty),
        unique_sources=unique,
        unique_sources_count=len(unique),
        total_signals=total,
        by_source=by_source,
    )
