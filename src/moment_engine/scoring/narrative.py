"""Narrative coherence: do the phrases describing a moment tell one story?

score = (0.50 * overlap + 0.35 * compression) * noise_penalty * keyword_boost
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from moment_engine.scoring.bounds import clamp, clamp01
from moment_engine.similarity.jaccard import intersection_size, jaccard
from moment_engine.text.tokenizer import normalize, token_set

MIN_PHRASE_TOKENS = 3
CORE_SHARE = 0.35
MAX_CORE_TOKENS = 12
NOISE_KNEE = 0.35


@dataclass(frozen=True)
class NarrativeResult:
    score: float
    core_tokens: tuple[str, ...] = ()
    total_tokens: int = 0
    unique_tokens: int = 0
    noise_ratio: float = 1.0
    avg_pairwise_jaccard: float = 0.0


def _phrase_sets(phrases: Iterable) -> list[frozenset[str]]:
    out = []
    for p in phrases or []:
        if not isinstance(p, str) or not p:
            continue
        tokens = token_set(p)
        if len(tokens) >= MIN_PHRASE_TOKENS:
            out.append(frozenset(tokens))
    return out


def average_pairwise_jaccard(sets: Sequence[frozenset[str]]) -> float:
    n = len(sets)
    if n < 2:
        return 0.0
    total = 0.0
    count = 0
    for i in range(n):
        for j in range(i + 1, n):
            total += jaccard(sets[i], sets[j])
            count += 1
    return total / count


def _keyword_tokens(keywords: Iterable) -> set[str]:
    # Keywords may arrive pre-normalized (cluster centroids) or as raw text.
    out: set[str] = set()
    for k in keywords:
        if not isinstance(k, str):
            continue
        raw = k.strip().lower()
        if raw:
            out.add(raw)
        out.update(normalize(k))
    return out


def score_narrative_coherence(
    phrases: Iterable[str], keywords: Iterable[str] | None = None
) -> NarrativeResult:
    # Materialize once; callers may hand us generators.
    phrase_list = list(phrases or [])
    sets = _phrase_sets(phrase_list)
    if not sets:
        return NarrativeResult(score=0.0)

    # Iterate phrases in order so equal counts keep first-seen order.
    freq: dict[str, int] = {}
    for p in phrase_list:
        if not isinstance(p, str):
            continue
        tokens = token_set(p)
        if len(tokens) < MIN_PHRASE_TOKENS:
            continue
        for tok in tokens:
            freq[tok] = freq.get(tok, 0) + 1

    total_tokens = sum(freq.values())
    unique_tokens = len(freq)
    noise_ratio = unique_tokens / total_tokens if total_tokens else 1.0

    min_occur = max(2, math.ceil(len(sets) * CORE_SHARE))
    ranked = sorted(((t, c) for t, c in freq.items() if c >= min_occur), key=lambda tc: -tc[1])
    core = [t for t, _ in ranked[:MAX_CORE_TOKENS]]

    avg_jaccard = average_pairwise_jaccard(sets)
    overlap = clamp01(avg_jaccard)
    compression = clamp01(len(core) / clamp(unique_tokens, 4, 12))
    noise_penalty = clamp01(0.25 + 0.75 * clamp01(1 - (noise_ratio - NOISE_KNEE)))

    keyword_boost = 1.0
    kw_list = list(keywords) if keywords else []
    if kw_list and core:
        hits = intersection_size(_keyword_tokens(kw_list), set(core))
        keyword_boost = 0.90 + 0.10 * clamp01(hits / clamp(len(core), 3, 8))

    score = clamp01((0.50 * overlap + 0.35 * compression) * noise_penalty * keyword_boost)
    return NarrativeResult(
        score=score,
        core_tokens=tuple(core),
        total_tokens=total_tokens,
        unique_tokens=unique_tokens,
        noise_ratio=clamp01(noise_ratio),
        avg_pairwise_jaccard=avg_jaccard,
    )
