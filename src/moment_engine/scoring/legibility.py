"""Human legibility: could a non-specialist read this moment at a glance?"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from moment_engine.config.constants import JARGON
from moment_engine.scoring.bounds import clamp01

MAX_PHRASES = 6
MAX_COMBINED_CHARS = 240
LONG_WORD_LENGTH = 10

_WS_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^A-Za-z0-9-]")
_ALL_CAPS_RE = re.compile(r"^[A-Z0-9-]+$")
_HAS_UPPER_RE = re.compile(r"[A-Z]")
_HAS_DIGIT_RE = re.compile(r"\d")


@dataclass(frozen=True)
class LegibilityResult:
    score: float
    char_len: int = 0
    word_count: int = 0
    avg_word_len: float = 0.0
    long_word_ratio: float = 1.0
    all_caps_ratio: float = 1.0
    digit_ratio: float = 1.0
    jargon_hits: int = 0
    jargon_ratio: float = 0.0


def compact_text(s: str) -> str:
    return _WS_RE.sub(" ", s).strip()[:MAX_COMBINED_CHARS]


def _words(s: str) -> list[str]:
    out = []
    for raw in s.split():
        w = _NON_WORD_RE.sub("", raw)
        if w:
            out.append(w)
    return out


def _is_all_caps(w: str) -> bool:
    return bool(_ALL_CAPS_RE.match(w) and _HAS_UPPER_RE.search(w))


def length_score(word_count: int, char_len: int) -> float:
    if word_count < 4:
        wc = 0.20
    elif word_count < 8:
        wc = 0.55
    elif word_count <= 22:
        wc = 1.0
    elif word_count <= 30:
        wc = 0.75
    else:
        wc = 0.45
    char_penalty = 1.0 if char_len <= 160 else clamp01(1 - (char_len - 160) / 200)
    return clamp01(wc * (0.70 + 0.30 * char_penalty))


def jargon_hits(words: list[str]) -> int:
    hits = sum(1 for w in words if w.lower() in JARGON)
    acronyms = sum(1 for w in words if len(w) >= 2 and _is_all_caps(w))
    if acronyms >= 4:
        hits += 2
    if acronyms >= 6:
        hits += 3
    return hits


def score_cultural_legibility(text: str | None, phrases: Iterable[str] | None = None) -> LegibilityResult:
    base = text.strip() if isinstance(text, str) else ""
    extra = [p for p in (phrases or []) if isinstance(p, str) and p.strip()][:MAX_PHRASES]
    combined = compact_text(" | ".join(p for p in [base, *extra] if p))

    words = _words(combined)
    char_len = len(combined)
    n = len(words)
    if n == 0:
        return LegibilityResult(score=0.0, char_len=char_len)

    avg_len = sum(len(w) for w in words) / n
    long_ratio = sum(1 for w in words if len(w) >= LONG_WORD_LENGTH) / n
    caps_ratio = sum(1 for w in words if len(w) >= 2 and _is_all_caps(w)) / n
    digit_ratio = sum(1 for w in words if _HAS_DIGIT_RE.search(w)) / n
    hits = jargon_hits(words)
    jargon_ratio = hits / n

    complexity = clamp01(1 - (0.65 * long_ratio + 0.75 * jargon_ratio))
    soup = clamp01(1 - (0.70 * caps_ratio + 0.40 * digit_ratio))
    vocab = clamp01(1.15 - avg_len / 8)

    score = clamp01(
        (0.45 * length_score(n, char_len) + 0.35 * complexity + 0.20 * soup) * (0.80 + 0.20 * vocab)
    )
    return LegibilityResult(
        score=score,
        char_len=char_len,
        word_count=n,
        avg_word_len=round(avg_len, 2),
        long_word_ratio=round(long_ratio, 3),
        all_caps_ratio=round(caps_ratio, 3),
        digit_ratio=round(digit_ratio, 3),
        jargon_hits=hits,
        jargon_ratio=round(jargon_ratio, 3),
    )
