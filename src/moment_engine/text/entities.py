"""Proper-noun style entity extraction from titles."""

from __future__ import annotations

import re
from collections.abc import Iterable

from moment_engine.config.constants import STOPWORDS

_WORD_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9+.\-]*[A-Za-z0-9+]")
_HN_PREFIX_RE = re.compile(r"^(show|ask|launch|tell)\s+hn\s*:\s*", re.IGNORECASE)


def _is_entity(word: str, position: int) -> bool:
    if word.isupper() and any(c.isalpha() for c in word):
        return True
    if any(c.isupper() for c in word[1:]):
        return True
    # Capitalized words count unless they only start the sentence.
    return position > 0 and word[0].isupper()


def extract_entities(text: str | None) -> list[str]:
    """Capitalized, camel-case and all-caps words, lowercased, first-seen order."""
    if not isinstance(text, str):
        return []
    text = _HN_PREFIX_RE.sub("", text.strip())
    out: dict[str, None] = {}
    for i, m in enumerate(_WORD_RE.finditer(text)):
        word = m.group(0)
        if len(word) < 2 or not _is_entity(word, i):
            continue
        key = word.lower()
        if key not in STOPWORDS:
            out[key] = None
    return list(out)


def anchor_entities(texts: Iterable[str | None], limit: int = 8) -> list[str]:
    """Most frequent entities across texts; ties keep first-seen order."""
    counts: dict[str, int] = {}
    for t in texts:
        for e in extract_entities(t):
            counts[e] = counts.get(e, 0) + 1
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return [e for e, _ in ranked[:limit]]
