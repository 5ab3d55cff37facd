"""Source tag canonicalization."""

from __future__ import annotations

from moment_engine.config.constants import SOURCE_ALIASES


def canonical_source(source: str) -> str:
    s = source.strip().lower()
    return SOURCE_ALIASES.get(s, s)
