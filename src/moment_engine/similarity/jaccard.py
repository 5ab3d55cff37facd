"""Jaccard similarity between token sets."""

from __future__ import annotations

from collections.abc import Iterable


def intersection_size(a: set[str] | frozenset[str], b: set[str] | frozenset[str]) -> int:
    small, large = (a, b) if len(a) <= len(b) else (b, a)
    return sum(1 for tok in small if tok in large)


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    """|A∩B| / |A∪B|. Two empty sets are identical (1.0); one empty set shares nothing."""
    sa = a if isinstance(a, (set, frozenset)) else set(a)
    sb = b if isinstance(b, (set, frozenset)) else set(b)
    if not sa and not sb:
        return 1.0
    if not sa or not sb:
        return 0.0
    inter = intersection_size(sa, sb)
    return inter / (len(sa) + len(sb) - inter)
