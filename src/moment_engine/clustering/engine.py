"""Greedy two-pass clustering of raw items into moment candidates.

Pass 1 assigns each item, in arrival order, to the existing cluster whose
centroid (top-N tokens by count) it overlaps most, provided the Jaccard
similarity clears the merge threshold. The algorithm is online and
order-dependent: clusters are never split and reordering the input can change
the output.

Pass 2 walks the ranked pass-1 clusters and folds each one into an earlier
output cluster when their centroids overlap strongly, which undoes most of the
fragmentation pass 1 produces. With `same_category` both passes only compare
clusters of the same category.
"""

from __future__ import annotations

import hashlib
import math
from collections.abc import Iterable
from dataclasses import dataclass

from moment_engine.clustering.categories import classify_category, hostname_from_url
from moment_engine.config.constants import DEFAULT_CATEGORY
from moment_engine.models.domain import RawItem
from moment_engine.observability.logger import get_logger
from moment_engine.similarity.jaccard import jaccard
from moment_engine.text.sources import canonical_source
from moment_engine.text.tokenizer import token_set

logger = get_logger("clustering")

DEFAULT_MERGE_THRESHOLD = 0.22
DEFAULT_NEAR_DUPLICATE_THRESHOLD = 0.55
DEFAULT_CENTROID_SIZE = 12


@dataclass(frozen=True)
class ClusterItem:
    raw: RawItem
    source: str
    tokens: tuple[str, ...]
    category: str
    weight: float

    @classmethod
    def from_raw(cls, raw: RawItem) -> ClusterItem:
        title = raw.title if isinstance(raw.title, str) else ""
        keywords = " ".join(k for k in raw.keywords if isinstance(k, str))
        tokens = token_set(f"{title} {hostname_from_url(raw.url)} {keywords}")
        category = raw.category or classify_category(title, raw.url)
        source = canonical_source(raw.source) if isinstance(raw.source, str) else "unknown"
        try:
            weight = float(raw.weight)
        except (TypeError, ValueError):
            weight = 0.0
        if not math.isfinite(weight):
            weight = 0.0
        return cls(raw=raw, source=source, tokens=tuple(tokens), category=category, weight=weight)


class Cluster:
    """Mutable aggregate grown by add_member. Treat as frozen once returned."""

    def __init__(self, category: str = DEFAULT_CATEGORY) -> None:
        self.category = category
        self.items: list[ClusterItem] = []
        self.token_counts: dict[str, int] = {}
        self.sources: dict[str, int] = {}
        self.categories: dict[str, int] = {}
        self.weight_max = 0.0
        self.collapsed_from: list[str] = []

    def add_member(self, item: ClusterItem) -> None:
        self.items.append(item)
        for tok in item.tokens:
            self.token_counts[tok] = self.token_counts.get(tok, 0) + 1
        self.sources[item.source] = self.sources.get(item.source, 0) + 1
        self.categories[item.category] = self.categories.get(item.category, 0) + 1
        self.weight_max = max(self.weight_max, item.weight)

    def centroid(self, n: int = DEFAULT_CENTROID_SIZE) -> list[str]:
        # sorted() is stable over insertion order, so ties keep first-seen order
        ranked = sorted(self.token_counts.items(), key=lambda kv: -kv[1])
        return [tok for tok, _ in ranked[:n]]

    def dominant_category(self) -> str:
        if not self.categories:
            return self.category
        return sorted(self.categories.items(), key=lambda kv: -kv[1])[0][0]

    def key(self) -> str:
        """Stable id from category, top tokens and source set."""
        seed = "|".join(
            [
                self.dominant_category(),
                ",".join(self.centroid(8)),
                "+".join(sorted(self.sources)),
            ]
        )
        return f"moment:{hashlib.sha1(seed.encode('utf-8')).hexdigest()[:12]}"

    def copy(self) -> Cluster:
        c = Cluster(self.category)
        for item in self.items:
            c.add_member(item)
        c.collapsed_from = list(self.collapsed_from)
        return c

    def absorb(self, other: Cluster) -> None:
        self.collapsed_from.append(other.key())
        self.collapsed_from.extend(other.collapsed_from)
        for item in other.items:
            self.add_member(item)

    @property
    def size(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        return (
            f"Cluster(category={self.category!r}, size={self.size}, "
            f"sources={self.sources!r}, centroid={self.centroid(4)!r})"
        )


def rank_key(c: Cluster) -> tuple[int, float, int]:
    """More distinct sources, then higher max weight, then more members."""
    return (-len(c.sources), -c.weight_max, -len(c.items))


def max_clusters_for(n_items: int, floor: int = 6, ceiling: int = 10) -> int:
    return max(floor, min(ceiling, math.ceil(max(0, n_items) / 3)))


def _as_cluster_items(items: Iterable[RawItem | ClusterItem]) -> list[ClusterItem]:
    out: list[ClusterItem] = []
    for it in items:
        if isinstance(it, ClusterItem):
            out.append(it)
        elif isinstance(it, RawItem):
            out.append(ClusterItem.from_raw(it))
    return out


def cluster(
    items: Iterable[RawItem | ClusterItem],
    max_clusters: int,
    *,
    merge_threshold: float = DEFAULT_MERGE_THRESHOLD,
    centroid_size: int = DEFAULT_CENTROID_SIZE,
    same_category: bool = False,
) -> list[Cluster]:
    """Pass 1: greedy assignment, then rank and cap to max_clusters."""
    clusters: list[Cluster] = []

    for item in _as_cluster_items(items or []):
        best_idx = -1
        best_sim = 0.0
        # A token-less item has nothing to compare and always stands alone.
        if item.tokens:
            for i, c in enumerate(clusters):
                if same_category and c.category != item.category:
                    continue
                sim = jaccard(item.tokens, c.centroid(centroid_size))
                if sim > best_sim:
                    best_sim = sim
                    best_idx = i

        if best_idx >= 0 and best_sim >= merge_threshold:
            clusters[best_idx].add_member(item)
        else:
            c = Cluster(category=item.category)
            c.add_member(item)
            clusters.append(c)

    clusters.sort(key=rank_key)
    capped = clusters[: max(0, max_clusters)]
    logger.debug("clusters_assigned", formed=len(clusters), kept=len(capped))
    return capped


def merge_near_duplicates(
    clusters: Iterable[Cluster],
    *,
    threshold: float = DEFAULT_NEAR_DUPLICATE_THRESHOLD,
    centroid_size: int = DEFAULT_CENTROID_SIZE,
    max_clusters: int | None = None,
    same_category: bool = False,
) -> list[Cluster]:
    """Pass 2: fold near-duplicate clusters into earlier ones.

    Input clusters are copied, never mutated.
    """
    out: list[Cluster] = []
    merged = 0

    for c in clusters or []:
        c_centroid = c.centroid(centroid_size)
        c_category = c.dominant_category()
        target = None
        for existing in out:
            if same_category and existing.dominant_category() != c_category:
                continue
            if jaccard(c_centroid, existing.centroid(centroid_size)) >= threshold:
                target = existing
                break
        if target is None:
            out.append(c.copy())
        else:
            target.absorb(c)
            merged += 1

    out.sort(key=rank_key)
    if max_clusters is not None:
        out = out[: max(0, max_clusters)]
    if merged:
        logger.debug("near_duplicates_merged", merged=merged, remaining=len(out))
    return out


def build_clusters(
    items: Iterable[RawItem | ClusterItem],
    *,
    max_clusters: int | None = None,
    merge_threshold: float = DEFAULT_MERGE_THRESHOLD,
    near_duplicate_threshold: float = DEFAULT_NEAR_DUPLICATE_THRESHOLD,
    centroid_size: int = DEFAULT_CENTROID_SIZE,
    same_category: bool = False,
) -> list[Cluster]:
    """Run both passes with a shared cap (derived from the item count when omitted)."""
    prepared = _as_cluster_items(items or [])
    cap = max_clusters if max_clusters is not None else max_clusters_for(len(prepared))
    first = cluster(
        prepared,
        cap,
        merge_threshold=merge_threshold,
        centroid_size=centroid_size,
        same_category=same_category,
    )
    return merge_near_duplicates(
        first,
        threshold=near_duplicate_threshold,
        centroid_size=centroid_size,
        max_clusters=cap,
        same_category=same_category,
    )
