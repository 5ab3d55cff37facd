"""Display naming for clusters and conversion into moment candidates."""

from __future__ import annotations

import re

from moment_engine.clustering.engine import DEFAULT_CENTROID_SIZE, Cluster, ClusterItem
from moment_engine.config.constants import CATEGORY_LABELS, GENERIC_MOMENT_NAMES
from moment_engine.models.domain import MomentCandidate, Signal
from moment_engine.models.timestamps import to_epoch_ms, to_iso
from moment_engine.scoring.bounds import clamp01
from moment_engine.similarity.jaccard import jaccard

MAX_NAME_LENGTH = 80
MIN_SPECIFIC_NAME_LENGTH = 12

_HN_PREFIX_RE = re.compile(r"^(show\s+hn|ask\s+hn|launch\s+hn)\s*:\s*", re.IGNORECASE)
_OWN_PREFIX_RE = re.compile(
    r"^(ai|security|devtools|web|data|mobile|startup|tech|emerging)\s+moment\s*:\s*",
    re.IGNORECASE,
)
_WS_RE = re.compile(r"\s+")


def clean_name(raw: str | None) -> str:
    t = raw.strip() if isinstance(raw, str) else ""
    t = _HN_PREFIX_RE.sub("", t)
    t = _OWN_PREFIX_RE.sub("", t)
    t = _WS_RE.sub(" ", t).strip()
    if len(t) > MAX_NAME_LENGTH:
        t = f"{t[:MAX_NAME_LENGTH - 3]}…"
    return t


def is_generic_name(name: str | None) -> bool:
    n = (name or "").lower().strip()
    if len(n) < MIN_SPECIFIC_NAME_LENGTH:
        return True
    return any(n.startswith(g) for g in GENERIC_MOMENT_NAMES)


def representative_item(c: Cluster, centroid_size: int = DEFAULT_CENTROID_SIZE) -> ClusterItem | None:
    """Weight desc, then similarity to centroid desc, then shorter cleaned title."""
    if not c.items:
        return None
    cent = c.centroid(centroid_size)

    def rank(item: ClusterItem) -> tuple[float, float, int]:
        return (-item.weight, -jaccard(item.tokens, cent), len(clean_name(item.raw.title)))

    return sorted(c.items, key=rank)[0]


def fallback_name(c: Cluster) -> str:
    head = " ".join(c.centroid(3))
    if not head:
        return "Emerging moment"
    label = CATEGORY_LABELS.get(c.dominant_category(), "Tech")
    return f"{label} moment: {head}"


def cluster_name(c: Cluster, centroid_size: int = DEFAULT_CENTROID_SIZE) -> str:
    """Representative member title, or a token-derived label when it is generic."""
    rep = representative_item(c, centroid_size)
    name = clean_name(rep.raw.title) if rep else ""
    if name and not is_generic_name(name):
        return name
    return fallback_name(c)


def cluster_cohesion(c: Cluster, centroid_size: int = DEFAULT_CENTROID_SIZE) -> float:
    """Mean Jaccard of each tokenized member against the centroid."""
    cent = c.centroid(centroid_size)
    if not cent or not c.items:
        return 0.0
    sims = [jaccard(it.tokens, cent) for it in c.items if it.tokens]
    return clamp01(sum(sims) / len(sims)) if sims else 0.0


def time_bounds(c: Cluster) -> tuple[float | None, float | None]:
    """Earliest and latest parseable member timestamps in epoch millis."""
    stamps = [ms for ms in (to_epoch_ms(it.raw.created_at) for it in c.items) if ms is not None]
    if not stamps:
        return None, None
    return min(stamps), max(stamps)


def to_candidate(c: Cluster, centroid_size: int = DEFAULT_CENTROID_SIZE) -> MomentCandidate:
    signals = tuple(
        Signal(
            source=it.source,
            id=it.raw.id,
            created_at=it.raw.created_at,
            title=it.raw.title,
            summary=it.raw.summary,
            keywords=it.raw.keywords,
        )
        for it in c.items
    )
    first, _ = time_bounds(c)
    return MomentCandidate(
        id=c.key(),
        signals=signals,
        title=cluster_name(c, centroid_size),
        keywords=tuple(c.centroid(10)),
        first_seen_at=to_iso(first),
        collapsed_from_ids=tuple(c.collapsed_from) or None,
    )
