"""Temporal acceleration: recent-bin activity relative to the baseline bins.

Timestamps are bucketed into `bins` equal-width bins ending at the latest
timestamp. The window is half-open: signals exactly at the latest instant fall
past the last bin and are not counted. The tail `recent_portion` of bins is
compared with the head, and the ratio is mapped through a piecewise-linear
table before being dampened by absolute activity and sample size.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np

from moment_engine.models.domain import VelocityOptions
from moment_engine.models.timestamps import to_epoch_ms
from moment_engine.scoring.bounds import clamp01

MIN_BINS = 4
BASELINE_FLOOR = 0.25


@dataclass(frozen=True)
class VelocityResult:
    score: float
    total_signals_used: int = 0
    histogram: tuple[int, ...] = field(default_factory=tuple)
    recent_sum: int = 0
    baseline_sum: int = 0
    recent_avg: float = 0.0
    baseline_avg: float = 0.0
    ratio: float = 0.0


def _timestamps(signals: Iterable) -> list[float]:
    out = []
    for s in signals or []:
        if s is None:
            continue
        ms = to_epoch_ms(getattr(s, "created_at", None))
        if ms is not None:
            out.append(ms)
    out.sort()
    return out


def base_score(ratio: float) -> float:
    if not math.isfinite(ratio) or ratio <= 0:
        return 0.0
    if ratio < 1:
        return 0.20
    if ratio < 1.5:
        return 0.35 + (ratio - 1) * 0.40
    if ratio < 2:
        return 0.55 + (ratio - 1.5) * 0.30
    if ratio < 3:
        return 0.70 + (ratio - 2) * 0.15
    if ratio < 4:
        return 0.85 + (ratio - 3) * 0.10
    return 1.0


def _ratio_to_score(ratio: float, recent_avg: float, used: int) -> float:
    base = base_score(ratio)
    activity = clamp01(recent_avg / 2)
    sample = clamp01(used / 6)
    return clamp01(base * (0.50 + 0.50 * activity) * (0.60 + 0.40 * sample))


def _bin_count(value) -> int:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return VelocityOptions.bins
    if not math.isfinite(n):
        return VelocityOptions.bins
    return max(MIN_BINS, int(n))


def score_velocity(signals: Iterable, options: VelocityOptions | None = None) -> VelocityResult:
    opts = options or VelocityOptions()
    bin_ms = opts.bin_ms if opts.bin_ms and opts.bin_ms > 0 else VelocityOptions.bin_ms
    bins = _bin_count(opts.bins)
    recent_portion = clamp01(opts.recent_portion)

    stamps = _timestamps(signals)
    if not stamps:
        return VelocityResult(score=0.0, histogram=(0,) * bins)

    ts = np.asarray(stamps, dtype=np.float64)
    end = ts.max()
    start = end - bins * bin_ms
    ts = ts[ts >= start]
    idx = np.floor((ts - start) / bin_ms).astype(np.int64)
    idx = idx[idx < bins]
    hist = np.bincount(idx, minlength=bins)
    used = int(hist.sum())

    recent_bins = max(1, math.floor(bins * recent_portion + 0.5))
    baseline_bins = bins - recent_bins

    baseline_sum = int(hist[:baseline_bins].sum())
    recent_sum = int(hist[baseline_bins:].sum())
    baseline_avg = baseline_sum / baseline_bins if baseline_bins > 0 else 0.0
    recent_avg = recent_sum / recent_bins

    ratio = recent_avg / max(BASELINE_FLOOR, baseline_avg)

    return VelocityResult(
        score=_ratio_to_score(ratio, recent_avg, used),
        total_signals_used=used,
        histogram=tuple(int(h) for h in hist),
        recent_sum=recent_sum,
        baseline_sum=baseline_sum,
        recent_avg=recent_avg,
        baseline_avg=baseline_avg,
        ratio=ratio,
    )
