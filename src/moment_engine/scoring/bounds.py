"""Numeric guards shared by every scorer."""

from __future__ import annotations

import math


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp to [lo, hi]; non-finite or non-numeric input maps to lo."""
    try:
        x = float(x)
    except (TypeError, ValueError):
        return lo
    if not math.isfinite(x):
        return lo
    return max(lo, min(hi, x))


def clamp01(x: float) -> float:
    return clamp(x, 0.0, 1.0)
