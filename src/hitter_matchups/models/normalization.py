"""
Normalizers that map raw hitter/pitcher stats onto [0, 1].

Every normalizer returns a neutral value when the input is missing or not a
finite number, so a composite score stays computable on partial data.
"""
import math
from typing import Optional

import pandas as pd

NEUTRAL = 0.5

OPS_BAND = (0.40, 1.050)
H9_BAND = (6.0, 12.0)
PA_BAND = (3.8, 4.8)  # PA range for 1-5 hitters

# Weighted hit rate calibration points
WTB_FLOOR = 0.190
WTB_BASELINE = 0.223
WTB_ELITE = 0.272

# Season PA confidence ramp for the WTB signal
WTB_PA_MIN = 150
WTB_PA_MAX = 500
WTB_PA_FLOOR = 0.65


def clamp(n: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, n))


def round_half_up(x: float) -> int:
    """
    Round to the nearest integer with halves going up (16.5 -> 17), unlike
    the builtin round(). Float noise is snapped off first so that an
    interpolated 10.499999999999998 still counts as 10.5.
    """
    return math.floor(round(x, 9) + 0.5)


def to_number(value) -> Optional[float]:
    """
    Coerce a raw stat value to float. The stats API serves rates as strings
    (".812"), counts as ints, and "-.--" when undefined.
    Returns None for anything missing, non-numeric or non-finite.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def _minmax(value, bounds) -> float:
    num = to_number(value)
    if num is None:
        return NEUTRAL
    lo, hi = bounds
    return clamp((num - lo) / (hi - lo), 0.0, 1.0)


def norm_ops(ops) -> float:
    return _minmax(ops, OPS_BAND)


def norm_h9(h9) -> float:
    """Hits per 9 on [6, 12]. Not inverted: a higher H/9 maps closer to 1."""
    return _minmax(h9, H9_BAND)


def norm_pa(pa) -> float:
    return _minmax(pa, PA_BAND)


def norm_wtb(wtb) -> float:
    """
    Piecewise-linear around league baseline: floor -> 0, baseline -> 0.5,
    elite -> 1. Values past floor/elite clamp.
    """
    w = to_number(wtb)
    if w is None:
        return NEUTRAL
    if w <= WTB_FLOOR:
        return 0.0
    if w >= WTB_ELITE:
        return 1.0
    if w >= WTB_BASELINE:
        return 0.5 + 0.5 * ((w - WTB_BASELINE) / (WTB_ELITE - WTB_BASELINE))
    return 0.5 * ((w - WTB_FLOOR) / (WTB_BASELINE - WTB_FLOOR))


def wtb_pa_confidence(season_pa) -> float:
    """
    Multiplier for the WTB contribution based on season sample size.
    Pinned to the floor below WTB_PA_MIN (or when unknown), full at WTB_PA_MAX,
    square-root eased in between.
    """
    pa = to_number(season_pa)
    if pa is None:
        return WTB_PA_FLOOR
    x = clamp((pa - WTB_PA_MIN) / (WTB_PA_MAX - WTB_PA_MIN), 0.0, 1.0)
    return WTB_PA_FLOOR + (1 - WTB_PA_FLOOR) * math.sqrt(x)


def plate_appearances(stat: dict) -> int:
    """PA from a stat line; summed from components when not reported."""
    if not stat:
        return 0
    pa = stat.get("plateAppearances")
    if isinstance(pa, (int, float)) and not isinstance(pa, bool):
        return int(pa)
    parts = ("atBats", "baseOnBalls", "hitByPitch", "sacFlies", "sacBunts")
    return int(sum(to_number(stat.get(k)) or 0 for k in parts))


def weighted_hit_rate(stat: dict) -> float:
    """Hits per plate appearance; 0 when there are no plate appearances."""
    pa = plate_appearances(stat)
    if pa <= 0:
        return 0.0
    return (to_number(stat.get("hits")) or 0) / pa
