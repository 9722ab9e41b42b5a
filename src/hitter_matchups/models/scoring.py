"""
Composite matchup score for a hitter facing a probable starting pitcher.

Eight weighted signals are blended into a 0-100 score:

    wtb       season weighted hit rate, damped by season PA confidence
    h9_side   pitcher H/9 vs the batter's side
    h9_28     pitcher H/9 over the last 28 days
    ops_hand  batter OPS vs the pitcher's hand
    ops_site  batter OPS at this game's site (home/away)
    last7     batter OPS over the last 7 days, weight ramped by PA
    opp       opportunity: expected PA for the projected slot and site
    h2h       head-to-head share from the calibration grid

wtb, opp and the dynamic h2h share are held fixed; the other five weights are
rescaled together so the table sums to 1.
"""
import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .h2h_grid import h2h_weight
from .normalization import (
    NEUTRAL,
    clamp,
    norm_h9,
    norm_ops,
    norm_wtb,
    round_half_up,
    to_number,
    wtb_pa_confidence,
)
from .schema import SignalBundle

BASE_WEIGHTS = {
    # baseline skill
    "wtb": 0.30,
    "h9_side": 0.04,
    "h9_28": 0.02,
    # ops splits
    "ops_hand": 0.15,
    "ops_site": 0.04,
    # recency
    "last7": 0.10,
    # opportunity volume
    "opp": 0.05,
    # head-to-head (nominal, replaced by the grid share)
    "h2h": 0.15,
}

# Breakdown key order; also the tie-break order when correcting rounding drift
SIGNAL_ORDER = ("wtb", "h9_side", "h9_28", "ops_hand", "ops_site", "last7", "opp", "h2h")
FIXED_SIGNALS = ("wtb", "opp", "h2h")
RESCALED_SIGNALS = ("h9_side", "h9_28", "ops_hand", "ops_site", "last7")

LAST7_MIN_PA = 3
LAST7_FULL_PA = 20
LAST7_FLOOR = 0.50

# Estimated plate appearances by batting slot and site
PROJECTED_PA_TABLE = {
    "home": {1: 4.49, 2: 4.40, 3: 4.30, 4: 4.20, 5: 4.10},
    "away": {1: 4.69, 2: 4.59, 3: 4.49, 4: 4.39, 5: 4.28},
}
OPP_PA_MIN = 4.10
OPP_PA_MAX = 4.69
OPP_FLOOR = 0.50


@dataclass(frozen=True)
class HitterScore:
    score: int
    breakdown: Dict[str, int]
    h2h_share: float
    weights: Dict[str, float]
    contributions: Dict[str, float]
    projected_pa: Optional[float] = None


def projected_pa_for(slot, is_home: bool) -> Optional[float]:
    if slot is None:
        return None
    site = "home" if is_home else "away"
    return PROJECTED_PA_TABLE[site].get(slot)


def last7_weight(pa, ops, base: float = BASE_WEIGHTS["last7"]) -> float:
    """
    Recency weight: half the base weight until there are LAST7_MIN_PA plate
    appearances with a known OPS, then sqrt-ramped to the full base weight
    at LAST7_FULL_PA.
    """
    pa = to_number(pa)
    if pa is None or pa < LAST7_MIN_PA or to_number(ops) is None:
        return base * LAST7_FLOOR
    lin = clamp((pa - LAST7_MIN_PA) / (LAST7_FULL_PA - LAST7_MIN_PA), 0.0, 1.0)
    return base * (LAST7_FLOOR + (1 - LAST7_FLOOR) * math.sqrt(lin))


def resolve_weights(h2h_share: float, last7_dynamic: float,
                    base: Mapping[str, float] = BASE_WEIGHTS) -> Dict[str, float]:
    """
    Full weight table for one hitter. wtb and opp keep their base weights and
    h2h takes the grid share; the rescaled signals share what is left of 1.0.
    last7 never ends up above its base weight.
    """
    fixed_sum = base["wtb"] + base["opp"] + h2h_share
    pre = {k: base[k] for k in RESCALED_SIGNALS}
    pre["last7"] = last7_dynamic
    pre_sum = sum(pre.values())
    scale = max(0.0, 1 - fixed_sum) / pre_sum if pre_sum > 0 else 1.0

    weights = {
        "wtb": base["wtb"],
        "opp": base["opp"],
        "h2h": h2h_share,
    }
    for k, v in pre.items():
        weights[k] = v * scale
    weights["last7"] = min(weights["last7"], base["last7"])
    return {k: weights[k] for k in SIGNAL_ORDER}


def opportunity_share(projected_pa, opp_weight: float = BASE_WEIGHTS["opp"]) -> float:
    """Half the opportunity weight at OPP_PA_MIN, ramping to the full weight at OPP_PA_MAX."""
    pa = to_number(projected_pa)
    if pa is None:
        frac = NEUTRAL
    else:
        frac = clamp((pa - OPP_PA_MIN) / (OPP_PA_MAX - OPP_PA_MIN), 0.0, 1.0)
    return opp_weight * (OPP_FLOOR + (1 - OPP_FLOOR) * frac)


def reconcile_breakdown(contributions: Mapping[str, float], score: int) -> Dict[str, int]:
    """
    Integer points per signal summing to `score`. h2h is pinned to its own
    contribution; the rest of the points are split across the other signals
    in proportion to their contributions, floored, and any shortfall goes to
    the largest contributor (first in SIGNAL_ORDER on ties).
    """
    h2h_points = round_half_up(contributions.get("h2h", 0.0) * 100)
    others = [(k, max(0.0, contributions.get(k, 0.0))) for k in SIGNAL_ORDER if k != "h2h"]
    denom = sum(v for _, v in others)
    if denom <= 0:
        return {"h2h": score}

    remaining = max(0, score - h2h_points)
    points = {k: max(0, math.floor(remaining * v / denom)) for k, v in others}
    delta = remaining - sum(points.values())
    if delta:
        largest = max(others, key=lambda kv: kv[1])[0]
        points[largest] = max(0, points[largest] + delta)
    points["h2h"] = h2h_points
    return points


def score_hitter(bundle: SignalBundle, base: Mapping[str, float] = BASE_WEIGHTS) -> HitterScore:
    h2h_share = h2h_weight(bundle.vs_pitcher.ab, bundle.vs_pitcher.ops)
    last7 = bundle.last_7_days
    weights = resolve_weights(h2h_share, last7_weight(last7.pa, last7.ops, base["last7"]), base)

    projected_pa = projected_pa_for(bundle.projected_slot, bundle.is_home)
    contributions = {
        "wtb": norm_wtb(bundle.season_wtb) * weights["wtb"] * wtb_pa_confidence(bundle.season_pa),
        "h9_side": norm_h9(bundle.pitcher_h9_vs_batter_side) * weights["h9_side"],
        "h9_28": norm_h9(bundle.pitcher_h9_last_28) * weights["h9_28"],
        "ops_hand": norm_ops(bundle.vs_pitcher_hand.ops) * weights["ops_hand"],
        "ops_site": norm_ops(bundle.site_split.ops) * weights["ops_site"],
        "last7": norm_ops(last7.ops) * weights["last7"],
        "opp": opportunity_share(projected_pa, weights["opp"]),
        "h2h": weights["h2h"],
    }
    raw = sum(contributions.values())
    score = max(1, round_half_up(clamp(raw, 0.0, 1.0) * 100))
    return HitterScore(
        score=score,
        breakdown=reconcile_breakdown(contributions, score),
        h2h_share=h2h_share,
        weights=weights,
        contributions=contributions,
        projected_pa=projected_pa,
    )
