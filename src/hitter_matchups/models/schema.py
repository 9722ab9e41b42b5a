# schema.py
"""Value objects passed between the data sources, the scorer and the pipeline."""
from dataclasses import dataclass, field
from typing import Dict, Optional

MLB_IMG_BASE = "https://img.mlbstatic.com/mlb-photos/image/upload"


def headshot_url(person_id, width: int = 213) -> Optional[str]:
    """MLB headshot URL for a player id."""
    if not person_id:
        return None
    w = int(width) if width else 213
    return (f"{MLB_IMG_BASE}/d_people:generic:headshot:67:current.png/"
            f"w_{w},q_auto:best/v1/people/{person_id}/headshot/67/current")


@dataclass(frozen=True)
class Split:
    pa: Optional[int] = None
    ops: Optional[float] = None

    def to_dict(self) -> dict:
        return {"pa": self.pa, "ops": self.ops}


@dataclass(frozen=True)
class HeadToHead:
    ab: Optional[int] = None
    pa: Optional[int] = None
    ops: Optional[float] = None

    def to_dict(self) -> dict:
        return {"pa": self.pa, "ab": self.ab, "ops": self.ops}


@dataclass(frozen=True)
class PitcherProfile:
    id: int
    name: Optional[str] = None
    side: Optional[str] = None  # 'home' | 'away'
    team_id: Optional[int] = None
    team_name: Optional[str] = None
    hand: Optional[str] = None  # 'L' | 'R'
    hits_per_9: Optional[float] = None
    hits_per_9_site: Optional[float] = None
    hits_per_9_last_28: Optional[float] = None
    hits_per_9_vs_lhb: Optional[float] = None
    hits_per_9_vs_rhb: Optional[float] = None

    def h9_vs_batter_side(self, bat_side: Optional[str]) -> Optional[float]:
        """H/9 against the side the batter will hit from. Switch hitters bat opposite the pitcher."""
        if bat_side == "L":
            return self.hits_per_9_vs_lhb
        if bat_side == "R":
            return self.hits_per_9_vs_rhb
        if bat_side == "S":
            if self.hand == "R":
                return self.hits_per_9_vs_lhb
            if self.hand == "L":
                return self.hits_per_9_vs_rhb
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "side": self.side,
            "teamId": self.team_id,
            "teamName": self.team_name,
            "headshot": headshot_url(self.id),
            "hand": self.hand,
            "hitsPer9Inn": self.hits_per_9,
            "hitsPer9Inn_site": self.hits_per_9_site,
            "hitsPer9Inn_last_28_days": self.hits_per_9_last_28,
        }


@dataclass(frozen=True)
class SignalBundle:
    """Everything the scorer needs about one hitter facing one probable pitcher."""
    player_id: int
    name: Optional[str] = None
    season_wtb: Optional[float] = None
    season_pa: Optional[int] = None
    vs_pitcher: HeadToHead = field(default_factory=HeadToHead)
    vs_pitcher_hand: Split = field(default_factory=Split)
    site_split: Split = field(default_factory=Split)
    last_7_days: Split = field(default_factory=Split)
    pitcher_h9_vs_batter_side: Optional[float] = None
    pitcher_h9_season: Optional[float] = None
    pitcher_h9_site: Optional[float] = None
    pitcher_h9_last_28: Optional[float] = None
    bat_side: Optional[str] = None
    pitcher_hand: Optional[str] = None
    projected_slot: Optional[int] = None
    is_home: bool = False

    @property
    def site(self) -> str:
        return "Home" if self.is_home else "Away"


@dataclass(frozen=True)
class RankedHitter:
    bundle: SignalBundle
    score: int
    score_breakdown: Dict[str, int]
    h2h_share: float
    projected_pa: Optional[float] = None
    pitcher: Optional[PitcherProfile] = None

    @property
    def player_id(self) -> int:
        return self.bundle.player_id

    @property
    def projected_slot(self) -> Optional[int]:
        return self.bundle.projected_slot

    def to_record(self) -> dict:
        """Output record consumed by the presentation layer."""
        b = self.bundle
        pitcher_splits = None
        if self.pitcher is not None:
            pitcher_splits = {
                **self.pitcher.to_dict(),
                "hitsPer9Inn_vs_batter_side": b.pitcher_h9_vs_batter_side,
            }
        return {
            "id": b.player_id,
            "name": b.name,
            "headshot": headshot_url(b.player_id),
            "probable_pitcher_splits": pitcher_splits,
            "projectedBattingOrder": b.projected_slot,
            "projected_pa": self.projected_pa,
            "ops_vs_pitcher": b.vs_pitcher.to_dict(),
            "wtb_percent": round(b.season_wtb, 3) if b.season_wtb is not None else None,
            "season_pa": b.season_pa,
            "ops_site": b.site_split.to_dict(),
            "ops_vs_pitcher_hand": b.vs_pitcher_hand.to_dict(),
            "ops_last_7_days": b.last_7_days.to_dict(),
            "site": b.site,
            "score": self.score,
            "h2h_share": self.h2h_share,
            "score_breakdown": dict(self.score_breakdown),
        }
