"""
Projected batting-order slot from a hitter's recent lineup history.

A hitter's projected slot is the mode of the slots the hitter occupied in the trailing
window. Ties go to the slot of the hitter's most recent game; if that slot is not among
the tied ones, the lowest tied slot wins.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from .normalization import to_number

MIN_SLOT = 1
MAX_SLOT = 9


def batting_order_slot(code) -> Optional[int]:
    """
    Decode a boxscore battingOrder code ("101", "301", "902") into the lineup
    slot (its hundreds digit). Returns None when the code carries no slot.
    """
    if code in (None, ""):
        return None
    n = to_number(code)
    if n is None:
        return None
    slot = int(n // 100)
    if slot < MIN_SLOT or slot > MAX_SLOT:
        return None
    return slot


@dataclass(frozen=True)
class BattingObservation:
    player_id: int
    game_date: str
    slot: int
    is_pitcher_position: bool = False


def observations_from_boxscore(box: dict, team_id: int, game_date: str) -> list:
    """
    One observation per player of `team_id` who held a lineup slot in this
    boxscore. Players with no slot are dropped; pitchers batting for themselves
    are kept but flagged, and the lineup fold skips them.
    """
    observations = []
    for side in ("home", "away"):
        team = (box or {}).get("teams", {}).get(side) or {}
        if team.get("team", {}).get("id") != team_id:
            continue
        for player in (team.get("players") or {}).values():
            pid = (player.get("person") or {}).get("id")
            slot = batting_order_slot(player.get("battingOrder"))
            if not pid or slot is None:
                continue
            position = player.get("position") or {}
            observations.append(BattingObservation(
                player_id=int(pid), game_date=game_date, slot=slot,
                is_pitcher_position="P" in (position.get("code"), position.get("abbreviation"))))
    return observations


def choose_projected_slot(counts: Dict[int, int], latest_slot: Optional[int]) -> Optional[int]:
    best_slot, best_count = None, -1
    for slot in sorted(counts):
        count = counts[slot]
        if count > best_count:
            best_slot, best_count = slot, count
        elif count == best_count and slot == latest_slot:
            best_slot = slot
    return best_slot


@dataclass
class LineupProfile:
    counts: Dict[int, int] = field(default_factory=dict)
    latest_slot: Optional[int] = None
    latest_game_date: Optional[str] = None

    @property
    def sample_size(self) -> int:
        return sum(self.counts.values())

    def add(self, observation: BattingObservation) -> None:
        slot = observation.slot
        self.counts[slot] = self.counts.get(slot, 0) + 1
        # equal dates: the later record wins
        if self.latest_game_date is None or observation.game_date >= self.latest_game_date:
            self.latest_game_date = observation.game_date
            self.latest_slot = slot

    def projected_slot(self) -> Optional[int]:
        return choose_projected_slot(self.counts, self.latest_slot)


@dataclass(frozen=True)
class SlotProjection:
    projected_slot: Optional[int]
    counts: Dict[int, int]
    sample_size: int


def _usable(observation: BattingObservation) -> bool:
    return (not observation.is_pitcher_position
            and observation.slot is not None
            and MIN_SLOT <= observation.slot <= MAX_SLOT)


def project_slot(observations: Iterable[BattingObservation]) -> SlotProjection:
    """Fold one hitter's observations (oldest first) into a slot projection."""
    profile = LineupProfile()
    for obs in observations:
        if _usable(obs):
            profile.add(obs)
    return SlotProjection(
        projected_slot=profile.projected_slot(),
        counts=dict(profile.counts),
        sample_size=profile.sample_size,
    )


def build_lineup_profiles(observations: Iterable[BattingObservation]) -> Dict[int, LineupProfile]:
    """Per-player lineup profiles from a chronologically ordered stream of observations."""
    profiles: Dict[int, LineupProfile] = {}
    skipped = 0
    for obs in observations:
        if not _usable(obs):
            skipped += 1
            continue
        profiles.setdefault(obs.player_id, LineupProfile()).add(obs)
    if skipped:
        logging.debug("Skipped %d lineup observations from pitchers or without a usable slot", skipped)
    return profiles
