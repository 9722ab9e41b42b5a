#!/usr/bin/env python3
"""
Assembles one SignalBundle per opposing hitter for a probable starting pitcher.

Every data category is fetched independently; a category that fails is logged
and treated as absent, which the scorer handles as a neutral signal.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional

import pandas as pd
import requests

from hitter_matchups.data_sources.mlb_stats_api import MlbStatsClient
from hitter_matchups.models.lineup import LineupProfile, build_lineup_profiles, observations_from_boxscore
from hitter_matchups.models.normalization import plate_appearances, weighted_hit_rate
from hitter_matchups.models.schema import HeadToHead, PitcherProfile, SignalBundle, Split

FETCH_ERRORS = (requests.RequestException, ValueError, KeyError, TypeError, IndexError)

CANDIDATE_MAX_SLOT = 5
PITCHER_RECENT_DAYS = 28


@dataclass(frozen=True)
class ProbableSignals:
    pitcher: PitcherProfile
    opponent_team_id: int
    opponent_team_name: Optional[str]
    opponent_is_home: bool
    window_start: date
    window_end: date
    candidate_ids: List[int] = field(default_factory=list)
    lineup_profiles: Dict[int, LineupProfile] = field(default_factory=dict)
    bundles: List[SignalBundle] = field(default_factory=list)


def _safe_fetch(label: str, default, fetch, *args):
    try:
        return fetch(*args)
    except FETCH_ERRORS as e:
        logging.warning("%s unavailable, treating as absent: %s", label, e)
        return default


def order_games(games: list) -> pd.DataFrame:
    """
    One row per gamePk with its official date, oldest first. Games on the same
    date keep schedule order (doubleheaders).
    """
    rows = [
        {"game_pk": g.get("gamePk"), "game_date": g.get("officialDate") or (g.get("gameDate") or "")[:10]}
        for g in games if g.get("gamePk")
    ]
    if not rows:
        return pd.DataFrame(columns=["game_pk", "game_date"])
    df = pd.DataFrame(rows)
    return (
        df.drop_duplicates(subset="game_pk", keep="first")
        .sort_values("game_date", kind="mergesort")
        .reset_index(drop=True)
    )


def collect_lineup_profiles(client: MlbStatsClient, team_id: int,
                            start: date, end: date) -> Dict[int, LineupProfile]:
    """Fold the team's boxscores in [start, end] into per-player lineup profiles."""
    games = client.get_team_schedule(team_id, start.isoformat(), end.isoformat())
    ordered = order_games(games)
    observations = []
    for game_pk, game_date in ordered.itertuples(index=False):
        try:
            box = client.get_boxscore(int(game_pk))
        except FETCH_ERRORS as e:
            logging.debug("Skipping boxscore %s: %s", game_pk, e)
            continue
        observations.extend(observations_from_boxscore(box, team_id, game_date))
    logging.debug("Team %s: %d games, %d lineup observations", team_id, len(ordered), len(observations))
    return build_lineup_profiles(observations)


def build_pitcher_profile(client: MlbStatsClient, game: dict, side: str,
                          season: int, target: date) -> PitcherProfile:
    team = game["teams"][side]
    prob = team["probablePitcher"]
    pid = prob["id"]
    site_h9 = _safe_fetch("Pitcher home/away H/9", {}, client.get_pitcher_home_away_h9, pid, season)
    side_h9 = _safe_fetch("Pitcher H/9 vs batter side", {}, client.get_pitcher_vs_batter_side_h9, pid, season)
    return PitcherProfile(
        id=pid,
        name=prob.get("fullName"),
        side=side,
        team_id=team["team"]["id"],
        team_name=team["team"].get("name"),
        hand=_safe_fetch("Pitcher hand", None, client.get_pitcher_hand, pid),
        hits_per_9=_safe_fetch("Pitcher season H/9", None, client.get_pitcher_season_h9, pid, season),
        hits_per_9_site=site_h9.get(side),
        hits_per_9_last_28=_safe_fetch(
            "Pitcher last-28 H/9", None, client.get_pitcher_range_h9,
            pid, target - timedelta(days=PITCHER_RECENT_DAYS), target),
        hits_per_9_vs_lhb=side_h9.get("L"),
        hits_per_9_vs_rhb=side_h9.get("R"),
    )


def _split(entry: Optional[dict]) -> Split:
    if not entry:
        return Split()
    return Split(pa=entry.get("pa"), ops=entry.get("ops"))


def collect_probable_signals(client: MlbStatsClient, game: dict, probable_side: str,
                             season: int, start: date, end: date) -> Optional[ProbableSignals]:
    """
    Signals for every opposing hitter who batted 1-5 at least once in the
    window [start, end] and has a record against this probable pitcher.
    """
    prob = (game.get("teams", {}).get(probable_side) or {}).get("probablePitcher")
    if not prob or not prob.get("id"):
        return None

    pitcher = build_pitcher_profile(client, game, probable_side, season, end)
    opp_side = "away" if probable_side == "home" else "home"
    opp_team = game["teams"][opp_side]["team"]
    opp_id = opp_team["id"]
    opp_is_home = opp_side == "home"

    profiles = _safe_fetch("Opponent lineup history", {}, collect_lineup_profiles,
                           client, opp_id, start, end)
    candidates = [pid for pid, prof in profiles.items()
                  if any(1 <= slot <= CANDIDATE_MAX_SLOT for slot in prof.counts)]
    logging.info("[Game %s] %s: %d candidate hitters vs %s",
                 game.get("gamePk"), opp_team.get("name"), len(candidates), pitcher.name)

    site_splits = _safe_fetch("Home/away splits", {}, client.get_home_away_splits, candidates, season)
    last7 = _safe_fetch("Last-7-days OPS", {}, client.get_range_hitting, candidates, start, end)
    season_stats = _safe_fetch("Season hitting", {}, client.get_season_hitting, candidates, season)
    vs_rows = _safe_fetch("OPS vs pitcher", [], client.get_vs_pitcher, candidates, pitcher.id, season)
    hand_splits = _safe_fetch("OPS vs pitcher hand", {}, client.get_hand_splits, candidates, season)
    bat_sides = _safe_fetch("Bat sides", {}, client.get_bat_sides, candidates)

    bundles = []
    for row in vs_rows:
        pid = row["id"]
        prof = profiles.get(pid)
        stat = season_stats.get(pid)
        bat_side = bat_sides.get(pid)
        bundles.append(SignalBundle(
            player_id=pid,
            name=row.get("name"),
            season_wtb=weighted_hit_rate(stat) if stat is not None else None,
            season_pa=plate_appearances(stat) if stat is not None else None,
            vs_pitcher=HeadToHead(ab=row.get("ab"), pa=row.get("pa"), ops=row.get("ops")),
            vs_pitcher_hand=_split((hand_splits.get(pid) or {}).get(pitcher.hand)),
            site_split=_split((site_splits.get(pid) or {}).get("home" if opp_is_home else "away")),
            last_7_days=_split(last7.get(pid)),
            pitcher_h9_vs_batter_side=pitcher.h9_vs_batter_side(bat_side),
            pitcher_h9_season=pitcher.hits_per_9,
            pitcher_h9_site=pitcher.hits_per_9_site,
            pitcher_h9_last_28=pitcher.hits_per_9_last_28,
            bat_side=bat_side,
            pitcher_hand=pitcher.hand,
            projected_slot=prof.projected_slot() if prof else None,
            is_home=opp_is_home,
        ))

    return ProbableSignals(
        pitcher=pitcher,
        opponent_team_id=opp_id,
        opponent_team_name=opp_team.get("name"),
        opponent_is_home=opp_is_home,
        window_start=start,
        window_end=end,
        candidate_ids=candidates,
        lineup_profiles=profiles,
        bundles=bundles,
    )
