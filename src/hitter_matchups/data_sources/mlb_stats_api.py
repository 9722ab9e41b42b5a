# File: hitter_matchups/data_sources/mlb_stats_api.py
import logging
from datetime import datetime
from typing import Dict, Iterable, Optional

import requests

from hitter_matchups.models.normalization import plate_appearances, to_number

DEFAULT_BASE_URL = "https://statsapi.mlb.com/api/v1"


def fmt_us_date(d) -> str:
    """MM/DD/YYYY, the format byDateRange hydrates expect."""
    if isinstance(d, str):
        d = datetime.strptime(d, "%Y-%m-%d").date()
    return d.strftime("%m/%d/%Y")


def _splits(person: dict) -> list:
    stats = person.get("stats") or [{}]
    return (stats[0] or {}).get("splits") or []


def _first_stat(person: dict) -> dict:
    splits = _splits(person)
    if not splits:
        return {}
    return (splits[0] or {}).get("stat") or {}


def _split_site(split: dict) -> Optional[str]:
    """'home' | 'away' | None for a homeAndAway split."""
    if split.get("isHome") is True:
        return "home"
    if split.get("isHome") is False:
        return "away"
    label = str(split.get("homeOrAway") or split.get("split") or "").lower()
    if "home" in label:
        return "home"
    if "away" in label:
        return "away"
    return None


def _split_code(split: dict) -> Optional[str]:
    info = split.get("split")
    code = info.get("code") if isinstance(info, dict) else None
    return code.lower() if isinstance(code, str) else None


def _ops_pa(stat: dict) -> dict:
    return {"ops": to_number(stat.get("ops")), "pa": plate_appearances(stat) if stat else None}


class MlbStatsClient:
    """Thin wrapper over the public MLB Stats API."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 20,
                 session: requests.Session = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: dict = None) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logging.debug("GET %s params=%s", url, params)
        resp = self.session.get(url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    # ---------- raw endpoints ----------
    def get_schedule(self, date_str: str) -> list:
        """Games (with probable pitchers) scheduled on a YYYY-MM-DD date."""
        data = self._get("schedule", {
            "sportId": 1,
            "date": date_str,
            "hydrate": "team,probablePitcher",
        })
        return [g for d in data.get("dates", []) for g in d.get("games", [])]

    def get_team_schedule(self, team_id: int, start_date: str, end_date: str) -> list:
        data = self._get("schedule", {
            "sportId": 1,
            "teamId": team_id,
            "startDate": start_date,
            "endDate": end_date,
        })
        return [g for d in data.get("dates", []) for g in d.get("games", [])]

    def get_boxscore(self, game_pk: int) -> dict:
        return self._get(f"game/{game_pk}/boxscore")

    def get_people(self, person_ids: Iterable[int], hydrate: str = None) -> list:
        ids = [str(i) for i in person_ids if i]
        if not ids:
            return []
        params = {"personIds": ",".join(ids)}
        if hydrate:
            params["hydrate"] = hydrate
        return self._get("people", params).get("people", [])

    # ---------- batter categories ----------
    def get_season_hitting(self, batter_ids, season: int) -> Dict[int, dict]:
        hydrate = f"stats(group=[hitting],type=[season],sportId=1,gameType=R,season={season})"
        return {int(p["id"]): _first_stat(p) for p in self.get_people(batter_ids, hydrate)}

    def get_vs_pitcher(self, batter_ids, pitcher_id: int, season: int) -> list:
        """Rows of {id, name, ab, pa, ops} for each batter vs this pitcher."""
        hydrate = (f"stats(group=[hitting],type=[vsPlayer],opposingPlayerId={pitcher_id},"
                   f"sportId=1,gameType=R,season={season})")
        rows = []
        for p in self.get_people(batter_ids, hydrate):
            stat = _first_stat(p)
            ab = to_number(stat.get("atBats"))
            rows.append({
                "id": int(p["id"]),
                "name": p.get("fullName"),
                "ab": int(ab) if ab is not None else None,
                "pa": plate_appearances(stat) if stat else None,
                "ops": to_number(stat.get("ops")),
            })
        return rows

    def get_hand_splits(self, batter_ids, season: int) -> Dict[int, dict]:
        """{id: {'L': {ops, pa}, 'R': {ops, pa}}} keyed by pitcher hand."""
        hydrate = (f"stats(group=[hitting],type=[statSplits],sportId=1,gameType=R,"
                   f"season={season},sitCodes=[vl,vr])")
        out = {}
        for p in self.get_people(batter_ids, hydrate):
            entry = {}
            for s in _splits(p):
                code = _split_code(s)
                if code == "vl":
                    entry["L"] = _ops_pa(s.get("stat") or {})
                elif code == "vr":
                    entry["R"] = _ops_pa(s.get("stat") or {})
            out[int(p["id"])] = entry
        return out

    def get_home_away_splits(self, batter_ids, season: int) -> Dict[int, dict]:
        """{id: {'home': {ops, pa}, 'away': {ops, pa}}}"""
        hydrate = f"stats(group=[hitting],type=[homeAndAway],sportId=1,gameType=R,season={season})"
        out = {}
        for p in self.get_people(batter_ids, hydrate):
            entry = {}
            for s in _splits(p):
                site = _split_site(s)
                if site:
                    entry[site] = _ops_pa(s.get("stat") or {})
            out[int(p["id"])] = entry
        return out

    def get_range_hitting(self, batter_ids, start, end) -> Dict[int, dict]:
        """{id: {ops, pa}} over an inclusive date range."""
        hydrate = (f"stats(group=[hitting],type=[byDateRange],startDate={fmt_us_date(start)},"
                   f"endDate={fmt_us_date(end)},force=True)")
        return {int(p["id"]): _ops_pa(_first_stat(p)) for p in self.get_people(batter_ids, hydrate)}

    def get_bat_sides(self, batter_ids) -> Dict[int, Optional[str]]:
        return {int(p["id"]): (p.get("batSide") or {}).get("code")
                for p in self.get_people(batter_ids)}

    # ---------- pitcher categories ----------
    def get_pitcher_hand(self, pitcher_id: int) -> Optional[str]:
        people = self._get(f"people/{pitcher_id}").get("people", [])
        return (people[0].get("pitchHand") or {}).get("code") if people else None

    def get_pitcher_season_h9(self, pitcher_id: int, season: int) -> Optional[float]:
        hydrate = f"stats(group=[pitching],type=[season],sportId=1,gameType=R,season={season})"
        people = self.get_people([pitcher_id], hydrate)
        return to_number(_first_stat(people[0]).get("hitsPer9Inn")) if people else None

    def get_pitcher_home_away_h9(self, pitcher_id: int, season: int) -> Dict[str, Optional[float]]:
        hydrate = f"stats(group=[pitching],type=[homeAndAway],sportId=1,gameType=R,season={season})"
        out = {"home": None, "away": None}
        for p in self.get_people([pitcher_id], hydrate)[:1]:
            for s in _splits(p):
                site = _split_site(s)
                val = to_number((s.get("stat") or {}).get("hitsPer9Inn"))
                if site and val is not None:
                    out[site] = val
        return out

    def get_pitcher_range_h9(self, pitcher_id: int, start, end) -> Optional[float]:
        hydrate = (f"stats(group=[pitching],type=[byDateRange],startDate={fmt_us_date(start)},"
                   f"endDate={fmt_us_date(end)},force=True)")
        people = self.get_people([pitcher_id], hydrate)
        return to_number(_first_stat(people[0]).get("hitsPer9Inn")) if people else None

    def get_pitcher_vs_batter_side_h9(self, pitcher_id: int, season: int) -> Dict[str, Optional[float]]:
        """{'L': H/9 vs LHB, 'R': H/9 vs RHB}"""
        hydrate = (f"stats(group=[pitching],type=[statSplits],sportId=1,gameType=R,"
                   f"season={season},sitCodes=[vl,vr])")
        out = {"L": None, "R": None}
        for p in self.get_people([pitcher_id], hydrate)[:1]:
            for s in _splits(p):
                code = _split_code(s)
                val = to_number((s.get("stat") or {}).get("hitsPer9Inn"))
                if code == "vl" and val is not None:
                    out["L"] = val
                elif code == "vr" and val is not None:
                    out["R"] = val
        return out
