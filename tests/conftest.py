import pytest
import requests

from hitter_matchups.models.schema import HeadToHead, SignalBundle, Split

TARGET_DATE = "2025-06-08"
HOME_TEAM = 10
OPP_TEAM = 20
OTHER_TEAM = 30
PITCHER_ID = 500


def _player(pid, batting_order=None, position="2B"):
    entry = {"person": {"id": pid, "fullName": f"Player {pid}"},
             "position": {"abbreviation": position, "code": position}}
    if batting_order is not None:
        entry["battingOrder"] = batting_order
    return entry


def _box(opp_side, players):
    other_side = "home" if opp_side == "away" else "away"
    return {"teams": {
        opp_side: {"team": {"id": OPP_TEAM},
                   "players": {f"ID{p['person']['id']}": p for p in players}},
        other_side: {"team": {"id": OTHER_TEAM},
                     "players": {"ID999": _player(999, "100")}},
    }}


BOXSCORES = {
    1: _box("away", [_player(101, "100"), _player(102, "300"), _player(103, "600"),
                     _player(104, "900", position="P"), _player(105, "401"), _player(106, "300")]),
    2: _box("home", [_player(101, "100"), _player(102, "500"), _player(105, "700"),
                     _player(106, "300"), _player(107)]),
    3: _box("away", [_player(101, "200"), _player(102, "500"), _player(105, "700"),
                     _player(106, "300")]),
}


class FakeMlbClient:
    """Canned MLB Stats API responses for one game on TARGET_DATE."""

    def __init__(self):
        self.calls = []

    def get_schedule(self, date_str):
        self.calls.append(("schedule", date_str))
        return [{
            "gamePk": 9001,
            "officialDate": date_str,
            "venue": {"name": "Test Park"},
            "teams": {
                "home": {"team": {"id": HOME_TEAM, "name": "Home Club"},
                         "probablePitcher": {"id": PITCHER_ID, "fullName": "Home Ace"}},
                "away": {"team": {"id": OPP_TEAM, "name": "Road Club"}},
            },
        }]

    def get_team_schedule(self, team_id, start_date, end_date):
        self.calls.append(("team_schedule", team_id, start_date, end_date))
        # out of order with a duplicate, as a date-range schedule can be
        return [
            {"gamePk": 3, "officialDate": "2025-06-03"},
            {"gamePk": 1, "officialDate": "2025-06-01"},
            {"gamePk": 2, "officialDate": "2025-06-02"},
            {"gamePk": 1, "officialDate": "2025-06-01"},
            {"gamePk": 4, "officialDate": "2025-06-04"},
        ]

    def get_boxscore(self, game_pk):
        self.calls.append(("boxscore", game_pk))
        if game_pk not in BOXSCORES:
            raise requests.ConnectionError(f"boxscore {game_pk} unavailable")
        return BOXSCORES[game_pk]

    def get_pitcher_hand(self, pitcher_id):
        return "R"

    def get_pitcher_season_h9(self, pitcher_id, season):
        return 8.1

    def get_pitcher_home_away_h9(self, pitcher_id, season):
        return {"home": 7.5, "away": 9.0}

    def get_pitcher_range_h9(self, pitcher_id, start, end):
        raise requests.HTTPError("500 Server Error")

    def get_pitcher_vs_batter_side_h9(self, pitcher_id, season):
        return {"L": 9.5, "R": 7.2}

    def get_home_away_splits(self, batter_ids, season):
        return {101: {"home": {"ops": 0.700, "pa": 120}, "away": {"ops": 0.850, "pa": 130}}}

    def get_range_hitting(self, batter_ids, start, end):
        return {101: {"ops": 0.950, "pa": 25}, 106: {"ops": 0.500, "pa": 2}}

    def get_season_hitting(self, batter_ids, season):
        return {
            101: {"plateAppearances": 300, "hits": 75},
            102: {"plateAppearances": 250, "hits": 55},
            105: {"plateAppearances": 50, "hits": 10},
            106: {"plateAppearances": 60, "hits": 18},
        }

    def get_vs_pitcher(self, batter_ids, pitcher_id, season):
        self.calls.append(("vs_pitcher", tuple(batter_ids), pitcher_id))
        return [
            {"id": 101, "name": "Player 101", "ab": 5, "pa": 6, "ops": 0.900},
            {"id": 102, "name": "Player 102", "ab": 0, "pa": 1, "ops": None},
            {"id": 105, "name": "Player 105", "ab": 3, "pa": 3, "ops": 0.700},
            {"id": 106, "name": "Player 106", "ab": 2, "pa": 2, "ops": 0.500},
        ]

    def get_hand_splits(self, batter_ids, season):
        return {101: {"L": {"ops": 0.650, "pa": 80}, "R": {"ops": 0.880, "pa": 220}}}

    def get_bat_sides(self, batter_ids):
        return {101: "S", 102: "R", 105: "L", 106: "R"}


@pytest.fixture
def fake_client():
    return FakeMlbClient()


@pytest.fixture
def make_bundle():
    def _make(**overrides):
        values = dict(
            player_id=1,
            name="Test Hitter",
            season_wtb=0.240,
            season_pa=350,
            vs_pitcher=HeadToHead(ab=6, pa=7, ops=0.800),
            vs_pitcher_hand=Split(pa=200, ops=0.780),
            site_split=Split(pa=150, ops=0.760),
            last_7_days=Split(pa=12, ops=0.820),
            pitcher_h9_vs_batter_side=8.5,
            pitcher_h9_last_28=9.0,
            projected_slot=2,
            is_home=True,
        )
        values.update(overrides)
        return SignalBundle(**values)
    return _make
