import pytest

from hitter_matchups.models.lineup import (
    BattingObservation,
    LineupProfile,
    batting_order_slot,
    build_lineup_profiles,
    choose_projected_slot,
    observations_from_boxscore,
    project_slot,
)


def _obs(slots, player_id=7, start_day=1):
    return [BattingObservation(player_id, f"2025-06-{start_day + i:02d}", slot)
            for i, slot in enumerate(slots)]


@pytest.mark.parametrize("code, slot", [
    ("101", 1), ("301", 3), (900, 9), ("902", 9), ("100", 1),
    (None, None), ("", None), ("0", None), ("abc", None), ("1001", None), (50, None),
])
def test_batting_order_slot(code, slot):
    assert batting_order_slot(code) == slot


def test_tie_goes_to_latest_slot():
    proj = project_slot(_obs([3, 5, 3, 5, 3, 5, 3, 5]))
    assert proj.counts == {3: 4, 5: 4}
    assert proj.projected_slot == 5
    assert proj.sample_size == 8


def test_clear_mode_wins_over_latest():
    proj = project_slot(_obs([2, 2, 4, 2, 2, 2, 4]))
    assert proj.counts == {2: 5, 4: 2}
    assert proj.projected_slot == 2


def test_tie_without_latest_goes_to_lowest_slot():
    # 6 and 2 tie at 2, latest game was slot 4
    proj = project_slot(_obs([6, 2, 6, 2, 4]))
    assert proj.projected_slot == 2
    assert choose_projected_slot({6: 2, 2: 2, 4: 1}, 4) == 2


def test_no_observations_projects_nothing():
    proj = project_slot([])
    assert proj.projected_slot is None
    assert proj.sample_size == 0
    assert proj.counts == {}


def test_pitcher_and_invalid_slots_are_ignored():
    observations = _obs([4, 4]) + [
        BattingObservation(7, "2025-06-10", 9, is_pitcher_position=True),
        BattingObservation(7, "2025-06-11", 0),
    ]
    proj = project_slot(observations)
    assert proj.counts == {4: 2}
    assert proj.projected_slot == 4


def test_equal_dates_favor_the_later_record():
    profile = LineupProfile()
    profile.add(BattingObservation(7, "2025-06-05", 3))
    profile.add(BattingObservation(7, "2025-06-05", 6))
    assert profile.latest_slot == 6
    assert profile.projected_slot() == 6


def test_older_record_does_not_replace_latest():
    profile = LineupProfile()
    profile.add(BattingObservation(7, "2025-06-05", 3))
    profile.add(BattingObservation(7, "2025-06-01", 6))
    assert profile.latest_slot == 3
    assert profile.latest_game_date == "2025-06-05"
    assert profile.projected_slot() == 3


def test_profile_invariants():
    profile = LineupProfile()
    for obs in _obs([1, 2, 2, 5]):
        profile.add(obs)
    assert profile.sample_size == sum(profile.counts.values()) == 4
    assert profile.latest_slot in profile.counts


def test_build_lineup_profiles_per_player():
    observations = _obs([1, 1, 2], player_id=11) + _obs([5, 4, 4], player_id=22)
    profiles = build_lineup_profiles(observations)
    assert set(profiles) == {11, 22}
    assert profiles[11].projected_slot() == 1
    assert profiles[22].projected_slot() == 4


def test_observations_from_boxscore_flags_pitchers_and_drops_bench():
    box = {"teams": {
        "home": {"team": {"id": 1}, "players": {
            "ID1": {"person": {"id": 1}, "battingOrder": "100", "position": {"code": "8", "abbreviation": "CF"}},
            "ID2": {"person": {"id": 2}, "battingOrder": "901", "position": {"code": "1", "abbreviation": "P"}},
            "ID3": {"person": {"id": 3}, "position": {"code": "1", "abbreviation": "P"}},
            "ID4": {"person": {"id": 4}, "battingOrder": "402", "position": {"code": "3", "abbreviation": "1B"}},
        }},
        "away": {"team": {"id": 2}, "players": {
            "ID5": {"person": {"id": 5}, "battingOrder": "100", "position": {"code": "6"}},
        }},
    }}
    observations = observations_from_boxscore(box, 1, "2025-06-01")
    assert sorted((o.player_id, o.slot, o.is_pitcher_position) for o in observations) == [
        (1, 1, False), (2, 9, True), (4, 4, False)]
    assert all(o.game_date == "2025-06-01" for o in observations)
    assert observations_from_boxscore({}, 1, "2025-06-01") == []


def test_flagged_pitchers_are_left_out_of_profiles():
    box = {"teams": {"away": {"team": {"id": 1}, "players": {
        "ID1": {"person": {"id": 1}, "battingOrder": "300", "position": {"code": "5", "abbreviation": "3B"}},
        "ID2": {"person": {"id": 2}, "battingOrder": "900", "position": {"code": "1", "abbreviation": "P"}},
        "ID3": {"person": {"id": 3}, "battingOrder": "800", "position": {"code": "P"}},
    }}}}
    observations = observations_from_boxscore(box, 1, "2025-06-01")
    assert {o.player_id for o in observations if o.is_pitcher_position} == {2, 3}
    profiles = build_lineup_profiles(observations)
    assert set(profiles) == {1}
    assert profiles[1].projected_slot() == 3
