import pytest

from hitter_matchups.models.h2h_grid import (
    H2H_GRID_POINTS,
    H2H_OPS_BINS,
    h2h_points,
    h2h_weight,
    validate_grid,
)


def test_exact_cells():
    assert h2h_weight(1, 0.2) == pytest.approx(0.14)
    assert h2h_weight(8, 0.85) == pytest.approx(0.18)
    assert h2h_weight(25, 2.0) == pytest.approx(0.30)
    assert h2h_weight(2, 1.4) == pytest.approx(0.24)


def test_interpolates_between_bins():
    # AB 5: 0.9 -> 20, 0.95 -> 20, 1.0 -> 23
    assert h2h_points(5, 0.975) == pytest.approx(21.5)
    # AB 2: 1.2 -> 18, 1.4 -> 24
    assert h2h_points(2, 1.3) == pytest.approx(21.0)


@pytest.mark.parametrize("at_bats, row", [(0, 1), (-3, 1), (None, 1), (0.4, 1), (25, 25), (60, 25), (7.6, 8), (2.5, 3)])
def test_at_bats_clamped_and_rounded(at_bats, row):
    assert h2h_points(at_bats, 0.2) == H2H_GRID_POINTS[row - 1][0]


def test_ops_clamped_to_bin_range():
    assert h2h_weight(10, 0.05) == h2h_weight(10, 0.2)
    assert h2h_weight(10, 3.5) == h2h_weight(10, 2.0)


@pytest.mark.parametrize("ops", [None, "NA", float("nan")])
def test_missing_ops_uses_league_baseline(ops):
    assert h2h_weight(6, ops) == pytest.approx(h2h_weight(6, 0.72))


def test_monotone_in_ops_and_bounded():
    grid = [i / 100 for i in range(0, 251)]
    for ab in range(1, 26):
        shares = [h2h_weight(ab, ops) for ops in grid]
        assert all(0.0 <= s <= 0.30 for s in shares)
        assert all(b >= a - 1e-12 for a, b in zip(shares, shares[1:])), f"AB {ab}"


def test_validate_grid_rejects_malformed_tables():
    with pytest.raises(ValueError):
        validate_grid(grid=H2H_GRID_POINTS[:-1])
    with pytest.raises(ValueError):
        validate_grid(grid=tuple(row[:-1] for row in H2H_GRID_POINTS))
    with pytest.raises(ValueError):
        validate_grid(bins=tuple(reversed(H2H_OPS_BINS)))
    bad_row = (14, 14, 14, 14, 14, 16, 16, 16, 16, 17, 17, 31)
    with pytest.raises(ValueError):
        validate_grid(grid=(bad_row,) + H2H_GRID_POINTS[1:])
    dipping = (10, 11, 13, 13, 14, 16, 16, 15, 17, 18, 24, 29)
    with pytest.raises(ValueError):
        validate_grid(grid=(dipping,) + H2H_GRID_POINTS[1:])
