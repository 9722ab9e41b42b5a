"""
Head-to-head calibration grid.

Rows are at-bats vs the pitcher (1..25), columns are OPS bins. Each cell is
the number of points (out of 30) that batter-vs-pitcher history is worth at
that sample size and quality. The lookup interpolates across OPS bins and
returns a weight share in [0, 0.30].
"""
from .normalization import clamp, round_half_up, to_number

OPS_BASELINE = 0.72  # league-ish baseline
MAX_SHARE = 0.30
MAX_AT_BATS = 25

H2H_OPS_BINS = (0.2, 0.4, 0.6, 0.7, 0.8, 0.85, 0.9, 0.95, 1.0, 1.2, 1.4, 2.0)
H2H_GRID_POINTS = (
    (14, 14, 14, 14, 14, 16, 16, 16, 16, 17, 17, 19),  # 1
    (10, 11, 13, 13, 14, 16, 16, 17, 17, 18, 24, 29),  # 2
    (10, 11, 12, 12, 14, 16, 19, 19, 19, 20, 24, 29),  # 3
    (6, 7, 11, 11, 14, 17, 20, 20, 20, 22, 28, 30),  # 4
    (5, 7, 10, 11, 14, 17, 20, 20, 23, 25, 28, 30),  # 5
    (5, 7, 8, 11, 14, 17, 20, 20, 24, 26, 29, 30),  # 6
    (5, 7, 7, 10, 14, 17, 20, 22, 25, 26, 29, 30),  # 7
    (4, 6, 7, 10, 14, 18, 20, 22, 25, 28, 29, 30),  # 8
    (4, 6, 7, 10, 14, 18, 20, 22, 25, 28, 29, 30),  # 9
    (4, 5, 7, 10, 14, 18, 20, 22, 26, 28, 29, 30),  # 10
    (2, 4, 7, 10, 14, 18, 20, 22, 26, 28, 29, 30),  # 11
    (2, 4, 7, 8, 14, 19, 20, 22, 28, 28, 29, 30),  # 12
    (2, 4, 7, 8, 14, 19, 22, 23, 28, 29, 29, 30),  # 13
    (2, 2, 7, 8, 14, 19, 22, 23, 28, 29, 30, 30),  # 14
    (2, 2, 6, 8, 14, 19, 22, 23, 28, 29, 30, 30),  # 15
    (2, 2, 6, 7, 14, 20, 23, 23, 29, 29, 30, 30),  # 16
    (2, 2, 6, 7, 14, 20, 23, 24, 29, 29, 30, 30),  # 17
    (2, 2, 5, 7, 14, 20, 23, 24, 29, 30, 30, 30),  # 18
    (2, 2, 5, 7, 14, 22, 23, 25, 29, 30, 30, 30),  # 19
    (1, 1, 5, 7, 14, 22, 24, 25, 29, 30, 30, 30),  # 20
    (1, 1, 4, 6, 14, 22, 24, 26, 30, 30, 30, 30),  # 21
    (1, 1, 4, 6, 14, 22, 24, 26, 30, 30, 30, 30),  # 22
    (1, 1, 4, 6, 14, 22, 25, 26, 30, 30, 30, 30),  # 23
    (1, 1, 4, 6, 14, 22, 25, 28, 30, 30, 30, 30),  # 24
    (1, 1, 4, 6, 14, 22, 25, 28, 30, 30, 30, 30),  # 25
)


def validate_grid(bins=H2H_OPS_BINS, grid=H2H_GRID_POINTS, max_points=MAX_SHARE * 100):
    """Raise ValueError if the calibration table is malformed."""
    if len(grid) != MAX_AT_BATS:
        raise ValueError(f"H2H grid needs {MAX_AT_BATS} rows, got {len(grid)}")
    if any(hi <= lo for lo, hi in zip(bins, bins[1:])):
        raise ValueError(f"H2H OPS bins must be strictly increasing: {bins}")
    for ab, row in enumerate(grid, start=1):
        if len(row) != len(bins):
            raise ValueError(
                f"H2H grid row {ab} has {len(row)} cells, expected {len(bins)}")
        if any(cell < 0 or cell > max_points for cell in row):
            raise ValueError(f"H2H grid row {ab} has a cell outside [0, {max_points}]")
        if any(b < a for a, b in zip(row, row[1:])):
            raise ValueError(f"H2H grid row {ab} must not decrease as OPS rises")


validate_grid()


def _bin_index(ops: float) -> int:
    for k in range(len(H2H_OPS_BINS) - 1):
        if H2H_OPS_BINS[k] <= ops <= H2H_OPS_BINS[k + 1]:
            return k
    return 0


def h2h_points(at_bats, ops) -> float:
    """Interpolated grid points (0..30) for this AB/OPS pair."""
    ab = to_number(at_bats)
    if ab is None:
        ab = 0
    ops = to_number(ops)
    if ops is None:
        ops = OPS_BASELINE

    # AB are integral, so rows need no interpolation; 0 and below map to row 1
    row = H2H_GRID_POINTS[int(clamp(round_half_up(ab), 1, MAX_AT_BATS)) - 1]

    ops = clamp(ops, H2H_OPS_BINS[0], H2H_OPS_BINS[-1])
    i = _bin_index(ops)
    lo, hi = H2H_OPS_BINS[i], H2H_OPS_BINS[i + 1]
    u = (ops - lo) / (hi - lo)
    return row[i] + u * (row[i + 1] - row[i])


def h2h_weight(at_bats, ops) -> float:
    """Share of the composite score carried by head-to-head history, in [0, 0.30]."""
    return clamp(h2h_points(at_bats, ops) / 100, 0.0, MAX_SHARE)
