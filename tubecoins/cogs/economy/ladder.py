from __future__ import annotations

from typing import List, Tuple

from tubecoins.core.config import UpgradeTrack


def next_yield(track: UpgradeTrack, level: int, current_yield: int) -> int:
    """Yield after buying `level` -> `level + 1`.

    Level 0 jumps to the flat first-unlock value regardless of the current
    yield; afterwards growth is linear.
    """
    if level == 0:
        return track.first_yield
    return int(current_yield) + track.yield_step


def next_cost(track: UpgradeTrack, level: int, current_cost: int) -> int:
    """Price of the following rung after buying `level` -> `level + 1`.

    The first rung always costs `first_cost`, so the second is
    `first_cost + cost_step` no matter what was stored.
    """
    if level == 0:
        return track.first_cost + track.cost_step
    return int(current_cost) + track.cost_step


def ladder_preview(track: UpgradeTrack, levels: int, *, base_yield: int = 0) -> List[Tuple[int, int, int]]:
    """(level, yield, price of the next purchase) for the first `levels` rungs."""
    rows: List[Tuple[int, int, int]] = []
    y = int(base_yield)
    c = track.first_cost
    for lvl in range(levels):
        rows.append((lvl, y, c))
        y = next_yield(track, lvl, y)
        c = next_cost(track, lvl, c)
    return rows
