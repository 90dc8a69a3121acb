from __future__ import annotations

import unittest

from tubecoins.cogs.economy.ladder import ladder_preview, next_cost, next_yield
from tubecoins.core.config import AUTO_TRACK, TAP_TRACK


class TestLadder(unittest.TestCase):
    def test_level_zero_is_flat_first_unlock(self):
        # the first tap rung jumps from 1 to 50, not 1 + 250
        self.assertEqual(next_yield(TAP_TRACK, 0, 1), 50)
        self.assertEqual(next_cost(TAP_TRACK, 0, 500), 1000)
        self.assertEqual(next_yield(AUTO_TRACK, 0, 0), 5)
        self.assertEqual(next_cost(AUTO_TRACK, 0, 800), 1500)

    def test_linear_after_first_rung(self):
        self.assertEqual(next_yield(TAP_TRACK, 1, 50), 300)
        self.assertEqual(next_cost(TAP_TRACK, 1, 1000), 1500)
        self.assertEqual(next_yield(AUTO_TRACK, 3, 25), 35)
        self.assertEqual(next_cost(AUTO_TRACK, 3, 2900), 3600)

    def test_strictly_increasing_on_both_tracks(self):
        for track, base in ((TAP_TRACK, 1), (AUTO_TRACK, 0)):
            rows = ladder_preview(track, 30, base_yield=base)
            for (_, y0, c0), (_, y1, c1) in zip(rows, rows[1:]):
                self.assertGreater(y1, y0, track.name)
                self.assertGreater(c1, c0, track.name)

    def test_preview_starts_at_first_cost(self):
        rows = ladder_preview(TAP_TRACK, 3, base_yield=1)
        self.assertEqual(rows, [(0, 1, 500), (1, 50, 1000), (2, 300, 1500)])


if __name__ == "__main__":
    unittest.main()
