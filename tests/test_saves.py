from __future__ import annotations

from pathlib import Path
import json
import tempfile
import unittest

from tubecoins.cogs.economy.economy import Economy
from tubecoins.cogs.feed.feed import EventFeed
from tubecoins.cogs.saves.saves import SaveController, decode_state, encode_state
from tubecoins.core.errors import CorruptSave, PersistenceUnavailable
from tubecoins.core.state import AchievementState, EconomyState, VideoItem
from tubecoins.core.store import SaveStore
from tubecoins.core.tick import ManualClock


class _BrokenStore:
    def read(self, key):
        raise PersistenceUnavailable("disk gone")

    def write(self, key, blob):
        raise PersistenceUnavailable("disk gone")


def _sample_state() -> EconomyState:
    return EconomyState(
        balance=1234.5,
        total_taps=321,
        tap_yield=300,
        tap_upgrade_level=2,
        tap_upgrade_cost=1500,
        auto_yield_per_second=15,
        auto_upgrade_level=2,
        auto_upgrade_cost=2200,
        videos=[VideoItem(id=3, title="Video #3", reward_coins=12), VideoItem(id=4, title="Video #4", reward_coins=59)],
        videos_created=4,
        achievements=[AchievementState(id=1, unlocked=True), AchievementState(id=2, unlocked=True), AchievementState(id=3)],
    )


class _StoreCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = SaveStore(Path(self._tmp.name) / "save.sqlite")
        self.clock = ManualClock(now=10_000.0)
        self.feed = EventFeed(clock=self.clock)
        self.events = []
        self.feed.subscribe(self.events.append)
        self.saves = SaveController(self.store, self.feed, clock=self.clock)

    def tearDown(self):
        self.store.close()
        self._tmp.cleanup()


class TestSaveLoad(_StoreCase):
    def test_round_trip(self):
        state = _sample_state()
        self.assertTrue(self.saves.save(state))
        self.assertEqual(state.last_save_timestamp, 10_000.0)
        loaded = self.saves.load()
        self.assertTrue(loaded.restored)
        self.assertEqual(loaded.state, state)

    def test_persisted_layout_is_camel_case(self):
        data = json.loads(encode_state(_sample_state()))
        for key in ("balance", "totalTaps", "tapYield", "tapUpgradeLevel", "tapUpgradeCost",
                    "autoYieldPerSecond", "autoUpgradeLevel", "autoUpgradeCost",
                    "videos", "achievements", "lastSaveTimestamp"):
            self.assertIn(key, data)
        self.assertEqual(data["videos"][0], {"id": 3, "title": "Video #3", "rewardCoins": 12})
        self.assertEqual(data["achievements"][0], {"id": 1, "unlocked": True})

    def test_absent_save_gives_defaults(self):
        loaded = self.saves.load()
        self.assertFalse(loaded.restored)
        self.assertEqual(loaded.reason, "absent")
        s = loaded.state
        self.assertEqual((s.balance, s.tap_yield, s.total_taps, s.auto_yield_per_second), (0, 1, 0, 0))
        self.assertEqual((s.tap_upgrade_cost, s.auto_upgrade_cost), (500, 800))
        self.assertEqual([a.unlocked for a in s.achievements], [False] * 5)

    def test_corrupt_save_gives_defaults(self):
        self.store.write(self.saves.key, "{not json")
        with self.assertLogs("tubecoins.cogs.saves.saves", level="WARNING"):
            loaded = self.saves.load()
        self.assertFalse(loaded.restored)
        self.assertEqual(loaded.reason, "corrupt")

    def test_out_of_range_values_are_corrupt(self):
        with self.assertRaises(CorruptSave):
            decode_state(json.dumps({"balance": -5}))

    def test_newer_save_supersedes(self):
        state = _sample_state()
        self.saves.save(state)
        state.balance = 1.0
        self.clock.advance(5)
        self.saves.save(state)
        loaded = self.saves.load()
        self.assertEqual(loaded.state.balance, 1.0)
        self.assertEqual(loaded.state.last_save_timestamp, 10_005.0)


class TestUnavailableStore(unittest.TestCase):
    def setUp(self):
        self.feed = EventFeed(clock=lambda: 0.0)
        self.events = []
        self.feed.subscribe(self.events.append)
        self.saves = SaveController(_BrokenStore(), self.feed, clock=lambda: 50.0)

    def test_save_failure_is_not_fatal(self):
        with self.assertLogs("tubecoins.cogs.saves.saves", level="WARNING"):
            ok = self.saves.save(EconomyState())
        self.assertFalse(ok)
        self.assertEqual(self.events[-1].kind, "save_failed")

    def test_load_failure_gives_defaults(self):
        with self.assertLogs("tubecoins.cogs.saves.saves", level="WARNING"):
            loaded = self.saves.load()
        self.assertFalse(loaded.restored)
        self.assertEqual(loaded.reason, "unavailable")

    def test_missing_store(self):
        saves = SaveController(None, self.feed, clock=lambda: 0.0)
        self.assertEqual(saves.load().reason, "no save store")
        with self.assertLogs("tubecoins.cogs.saves.saves", level="WARNING"):
            self.assertFalse(saves.save(EconomyState()))


class TestOfflineReconciliation(_StoreCase):
    def _economy(self, rate):
        return Economy(EconomyState(auto_yield_per_second=rate), self.feed)

    def test_grants_rate_times_gap(self):
        eco = self._economy(10)
        report = self.saves.reconcile_offline(eco, rate=10, last_save_timestamp=self.clock.now - 125)
        self.assertEqual(report.granted, 1250)
        self.assertEqual(eco.state.balance, 1250)
        self.assertEqual(self.events[-1].kind, "offline_earnings")
        self.assertEqual(self.events[-1].payload["elapsed_seconds"], 125)

    def test_fractional_gap_is_floored(self):
        eco = self._economy(10)
        report = self.saves.reconcile_offline(eco, rate=10, last_save_timestamp=self.clock.now - 2.9)
        self.assertEqual(report.granted, 20)

    def test_gap_beyond_one_day_is_forfeited(self):
        eco = self._economy(10)
        report = self.saves.reconcile_offline(eco, rate=10, last_save_timestamp=self.clock.now - 90_001)
        self.assertEqual(report.granted, 0)
        self.assertEqual(eco.state.balance, 0)
        self.assertEqual(self.events, [])

    def test_exactly_one_day_is_forfeited(self):
        eco = self._economy(10)
        report = self.saves.reconcile_offline(eco, rate=10, last_save_timestamp=self.clock.now - 86_400)
        self.assertEqual(report.granted, 0)

    def test_clock_moved_back_grants_nothing(self):
        eco = self._economy(10)
        report = self.saves.reconcile_offline(eco, rate=10, last_save_timestamp=self.clock.now + 300)
        self.assertEqual(report.granted, 0)
        self.assertEqual(eco.state.balance, 0)

    def test_no_auto_income_grants_nothing(self):
        eco = self._economy(0)
        report = self.saves.reconcile_offline(eco, rate=0, last_save_timestamp=self.clock.now - 600)
        self.assertEqual(report.granted, 0)

    def test_hours_and_minutes(self):
        eco = self._economy(1)
        report = self.saves.reconcile_offline(eco, rate=1, last_save_timestamp=self.clock.now - 3725)
        self.assertEqual((report.hours, report.minutes), (1, 2))
        self.assertEqual(self.events[-1].payload["hours"], 1)
        self.assertEqual(self.events[-1].payload["minutes"], 2)


if __name__ == "__main__":
    unittest.main()
