from __future__ import annotations

from pathlib import Path
import json
import tempfile
import unittest

from tubecoins.core.config import GameConfig, load_config


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = load_config(None)
        self.assertEqual(cfg.tap_track.first_cost, 500)
        self.assertEqual(cfg.auto_track.cost_step, 700)
        self.assertEqual((cfg.video_reward_min, cfg.video_reward_max), (10, 59))
        self.assertEqual(cfg.offline_cap_seconds, 86_400)
        self.assertEqual(cfg.achievement_ids(), [1, 2, 3, 4, 5])
        self.assertTrue(all(a.reward == a.target * 2 for a in cfg.achievements))

    def test_missing_file_means_defaults(self):
        self.assertEqual(load_config(Path("/nonexistent/tubecoins.json")), GameConfig())

    def test_file_overrides(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cfg.json"
            path.write_text(json.dumps({"video_reward_min": 1, "video_reward_max": 2, "offline_cap_seconds": 3600}), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual((cfg.video_reward_min, cfg.video_reward_max, cfg.offline_cap_seconds), (1, 2, 3600))
            self.assertEqual(cfg.tap_track.first_cost, 500)

    def test_invalid_file_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cfg.json"
            path.write_text(json.dumps({"video_reward_min": 60, "video_reward_max": 10}), encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(path)

    def test_duplicate_achievement_ids_rejected(self):
        a = {"id": 1, "title": "x", "target": 5}
        with self.assertRaises(ValueError):
            GameConfig.model_validate({"achievements": [a, a]})


if __name__ == "__main__":
    unittest.main()
