"""tubecoins.core.config

Game tuning knobs. Defaults reproduce the shipped economy; a JSON file can
override any of them for experiments.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import json
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

log = logging.getLogger(__name__)


class UpgradeTrack(BaseModel):
    """One purchasable ladder.

    Level 0 buys a flat first unlock (`first_yield` for `first_cost`); every
    later level adds `yield_step` / `cost_step` to the current values.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    first_yield: int = Field(gt=0)
    yield_step: int = Field(gt=0)
    first_cost: int = Field(gt=0)
    cost_step: int = Field(gt=0)


class AchievementDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str = ""
    target: int = Field(gt=0)
    reward_multiplier: int = Field(default=2, ge=0)

    @property
    def reward(self) -> int:
        return self.target * self.reward_multiplier


TAP_TRACK = UpgradeTrack(name="tap", first_yield=50, yield_step=250, first_cost=500, cost_step=500)
AUTO_TRACK = UpgradeTrack(name="auto", first_yield=5, yield_step=10, first_cost=800, cost_step=700)

DEFAULT_ACHIEVEMENTS: List[AchievementDef] = [
    AchievementDef(id=1, title="Новичок", description="Сделай 10 тапов", target=10),
    AchievementDef(id=2, title="Любитель", description="Сделай 100 тапов", target=100),
    AchievementDef(id=3, title="Профи", description="Сделай 500 тапов", target=500),
    AchievementDef(id=4, title="Мастер", description="Сделай 1000 тапов", target=1000),
    AchievementDef(id=5, title="Легенда", description="Сделай 5000 тапов", target=5000),
]


class GameConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    save_key: str = "tubecoins-save"

    tap_track: UpgradeTrack = TAP_TRACK
    auto_track: UpgradeTrack = AUTO_TRACK

    # production: +step percent every production_interval seconds
    video_step: int = Field(default=5, gt=0, le=100)
    video_reward_min: int = Field(default=10, gt=0)
    video_reward_max: int = Field(default=59, gt=0)
    video_title_prefix: str = "Video #"

    achievements: List[AchievementDef] = Field(default_factory=lambda: list(DEFAULT_ACHIEVEMENTS))

    offline_cap_seconds: int = Field(default=86_400, gt=0)
    income_interval: int = Field(default=1, gt=0)
    production_interval: float = Field(default=0.1, gt=0)

    @model_validator(mode="after")
    def _check(self) -> "GameConfig":
        if self.video_reward_min > self.video_reward_max:
            raise ValueError("video_reward_min must not exceed video_reward_max")
        ids = [a.id for a in self.achievements]
        if len(ids) != len(set(ids)):
            raise ValueError("achievement ids must be unique")
        return self

    def achievement_ids(self) -> List[int]:
        return sorted(a.id for a in self.achievements)


def load_config(path: Optional[Path] = None) -> GameConfig:
    """Read a JSON override file; a missing path means stock settings.

    A malformed file is an operator error and is raised, not ignored.
    """
    if path is None:
        return GameConfig()
    path = Path(path)
    if not path.exists():
        log.info("config %s not found, using defaults", path)
        return GameConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GameConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"invalid config {path}: {e}") from e
