from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal

from .config import GameConfig


class _Record(BaseModel):
    """Base for persisted records: snake_case in Python, camelCase on disk."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VideoItem(_Record):
    """A finished video waiting to be published."""

    id: int
    title: str
    reward_coins: int = Field(gt=0)


class AchievementState(_Record):
    id: int
    unlocked: bool = False


class EconomyState(_Record):
    """The single mutable aggregate of a game session.

    `balance` may carry a fractional part between ticks; everything shown to a
    player is floored. Counters only move forward; costs and yields only grow.
    """

    balance: float = Field(default=0.0, ge=0.0)
    total_taps: int = Field(default=0, ge=0)

    tap_yield: int = Field(default=1, ge=1)
    tap_upgrade_level: int = Field(default=0, ge=0)
    tap_upgrade_cost: int = Field(default=500, ge=1)

    auto_yield_per_second: int = Field(default=0, ge=0)
    auto_upgrade_level: int = Field(default=0, ge=0)
    auto_upgrade_cost: int = Field(default=800, ge=1)

    videos: List[VideoItem] = Field(default_factory=list)
    videos_created: int = Field(default=0, ge=0)
    achievements: List[AchievementState] = Field(default_factory=list)

    last_save_timestamp: float = 0.0

    def video(self, video_id: int) -> VideoItem | None:
        for v in self.videos:
            if v.id == video_id:
                return v
        return None

    def is_unlocked(self, achievement_id: int) -> bool:
        for a in self.achievements:
            if a.id == achievement_id:
                return a.unlocked
        return False


class ProductionState(BaseModel):
    """Single production slot: idle, or in progress at 0..100 percent."""

    status: Literal["idle", "in_progress"] = "idle"
    progress: int = Field(default=0, ge=0, le=100)

    @property
    def in_progress(self) -> bool:
        return self.status == "in_progress"


def default_state(config: GameConfig | None = None) -> EconomyState:
    """Fresh-game baseline: nothing earned, every achievement locked.

    First upgrade prices come from the configured tracks.
    """
    config = config or GameConfig()
    return EconomyState(
        tap_upgrade_cost=config.tap_track.first_cost,
        auto_upgrade_cost=config.auto_track.first_cost,
        achievements=[AchievementState(id=i, unlocked=False) for i in config.achievement_ids()],
    )
