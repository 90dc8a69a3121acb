from __future__ import annotations

from typing import Optional, Protocol
import random

from tubecoins.cogs.economy.economy import Economy
from tubecoins.core import events as ev
from tubecoins.core.config import GameConfig
from tubecoins.core.state import ProductionState, VideoItem


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


class VideoProduction:
    """One global production slot feeding the queue of finished videos.

    Transitions:
      idle --start()--> in_progress(0)
      in_progress(p) --tick()--> in_progress(min(p + step, 100))
      in_progress(100) --tick()--> idle, plus one new VideoItem in the queue
    """

    def __init__(self, economy: Economy, *, rng: Optional[RandomSource] = None, config: GameConfig | None = None) -> None:
        self.economy = economy
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.config = config or economy.config
        self.state = ProductionState()

    @property
    def in_progress(self) -> bool:
        return self.state.in_progress

    def start(self) -> bool:
        if self.state.in_progress:
            return False
        self.state = ProductionState(status="in_progress", progress=0)
        self.economy.feed.emit(ev.PRODUCTION_STARTED, progress=0)
        return True

    def tick(self) -> Optional[VideoItem]:
        """Advance one step; returns the new video on the completing tick."""
        if not self.state.in_progress:
            return None
        if self.state.progress >= 100:
            return self._complete()
        self.state.progress = min(self.state.progress + self.config.video_step, 100)
        return None

    def _complete(self) -> VideoItem:
        s = self.economy.state
        ordinal = s.videos_created + 1
        reward = int(self.rng.randint(self.config.video_reward_min, self.config.video_reward_max))
        video = VideoItem(id=ordinal, title=f"{self.config.video_title_prefix}{ordinal}", reward_coins=reward)
        s.videos.append(video)
        s.videos_created = ordinal
        self.state = ProductionState()
        self.economy.feed.emit(ev.VIDEO_COMPLETED, video_id=video.id, title=video.title, reward_coins=reward)
        return video

    def publish(self, video_id: int) -> Optional[VideoItem]:
        s = self.economy.state
        video = s.video(video_id)
        if video is None:
            return None
        s.videos.remove(video)
        self.economy.credit(video.reward_coins)
        self.economy.feed.emit(
            ev.VIDEO_PUBLISHED,
            video_id=video.id,
            reward_coins=video.reward_coins,
            balance=self.economy.display_balance,
        )
        return video
