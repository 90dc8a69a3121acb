"""tubecoins.core.session

The session controller: owns the single `EconomyState` of a running game,
turns presentation intents into engine calls, keeps the two periodic tasks
(passive income, production progress) alive only while they have work, and
saves after every change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional
import logging
import time

from tubecoins.cogs.achievements.achievements import AchievementEvaluator
from tubecoins.cogs.economy.economy import Economy
from tubecoins.cogs.feed.feed import EventFeed, Listener
from tubecoins.cogs.production.production import RandomSource, VideoProduction
from tubecoins.cogs.saves.saves import OfflineReport, SaveController
from .config import GameConfig
from .errors import InsufficientFunds
from .events import JsonlEventLog
from .scheduler import Scheduler
from .state import EconomyState
from .store import SaveStore

log = logging.getLogger(__name__)

INCOME_TASK = "income"
PRODUCTION_TASK = "production"


@dataclass
class IntentResult:
    """What the presentation layer needs to render the outcome of an intent."""

    ok: bool
    balance: int
    shortfall: int = 0
    payload: Dict[str, Any] = field(default_factory=dict)


class GameSession:
    def __init__(
        self,
        *,
        economy: Economy,
        production: VideoProduction,
        achievements: AchievementEvaluator,
        saves: SaveController,
        scheduler: Scheduler,
        clock: Callable[[], float],
        config: GameConfig,
    ) -> None:
        self.economy = economy
        self.production = production
        self.achievements = achievements
        self.saves = saves
        self.scheduler = scheduler
        self.clock = clock
        self.config = config
        self.offline: Optional[OfflineReport] = None
        self.closed = False

    @classmethod
    def open(
        cls,
        *,
        store: Optional[SaveStore],
        clock: Callable[[], float] = time.time,
        rng: Optional[RandomSource] = None,
        config: Optional[GameConfig] = None,
        journal: Optional[JsonlEventLog] = None,
        listeners: Iterable[Listener] = (),
    ) -> "GameSession":
        """Load the last save and settle offline earnings before any intent."""
        config = config or GameConfig()
        feed = EventFeed(clock=clock, journal=journal)
        for listener in listeners:
            feed.subscribe(listener)

        saves = SaveController(store, feed, clock=clock, config=config)
        loaded = saves.load()
        state = loaded.state
        # the persisted snapshot is the only source for the catch-up rate
        persisted_rate = state.auto_yield_per_second
        persisted_ts = state.last_save_timestamp

        economy = Economy(state, feed, config)
        achievements = AchievementEvaluator(config.achievements)
        achievements.sync(state)
        production = VideoProduction(economy, rng=rng, config=config)

        session = cls(
            economy=economy,
            production=production,
            achievements=achievements,
            saves=saves,
            scheduler=Scheduler(clock, max_catch_up=config.offline_cap_seconds),
            clock=clock,
            config=config,
        )
        if loaded.restored:
            session.offline = saves.reconcile_offline(economy, rate=persisted_rate, last_save_timestamp=persisted_ts)
        log.info("session opened (restored=%s, reason=%s)", loaded.restored, loaded.reason or "-")
        session._sync_timers()
        saves.save(state)
        return session

    def __enter__(self) -> "GameSession":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def state(self) -> EconomyState:
        return self.economy.state

    @property
    def feed(self) -> EventFeed:
        return self.economy.feed

    @property
    def balance(self) -> int:
        return self.economy.display_balance

    # ---------------- intents ----------------
    def tap(self) -> IntentResult:
        gained = self.economy.apply_tap()
        unlocked = self.achievements.evaluate(self.economy)
        self._commit()
        return IntentResult(
            ok=True,
            balance=self.balance,
            payload={"gained": gained, "total_taps": self.state.total_taps, "unlocked": [a.id for a in unlocked]},
        )

    def buy_tap_upgrade(self) -> IntentResult:
        return self._purchase(self.economy.buy_tap_upgrade)

    def buy_auto_income_upgrade(self) -> IntentResult:
        return self._purchase(self.economy.buy_auto_upgrade)

    def _purchase(self, buy: Callable[[], Any]) -> IntentResult:
        try:
            p = buy()
        except InsufficientFunds as e:
            return IntentResult(ok=False, balance=self.balance, shortfall=e.shortfall, payload={"cost": e.cost})
        self._commit()
        return IntentResult(
            ok=True,
            balance=self.balance,
            payload={"track": p.track, "level": p.level, "yield": p.new_yield, "next_cost": p.next_cost},
        )

    def start_video_production(self) -> IntentResult:
        started = self.production.start()
        self._sync_timers()
        return IntentResult(ok=started, balance=self.balance, payload={"progress": self.production.state.progress})

    def publish_video(self, video_id: int) -> IntentResult:
        video = self.production.publish(video_id)
        if video is None:
            return IntentResult(ok=False, balance=self.balance)
        self._commit()
        return IntentResult(ok=True, balance=self.balance, payload={"video_id": video.id, "reward_coins": video.reward_coins})

    # ---------------- timers ----------------
    def pump(self, now: Optional[float] = None) -> int:
        """Deliver every timer firing due by `now` (defaults to the clock)."""
        if self.closed:
            return 0
        return self.scheduler.advance(now)

    def _on_income(self, count: int) -> None:
        # missed intervals arrive coalesced: one credit, one save
        if self.economy.accrue_passive_income(self.config.income_interval * count):
            self.saves.save(self.state)

    def _on_production(self, count: int) -> None:
        video = self.production.tick()
        if video is not None:
            self.saves.save(self.state)
        self._sync_timers()

    def _sync_timers(self) -> None:
        if self.state.auto_yield_per_second > 0:
            self.scheduler.start(INCOME_TASK, self.config.income_interval, self._on_income, coalesce=True)
        else:
            self.scheduler.cancel(INCOME_TASK)
        if self.production.in_progress:
            self.scheduler.start(PRODUCTION_TASK, self.config.production_interval, self._on_production)
        else:
            self.scheduler.cancel(PRODUCTION_TASK)

    def _commit(self) -> None:
        self._sync_timers()
        self.saves.save(self.state)

    def close(self) -> None:
        if self.closed:
            return
        self.scheduler.cancel_all()
        self.saves.save(self.state)
        self.closed = True
        log.info("session closed at balance %d", self.balance)
