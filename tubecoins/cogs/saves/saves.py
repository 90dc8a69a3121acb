"""tubecoins.cogs.saves.saves

Snapshot persistence and offline catch-up.

The whole `EconomyState` is written as one JSON blob under a fixed key after
every change. Nothing here is allowed to stop the game: store failures are
logged and journaled, unreadable saves fall back to a fresh state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import math

from pydantic import ValidationError

from tubecoins.cogs.economy.economy import Economy
from tubecoins.cogs.feed.feed import EventFeed
from tubecoins.core import events as ev
from tubecoins.core.config import GameConfig
from tubecoins.core.errors import CorruptSave, PersistenceUnavailable
from tubecoins.core.state import EconomyState, default_state
from tubecoins.core.store import SaveStore

log = logging.getLogger(__name__)


def encode_state(state: EconomyState) -> str:
    return state.model_dump_json(by_alias=True)


def decode_state(blob: str) -> EconomyState:
    try:
        return EconomyState.model_validate_json(blob)
    except ValidationError as e:
        raise CorruptSave(f"unreadable save: {e.error_count()} error(s)") from e


@dataclass
class LoadResult:
    state: EconomyState
    restored: bool
    reason: str = ""


@dataclass
class OfflineReport:
    granted: int
    elapsed_seconds: int
    rate: int

    @property
    def hours(self) -> int:
        return self.elapsed_seconds // 3600

    @property
    def minutes(self) -> int:
        return (self.elapsed_seconds % 3600) // 60


class SaveController:
    def __init__(
        self,
        store: Optional[SaveStore],
        feed: EventFeed,
        *,
        clock: Callable[[], float],
        config: GameConfig | None = None,
    ) -> None:
        self.store = store
        self.feed = feed
        self.clock = clock
        self.config = config or GameConfig()
        self.failures = 0

    @property
    def key(self) -> str:
        return self.config.save_key

    # ---------------- save ----------------
    def save(self, state: EconomyState) -> bool:
        """Stamp and persist a full snapshot; False (never an exception) on failure."""
        state.last_save_timestamp = float(self.clock())
        if self.store is None:
            return self._failed("no save store")
        try:
            self.store.write(self.key, encode_state(state))
        except PersistenceUnavailable as e:
            return self._failed(str(e))
        return True

    def _failed(self, reason: str) -> bool:
        self.failures += 1
        log.warning("save failed: %s", reason)
        self.feed.emit(ev.SAVE_FAILED, reason=reason, failures=self.failures)
        return False

    # ---------------- load ----------------
    def load(self) -> LoadResult:
        if self.store is None:
            return LoadResult(default_state(self.config), restored=False, reason="no save store")
        try:
            blob = self.store.read(self.key)
        except PersistenceUnavailable as e:
            log.warning("load failed, starting fresh: %s", e)
            return LoadResult(default_state(self.config), restored=False, reason="unavailable")
        if blob is None:
            return LoadResult(default_state(self.config), restored=False, reason="absent")
        try:
            state = decode_state(blob)
        except CorruptSave as e:
            log.warning("%s; starting fresh", e)
            return LoadResult(default_state(self.config), restored=False, reason="corrupt")
        return LoadResult(state, restored=True)

    # ---------------- offline ----------------
    def reconcile_offline(self, economy: Economy, *, rate: int, last_save_timestamp: float) -> OfflineReport:
        """Grant passive income for the time the game was closed.

        `rate` and `last_save_timestamp` must come from the persisted snapshot,
        read before anything in this session touched the state. Gaps of zero,
        negative (clock moved back) or at least the cap earn nothing.
        """
        elapsed = int(math.floor(float(self.clock()) - float(last_save_timestamp)))
        if rate <= 0 or elapsed <= 0 or elapsed >= self.config.offline_cap_seconds:
            return OfflineReport(granted=0, elapsed_seconds=max(elapsed, 0), rate=rate)

        granted = int(math.floor(elapsed * rate))
        economy.credit(granted)
        report = OfflineReport(granted=granted, elapsed_seconds=elapsed, rate=rate)
        log.info("offline earnings: %d coins for %ds at %d/s", granted, elapsed, rate)
        self.feed.emit(
            ev.OFFLINE_EARNINGS,
            amount=granted,
            elapsed_seconds=elapsed,
            hours=report.hours,
            minutes=report.minutes,
            balance=economy.display_balance,
        )
        return report
