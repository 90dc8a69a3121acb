from __future__ import annotations

from dataclasses import dataclass
import math

from tubecoins.cogs.economy.ladder import next_cost, next_yield
from tubecoins.cogs.feed.feed import EventFeed
from tubecoins.core import events as ev
from tubecoins.core.config import GameConfig, UpgradeTrack
from tubecoins.core.errors import InsufficientFunds
from tubecoins.core.state import EconomyState


@dataclass
class Purchase:
    track: str
    level: int
    new_yield: int
    next_cost: int
    paid: int


class Economy:
    """Currency rules over one `EconomyState`.

    All methods run to completion synchronously, so a spend and the upgrade it
    pays for are committed together or not at all.
    """

    def __init__(self, state: EconomyState, feed: EventFeed, config: GameConfig | None = None) -> None:
        self.state = state
        self.feed = feed
        self.config = config or GameConfig()

    @property
    def display_balance(self) -> int:
        return int(math.floor(self.state.balance))

    # ---------------- income ----------------
    def apply_tap(self) -> int:
        s = self.state
        gained = s.tap_yield
        s.balance += gained
        s.total_taps += 1
        self.feed.emit(ev.TAP, gained=gained, balance=self.display_balance, total_taps=s.total_taps)
        return gained

    def accrue_passive_income(self, elapsed_seconds: int) -> int:
        rate = self.state.auto_yield_per_second
        if rate <= 0 or elapsed_seconds <= 0:
            return 0
        amount = rate * int(elapsed_seconds)
        self.state.balance += amount
        return amount

    def credit(self, amount: float) -> None:
        if amount < 0:
            raise ValueError("credit amount must be non-negative")
        self.state.balance += amount

    # ---------------- spending ----------------
    def spend(self, amount: int) -> None:
        """Deduct `amount` or raise `InsufficientFunds` leaving state untouched."""
        if amount <= 0:
            raise ValueError("spend amount must be positive")
        if self.state.balance < amount:
            raise InsufficientFunds(cost=amount, balance=self.state.balance)
        self.state.balance -= amount

    def buy_tap_upgrade(self) -> Purchase:
        return self._buy(self.config.tap_track, "tap")

    def buy_auto_upgrade(self) -> Purchase:
        return self._buy(self.config.auto_track, "auto")

    def _buy(self, track: UpgradeTrack, which: str) -> Purchase:
        s = self.state
        if which == "tap":
            level, cur_yield, cost = s.tap_upgrade_level, s.tap_yield, s.tap_upgrade_cost
        else:
            level, cur_yield, cost = s.auto_upgrade_level, s.auto_yield_per_second, s.auto_upgrade_cost

        try:
            self.spend(cost)
        except InsufficientFunds as e:
            self.feed.emit(
                ev.INSUFFICIENT_FUNDS,
                track=which,
                cost=e.cost,
                balance=self.display_balance,
                shortfall=e.shortfall,
            )
            raise

        new_yield = next_yield(track, level, cur_yield)
        new_cost = next_cost(track, level, cost)
        if which == "tap":
            s.tap_upgrade_level = level + 1
            s.tap_yield = new_yield
            s.tap_upgrade_cost = new_cost
        else:
            s.auto_upgrade_level = level + 1
            s.auto_yield_per_second = new_yield
            s.auto_upgrade_cost = new_cost

        self.feed.emit(
            ev.UPGRADE_PURCHASED,
            track=which,
            level=level + 1,
            new_yield=new_yield,
            next_cost=new_cost,
            paid=cost,
            balance=self.display_balance,
        )
        return Purchase(track=which, level=level + 1, new_yield=new_yield, next_cost=new_cost, paid=cost)
