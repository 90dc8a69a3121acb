from __future__ import annotations

import math


class TubeCoinsError(Exception):
    """Base class for engine errors."""


class InsufficientFunds(TubeCoinsError):
    """A spend was attempted with a balance below its cost.

    `shortfall` is the number of whole coins still missing.
    """

    def __init__(self, cost: int, balance: float) -> None:
        self.cost = int(cost)
        self.balance = float(balance)
        self.shortfall = int(math.ceil(self.cost - self.balance))
        super().__init__(f"need {self.cost}, have {math.floor(self.balance)} (short {self.shortfall})")


class PersistenceUnavailable(TubeCoinsError):
    """The save store could not be read or written."""


class CorruptSave(TubeCoinsError):
    """A save blob exists but cannot be parsed into a game state."""
