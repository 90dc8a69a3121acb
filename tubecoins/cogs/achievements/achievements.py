from __future__ import annotations

from typing import Dict, Iterable, List

from tubecoins.cogs.economy.economy import Economy
from tubecoins.core import events as ev
from tubecoins.core.config import AchievementDef
from tubecoins.core.state import AchievementState, EconomyState


class AchievementEvaluator:
    """Unlocks tap-count achievements, each exactly once.

    Definitions are visited in ascending id so that several thresholds crossed
    at once unlock (and pay out) in a fixed order.
    """

    def __init__(self, definitions: Iterable[AchievementDef]) -> None:
        self.definitions: List[AchievementDef] = sorted(definitions, key=lambda d: d.id)
        self._by_id: Dict[int, AchievementDef] = {d.id: d for d in self.definitions}

    def sync(self, state: EconomyState) -> None:
        """Align `state.achievements` with the definitions.

        Unknown ids from an old save are dropped, new ones start locked, and
        the list ends up sorted by id.
        """
        known = {a.id: a.unlocked for a in state.achievements if a.id in self._by_id}
        state.achievements = [AchievementState(id=d.id, unlocked=known.get(d.id, False)) for d in self.definitions]

    def evaluate(self, economy: Economy) -> List[AchievementDef]:
        state = economy.state
        if [a.id for a in state.achievements] != [d.id for d in self.definitions]:
            self.sync(state)
        unlocked: List[AchievementDef] = []
        flags = {a.id: a for a in state.achievements}
        for d in self.definitions:
            slot = flags[d.id]
            if slot.unlocked or state.total_taps < d.target:
                continue
            slot.unlocked = True
            economy.credit(d.reward)
            unlocked.append(d)
            economy.feed.emit(
                ev.ACHIEVEMENT_UNLOCKED,
                achievement_id=d.id,
                target=d.target,
                reward=d.reward,
                balance=economy.display_balance,
            )
        return unlocked

    def progress(self, state: EconomyState) -> List[Dict[str, object]]:
        """Per-achievement view for status screens."""
        return [
            {
                "id": d.id,
                "title": d.title,
                "target": d.target,
                "unlocked": state.is_unlocked(d.id),
                "taps": min(state.total_taps, d.target),
            }
            for d in self.definitions
        ]
