from __future__ import annotations

from typing import Any, Callable, List, Optional

from tubecoins.core.events import GameEvent, JsonlEventLog

Listener = Callable[[GameEvent], None]


class EventFeed:
    """Fan-out of engine events to the presentation layer and the journal."""

    def __init__(self, clock: Callable[[], float], journal: Optional[JsonlEventLog] = None):
        self.clock = clock
        self.journal = journal
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, kind: str, **payload: Any) -> GameEvent:
        event = GameEvent(kind=kind, ts=float(self.clock()), payload=payload)
        if self.journal is not None:
            self.journal.write(event)
        for listener in list(self._listeners):
            listener(event)
        return event
