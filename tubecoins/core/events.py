from __future__ import annotations

from typing import IO, Any, Dict, List
from pathlib import Path
import json

from pydantic import BaseModel, Field

# Event kinds the engine can emit; payloads are plain numbers/ids only.
TAP = "tap"
UPGRADE_PURCHASED = "upgrade_purchased"
INSUFFICIENT_FUNDS = "insufficient_funds"
PRODUCTION_STARTED = "production_started"
VIDEO_COMPLETED = "video_completed"
VIDEO_PUBLISHED = "video_published"
ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
OFFLINE_EARNINGS = "offline_earnings"
SAVE_FAILED = "save_failed"

KINDS: List[str] = [
    TAP,
    UPGRADE_PURCHASED,
    INSUFFICIENT_FUNDS,
    PRODUCTION_STARTED,
    VIDEO_COMPLETED,
    VIDEO_PUBLISHED,
    ACHIEVEMENT_UNLOCKED,
    OFFLINE_EARNINGS,
    SAVE_FAILED,
]


class GameEvent(BaseModel):
    """Something the presentation layer may want to render."""

    kind: str
    ts: float
    payload: Dict[str, Any] = Field(default_factory=dict)


class JsonlEventLog:
    """Append-only JSONL journal of game events.

    Each call to `write` appends a one-line JSON object and flushes the file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._fh: IO[str] = self.path.open("a", encoding="utf-8")

    def write(self, event: GameEvent) -> None:
        json.dump(event.model_dump(), self._fh, ensure_ascii=False)
        self._fh.write("\n")
        self._fh.flush()

    def close(self) -> None:
        self._fh.close()


def read_journal(path: Path) -> List[GameEvent]:
    """Load a journal, skipping blank or damaged lines."""
    out: List[GameEvent] = []
    path = Path(path)
    if not path.exists():
        return out
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                out.append(GameEvent.model_validate_json(line))
            except ValueError:
                # tolerate a torn last line after a crash
                continue
    return out
