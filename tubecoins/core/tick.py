from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
import random

from rich.console import Console
from rich.table import Table

from .config import GameConfig
from .events import JsonlEventLog
from .session import GameSession
from .store import SaveStore


console = Console()


@dataclass
class ManualClock:
    """Virtual wall clock for headless runs and tests."""

    now: float = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += float(seconds)
        return self.now


def play_second(session: GameSession, clock: ManualClock, *, taps: int, auto_buy: bool, auto_publish: bool) -> None:
    """One simulated second of a simple greedy player."""
    for _ in range(taps):
        session.tap()
    if auto_buy:
        # cheaper track first; keep buying while anything is affordable
        while True:
            s = session.state
            options = sorted(
                [(s.tap_upgrade_cost, session.buy_tap_upgrade), (s.auto_upgrade_cost, session.buy_auto_income_upgrade)],
                key=lambda kv: kv[0],
            )
            if not any(cost <= s.balance for cost, _ in options):
                break
            for cost, buy in options:
                if cost <= s.balance:
                    buy()
                    break
    if not session.production.in_progress:
        session.start_video_production()
    if auto_publish:
        for video in list(session.state.videos):
            session.publish_video(video.id)

    # deliver timer firings in production-sized steps so both tasks interleave
    step = session.config.production_interval
    target = clock.now + 1.0
    while clock.now + step <= target + 1e-9:
        clock.advance(step)
        session.pump()
    if clock.now < target:
        clock.advance(target - clock.now)
        session.pump()


def run_simulation(
    *,
    seconds: int,
    seed: int,
    run_dir: Path,
    taps_per_second: int = 5,
    auto_buy: bool = True,
    auto_publish: bool = True,
    start_at: float = 0.0,
    config: Optional[GameConfig] = None,
    report_every: int = 10,
    show: bool = True,
) -> List[Dict[str, Any]]:
    """Play a headless session on a virtual clock; returns the sampled rows.

    Artifacts in run_dir:
      - save.sqlite  : the save store
      - events.jsonl : journal of every emitted event
    """
    run_dir = Path(run_dir)
    clock = ManualClock(now=float(start_at))
    store = SaveStore(run_dir / "save.sqlite")
    journal = JsonlEventLog(run_dir / "events.jsonl")
    rows: List[Dict[str, Any]] = []
    try:
        with GameSession.open(store=store, clock=clock, rng=random.Random(seed), config=config, journal=journal) as session:
            for sec in range(1, seconds + 1):
                play_second(session, clock, taps=taps_per_second, auto_buy=auto_buy, auto_publish=auto_publish)
                if sec % max(1, report_every) == 0 or sec == seconds:
                    rows.append(snapshot_row(session, sec))
    finally:
        journal.close()
        store.close()

    if show:
        console.print(render_rows(rows, title=f"TubeCoins — {seconds}s, seed {seed}"))
    return rows


def snapshot_row(session: GameSession, second: int) -> Dict[str, Any]:
    s = session.state
    return {
        "second": second,
        "balance": session.balance,
        "taps": s.total_taps,
        "tap_yield": s.tap_yield,
        "tap_level": s.tap_upgrade_level,
        "auto_yield": s.auto_yield_per_second,
        "auto_level": s.auto_upgrade_level,
        "videos": len(s.videos),
        "made": s.videos_created,
        "achievements": sum(1 for a in s.achievements if a.unlocked),
    }


def render_rows(rows: List[Dict[str, Any]], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Sec", justify="right")
    table.add_column("Balance", justify="right")
    table.add_column("Taps", justify="right")
    table.add_column("Tap (lvl)")
    table.add_column("Auto/s (lvl)")
    table.add_column("Queue", justify="right")
    table.add_column("Made", justify="right")
    table.add_column("Ach", justify="right")
    for r in rows:
        table.add_row(
            str(r["second"]),
            str(r["balance"]),
            str(r["taps"]),
            f"{r['tap_yield']} ({r['tap_level']})",
            f"{r['auto_yield']} ({r['auto_level']})",
            str(r["videos"]),
            str(r["made"]),
            str(r["achievements"]),
        )
    return table
