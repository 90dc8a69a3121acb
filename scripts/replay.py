from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import json
import typer
from rich.console import Console
from rich.table import Table

from tubecoins.core.events import KINDS, read_journal

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()


def _latest_run_dir(runs_dir: Path) -> Path:
    candidates = [p for p in runs_dir.iterdir() if p.is_dir()]
    if not candidates:
        raise typer.BadParameter(f"No runs found in {runs_dir}")
    return max(candidates, key=lambda p: p.stat().st_mtime)


@app.command()
def replay(
    runs_dir: Path = typer.Option(Path("runs"), help="Directory containing runs"),
    run_path: Optional[Path] = typer.Option(None, help="Specific run directory to replay"),
    kind: List[str] = typer.Option([], help="Filter by event kind(s), e.g. --kind video_published --kind achievement_unlocked"),
    limit: int = typer.Option(200, help="Max events to display"),
):
    """Replay journaled events from a TubeCoins run (reads events.jsonl)."""
    run_dir = run_path or _latest_run_dir(runs_dir)
    journal = run_dir / "events.jsonl"
    if not journal.exists():
        raise typer.BadParameter(f"No events.jsonl in {run_dir}")
    unknown = [k for k in kind if k not in KINDS]
    if unknown:
        raise typer.BadParameter(f"Unknown kind(s): {', '.join(unknown)}")

    events = [e for e in read_journal(journal) if not kind or e.kind in kind][:limit]

    table = Table(title=f"Replay — {run_dir.name}")
    table.add_column("Time", justify="right")
    table.add_column("Kind")
    table.add_column("Payload")
    for e in events:
        table.add_row(f"{e.ts:.1f}", e.kind, json.dumps(e.payload, ensure_ascii=False)[:80])
    console.print(table)


if __name__ == "__main__":
    app()
