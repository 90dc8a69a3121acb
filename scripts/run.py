from __future__ import annotations

from pathlib import Path
from datetime import datetime, timezone
from typing import Optional
import logging
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from tubecoins.core.config import load_config
from tubecoins.core.errors import CorruptSave, PersistenceUnavailable
from tubecoins.core.store import SaveStore
from tubecoins.core.tick import run_simulation
from tubecoins.cogs.saves.saves import decode_state

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def format_duration(seconds: int) -> str:
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


@app.command()
def simulate(
    seconds: int = typer.Option(120, help="Simulated seconds of play"),
    seed: int = typer.Option(42, help="Seed for video rewards"),
    taps: int = typer.Option(5, help="Taps per simulated second"),
    no_buy: bool = typer.Option(False, "--no-buy", help="Never buy upgrades"),
    runs_dir: Path = typer.Option(Path("runs"), help="Directory to store run artifacts"),
    config: Optional[Path] = typer.Option(None, help="JSON file overriding game constants"),
    report_every: int = typer.Option(10, help="Table row every N seconds"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Play a headless TubeCoins session on a virtual clock."""
    _setup_logging(log_level)
    run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    out_dir = runs_dir / f"sim_{run_id}"
    out_dir.mkdir(parents=True, exist_ok=False)
    run_simulation(
        seconds=seconds,
        seed=seed,
        run_dir=out_dir,
        taps_per_second=taps,
        auto_buy=not no_buy,
        config=load_config(config),
        report_every=report_every,
    )
    typer.echo(f"Done. See {out_dir}")


@app.command("show-save")
def show_save(
    db: Path = typer.Argument(..., help="Path to a save.sqlite"),
    config: Optional[Path] = typer.Option(None, help="JSON file overriding game constants"),
):
    """Print the stored game state."""
    cfg = load_config(config)
    try:
        store = SaveStore(db)
        try:
            blob = store.read(cfg.save_key)
        finally:
            store.close()
    except PersistenceUnavailable as e:
        raise typer.BadParameter(str(e))
    if blob is None:
        typer.echo("No save.")
        raise typer.Exit(code=0)
    try:
        state = decode_state(blob)
    except CorruptSave as e:
        typer.echo(f"Corrupt save: {e}")
        raise typer.Exit(code=1)

    table = Table(title=f"Save — {db}")
    table.add_column("Field")
    table.add_column("Value", justify="right")
    for k, v in state.model_dump(exclude={"videos", "achievements"}).items():
        table.add_row(k, str(v))
    table.add_row("videos", ", ".join(f"#{v.id}:{v.reward_coins}" for v in state.videos) or "-")
    table.add_row("unlocked", ", ".join(str(a.id) for a in state.achievements if a.unlocked) or "-")
    if state.last_save_timestamp:
        age = int(datetime.now(timezone.utc).timestamp() - state.last_save_timestamp)
        table.add_row("saved ago", format_duration(max(age, 0)))
    console.print(table)


@app.command()
def reset(
    db: Path = typer.Argument(..., help="Path to a save.sqlite"),
    config: Optional[Path] = typer.Option(None, help="JSON file overriding game constants"),
):
    """Delete the save so the next session starts fresh."""
    cfg = load_config(config)
    try:
        store = SaveStore(db)
        try:
            removed = store.delete(cfg.save_key)
        finally:
            store.close()
    except PersistenceUnavailable as e:
        raise typer.BadParameter(str(e))
    typer.echo("Save deleted." if removed else "No save.")


if __name__ == "__main__":
    app()
