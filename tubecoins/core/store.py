from __future__ import annotations

from pathlib import Path
from typing import Optional
import sqlite3
from datetime import datetime, timezone

from .errors import PersistenceUnavailable


class SaveStore:
    """SQLite-backed key-value store holding one opaque blob per key.

    Table schema (created on first use):
      saves(key TEXT PK, ts TEXT, blob TEXT)

    Every sqlite/OS failure surfaces as `PersistenceUnavailable`.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        try:
            self.conn = sqlite3.connect(str(self.db_path))
            self._init_schema()
        except (sqlite3.Error, OSError) as e:
            raise PersistenceUnavailable(f"cannot open {self.db_path}: {e}") from e

    def _init_schema(self) -> None:
        cur = self.conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS saves (
              key TEXT PRIMARY KEY,
              ts TEXT NOT NULL,
              blob TEXT NOT NULL
            )
            """
        )
        self.conn.commit()

    def read(self, key: str) -> Optional[str]:
        try:
            row = self.conn.execute("SELECT blob FROM saves WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise PersistenceUnavailable(f"read {key!r} failed: {e}") from e
        return row[0] if row else None

    def write(self, key: str, blob: str) -> None:
        ts = datetime.now(timezone.utc).isoformat()
        try:
            self.conn.execute(
                "INSERT INTO saves(key, ts, blob) VALUES(?,?,?) "
                "ON CONFLICT(key) DO UPDATE SET ts = excluded.ts, blob = excluded.blob",
                (key, ts, blob),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceUnavailable(f"write {key!r} failed: {e}") from e

    def delete(self, key: str) -> bool:
        try:
            cur = self.conn.execute("DELETE FROM saves WHERE key = ?", (key,))
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceUnavailable(f"delete {key!r} failed: {e}") from e
        return cur.rowcount > 0

    def close(self) -> None:
        self.conn.close()
