"""SQLite store for streak intervals, journal entries and profile settings."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".streaker" / "data.db"

GOAL_DAYS_KEY = "goal_days"
GOAL_DATE_KEY = "goal_date"


class StoreError(Exception):
    """The interval/journal/profile store failed or rejected a mutation."""


class ActiveIntervalExistsError(StoreError):
    """A new interval was started while another one is still open."""


class RecordNotFoundError(StoreError):
    """No record with the requested id."""


def _iso(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


class Database:
    """SQLite database manager with WAL mode."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(self.db_path))
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.init_db()
        except (sqlite3.Error, OSError) as exc:
            raise StoreError(f"Cannot open database at {self.db_path}: {exc}") from exc

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS intervals (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                start_at TEXT NOT NULL,
                end_at TEXT,
                final_xp INTEGER,
                goal_achieved BOOLEAN DEFAULT 0
            );

            -- at most one open interval
            CREATE UNIQUE INDEX IF NOT EXISTS idx_one_open_interval
                ON intervals ((end_at IS NULL)) WHERE end_at IS NULL;

            CREATE TABLE IF NOT EXISTS journal (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                text TEXT NOT NULL,
                created_at TEXT NOT NULL,
                pinned BOOLEAN DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS profile (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """)
        self.conn.commit()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run statements in one write transaction, translating sqlite errors."""
        try:
            with self.conn:
                self.conn.execute("BEGIN IMMEDIATE")
                yield self.conn
        except sqlite3.IntegrityError as exc:
            if "idx_one_open_interval" in str(exc):
                raise ActiveIntervalExistsError("Another interval is already open") from exc
            raise StoreError(str(exc)) from exc
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

    # ── Profile ────────────────────────────────────────────────────────────

    def get_profile(self, key: str) -> str | None:
        """Get a profile value by key."""
        row = self.conn.execute(
            "SELECT value FROM profile WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_profile(self, key: str, value: str) -> None:
        """Set a profile value (upsert)."""
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO profile (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, str(value)),
            )

    def get_all_profile(self) -> dict[str, str]:
        """Return all profile key-value pairs as a dict."""
        rows = self.conn.execute("SELECT key, value FROM profile").fetchall()
        return {row["key"]: row["value"] for row in rows}

    def set_goal(self, days: int | None = None, target_date: date | None = None) -> None:
        """Replace the goal. Day-count and date goals are mutually exclusive."""
        if days is not None and target_date is not None:
            raise ValueError("Set either a day-count goal or a target date, not both")
        if days is not None and days <= 0:
            raise ValueError("Goal days must be a positive integer")
        with self._transaction() as conn:
            conn.execute(
                "DELETE FROM profile WHERE key IN (?, ?)", (GOAL_DAYS_KEY, GOAL_DATE_KEY)
            )
            if days is not None:
                conn.execute(
                    "INSERT INTO profile (key, value) VALUES (?, ?)", (GOAL_DAYS_KEY, str(days))
                )
            elif target_date is not None:
                conn.execute(
                    "INSERT INTO profile (key, value) VALUES (?, ?)",
                    (GOAL_DATE_KEY, target_date.isoformat()),
                )
        logger.info("Goal updated: days=%s date=%s", days, target_date)

    # ── Intervals ──────────────────────────────────────────────────────────

    @staticmethod
    def _interval_dict(row: sqlite3.Row) -> dict:
        return {
            "id": str(row["id"]),
            "start": row["start_at"],
            "end": row["end_at"],
            "final_xp": row["final_xp"],
            "goal_achieved": bool(row["goal_achieved"]),
        }

    def get_all_intervals(self) -> list[dict]:
        """Return all intervals, most recent start first."""
        rows = self.conn.execute(
            "SELECT * FROM intervals ORDER BY start_at DESC, id DESC"
        ).fetchall()
        return [self._interval_dict(row) for row in rows]

    def get_interval(self, interval_id: str) -> dict | None:
        row = self.conn.execute(
            "SELECT * FROM intervals WHERE id = ?", (interval_id,)
        ).fetchone()
        return self._interval_dict(row) if row else None

    def get_open_interval(self) -> dict | None:
        row = self.conn.execute(
            "SELECT * FROM intervals WHERE end_at IS NULL ORDER BY start_at DESC LIMIT 1"
        ).fetchone()
        return self._interval_dict(row) if row else None

    def start_interval(self, start: datetime) -> dict:
        """Open a new interval. Refuses while another interval is open."""
        with self._transaction() as conn:
            existing = conn.execute(
                "SELECT id FROM intervals WHERE end_at IS NULL LIMIT 1"
            ).fetchone()
            if existing is not None:
                raise ActiveIntervalExistsError(
                    f"Interval {existing['id']} is still open. End it before starting a new one."
                )
            cursor = conn.execute(
                "INSERT INTO intervals (start_at, end_at, final_xp, goal_achieved) "
                "VALUES (?, NULL, 0, 0)",
                (_iso(start),),
            )
            new_id = cursor.lastrowid
        logger.info("Started interval %s at %s", new_id, _iso(start))
        return self.get_interval(str(new_id))

    def end_interval(
        self,
        interval_id: str,
        end: datetime,
        final_xp: int,
        goal_achieved: bool,
        restart: bool = True,
    ) -> dict | None:
        """Close an open interval; with restart, open a fresh one at end atomically.

        Returns the newly opened interval, or None when restart is False.
        """
        new_id = None
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT start_at FROM intervals WHERE id = ? AND end_at IS NULL", (interval_id,)
            ).fetchone()
            if row is None:
                raise RecordNotFoundError(f"No open interval with id {interval_id}")
            if end < datetime.fromisoformat(row["start_at"]):
                raise ValueError(
                    f"End {_iso(end)} is before start {row['start_at']} of interval {interval_id}"
                )
            conn.execute(
                "UPDATE intervals SET end_at = ?, final_xp = ?, goal_achieved = ? WHERE id = ?",
                (_iso(end), final_xp, int(goal_achieved), interval_id),
            )
            if restart:
                cursor = conn.execute(
                    "INSERT INTO intervals (start_at, end_at, final_xp, goal_achieved) "
                    "VALUES (?, NULL, 0, 0)",
                    (_iso(end),),
                )
                new_id = cursor.lastrowid
        logger.info(
            "Ended interval %s at %s with %d XP (goal achieved: %s)",
            interval_id, _iso(end), final_xp, goal_achieved,
        )
        if new_id is None:
            return None
        logger.info("Started interval %s at %s", new_id, _iso(end))
        return self.get_interval(str(new_id))

    def delete_interval(self, interval_id: str) -> None:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM intervals WHERE id = ?", (interval_id,))
            if cursor.rowcount == 0:
                raise RecordNotFoundError(f"No interval with id {interval_id}")
        logger.info("Deleted interval %s", interval_id)

    # ── Journal ────────────────────────────────────────────────────────────

    @staticmethod
    def _journal_dict(row: sqlite3.Row) -> dict:
        return {
            "id": str(row["id"]),
            "text": row["text"],
            "timestamp": row["created_at"],
            "pinned": bool(row["pinned"]),
        }

    def add_journal_entry(self, text: str, timestamp: datetime) -> dict:
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO journal (text, created_at, pinned) VALUES (?, ?, 0)",
                (text, _iso(timestamp)),
            )
            new_id = cursor.lastrowid
        logger.info("Added journal entry %s", new_id)
        return self.get_journal_entry(str(new_id))

    def get_journal_entry(self, entry_id: str) -> dict | None:
        row = self.conn.execute(
            "SELECT * FROM journal WHERE id = ?", (entry_id,)
        ).fetchone()
        return self._journal_dict(row) if row else None

    def get_journal_entries(self) -> list[dict]:
        """Return all journal entries, newest first."""
        rows = self.conn.execute(
            "SELECT * FROM journal ORDER BY created_at DESC, id DESC"
        ).fetchall()
        return [self._journal_dict(row) for row in rows]

    def toggle_journal_pin(self, entry_id: str) -> bool:
        """Flip the pinned flag and return the new value."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT pinned FROM journal WHERE id = ?", (entry_id,)
            ).fetchone()
            if row is None:
                raise RecordNotFoundError(f"No journal entry with id {entry_id}")
            pinned = not bool(row["pinned"])
            conn.execute("UPDATE journal SET pinned = ? WHERE id = ?", (int(pinned), entry_id))
        logger.info("Journal entry %s pinned=%s", entry_id, pinned)
        return pinned

    def delete_journal_entry(self, entry_id: str) -> None:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM journal WHERE id = ?", (entry_id,))
            if cursor.rowcount == 0:
                raise RecordNotFoundError(f"No journal entry with id {entry_id}")
        logger.info("Deleted journal entry %s", entry_id)

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()
