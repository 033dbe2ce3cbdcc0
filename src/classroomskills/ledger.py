"""Weekly star ledger: pure updates plus best-effort SQLite persistence."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from . import __version__
from .models import Ledger

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
EXPORT_FORMAT_VERSION = 1


class BlobStore(Protocol):
    """Keyed text storage used for the ledger."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a best-effort ledger write."""

    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class ExportSummary:
    """Summary emitted by a ledger export."""

    weeks: int
    entries: int
    total_stars: int


def award(ledger: Ledger, week: str, skill_key: str, amount: int) -> Ledger:
    """Return a new ledger with ``amount`` stars added to one week/skill entry."""
    if amount < 0:
        raise ValueError(f"Star award must be non-negative, got {amount}.")
    updated = {wk: dict(skills) for wk, skills in ledger.items()}
    skills = updated.setdefault(week, {})
    skills[skill_key] = skills.get(skill_key, 0) + amount
    return updated


def total_for_week(ledger: Ledger, week: str) -> int:
    """Sum of all skill stars recorded under a week; 0 when absent."""
    return sum(ledger.get(week, {}).values())


def parse_ledger(text: str) -> Ledger:
    """Decode a stored ledger, raising ValueError on any malformed content."""
    raw: object = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("Ledger root must be a JSON object.")
    ledger: Ledger = {}
    for week, skills in raw.items():
        if not isinstance(skills, dict):
            raise ValueError(f"Week '{week}' must map to an object.")
        entries: dict[str, int] = {}
        for skill_key, count in skills.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise ValueError(f"Invalid star count for {week}/{skill_key}: {count!r}")
            entries[str(skill_key)] = count
        ledger[str(week)] = entries
    return ledger


def dump_ledger(ledger: Ledger) -> str:
    """Encode a ledger for storage."""
    return json.dumps(ledger, sort_keys=True)


class SqliteBlobStore:
    """SQLite-backed key/value blob storage.

    The connection is opened lazily so that an unusable path surfaces as a
    read/write fault rather than a construction failure.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            if isinstance(self._db_path, Path):
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
                target = str(self._db_path)
            else:
                target = self._db_path
            conn = sqlite3.connect(target)
            conn.row_factory = sqlite3.Row
            try:
                self._apply_migrations(conn)
            except Exception:
                conn.close()
                raise
            self._conn = conn
        return self._conn

    def _apply_migrations(self, conn: sqlite3.Connection) -> None:
        """Apply forward-only schema migrations to latest version."""
        current = int(conn.execute("PRAGMA user_version").fetchone()[0])
        if current > SCHEMA_VERSION:
            raise RuntimeError(f"Database schema version {current} is newer than supported {SCHEMA_VERSION}.")

        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """)

        for version in range(current + 1, SCHEMA_VERSION + 1):
            if version == 1:
                with conn:
                    conn.execute("""
                        CREATE TABLE IF NOT EXISTS blobs (
                            key TEXT PRIMARY KEY,
                            value TEXT NOT NULL,
                            updated_at TEXT NOT NULL
                        )
                        """)
            with conn:
                conn.execute(f"PRAGMA user_version = {version}")
                conn.execute(
                    "INSERT OR REPLACE INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, datetime.now(UTC).isoformat()),
                )

    def read(self, key: str) -> str | None:
        """Return the stored value for a key, or None."""
        row = self._connection().execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return str(row["value"])

    def write(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        conn = self._connection()
        with conn:
            conn.execute(
                """
                INSERT INTO blobs (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(UTC).isoformat()),
            )

    def close(self) -> None:
        """Close db connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None


class LedgerStore:
    """Best-effort load/save of the ledger through a blob store."""

    def __init__(self, blobs: BlobStore, key: str = "progress") -> None:
        self.blobs = blobs
        self.key = key

    def load(self) -> Ledger:
        """Return the stored ledger, or an empty one on any fault."""
        try:
            text = self.blobs.read(self.key)
        except Exception:
            logger.warning("Could not read stored progress; starting empty.", exc_info=True)
            return {}
        if text is None:
            return {}
        try:
            return parse_ledger(text)
        except (ValueError, RecursionError) as exc:
            logger.warning("Stored progress is malformed (%s); starting empty.", exc)
            return {}

    def save(self, ledger: Ledger) -> SaveResult:
        """Write the ledger; faults are logged and reported, never raised."""
        try:
            self.blobs.write(self.key, dump_ledger(ledger))
        except Exception as exc:
            logger.warning("Could not save progress: %s", exc)
            return SaveResult(ok=False, error=str(exc))
        return SaveResult(ok=True)

    def close(self) -> None:
        """Close the underlying blob store when it holds a connection."""
        close = getattr(self.blobs, "close", None)
        if close is not None:
            close()


def export_ledger(ledger: Ledger, export_path: Path | str) -> ExportSummary:
    """Write the ledger to a JSON export document."""
    payload = {
        "format_version": EXPORT_FORMAT_VERSION,
        "exported_at": datetime.now(UTC).isoformat(),
        "source": {"app_version": __version__, "schema_version": SCHEMA_VERSION},
        "progress": ledger,
    }
    path = Path(export_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    return ExportSummary(
        weeks=len(ledger),
        entries=sum(len(skills) for skills in ledger.values()),
        total_stars=sum(sum(skills.values()) for skills in ledger.values()),
    )
