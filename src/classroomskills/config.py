"""Flow constants and default storage locations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_DIR = Path(".classroomskills")
DEFAULT_DB_NAME = "progress.db"


@dataclass(frozen=True)
class FlowSettings:
    """Timing and scoring constants for one activity loop.

    Time values are in scheduler units; the CLI runs one unit per second.
    """

    tutorial_interval: int = 5
    practice_seconds: int = 45
    practice_checkpoints: tuple[int, ...] = (30, 15, 5)
    step_count: int = 4
    base_stars: int = 3
    min_stars: int = 1
    max_stars: int = 5
    storage_key: str = "progress"


DEFAULT_SETTINGS = FlowSettings()


def default_db_path(data_dir: Path | None = None) -> Path:
    """Return the progress database path inside a data directory."""
    return (data_dir or DEFAULT_DATA_DIR) / DEFAULT_DB_NAME
