from __future__ import annotations

import random
import sys
from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from classroomskills.catalog import load_activities  # noqa: E402
from classroomskills.engine import ActivityFlowEngine  # noqa: E402
from classroomskills.ledger import LedgerStore, SqliteBlobStore  # noqa: E402
from classroomskills.models import Activity  # noqa: E402

FIXED_DAY = date(2024, 1, 3)
FIXED_WEEK = "2024-W01"


class FixedTargetRandom(random.Random):
    """Random source that always targets one step and never reorders choices."""

    target = 0

    def randrange(self, start: int, stop: int | None = None, step: int = 1) -> int:  # type: ignore[override]
        return self.target

    def shuffle(self, x: list) -> None:  # type: ignore[override]
        return None


class BrokenBlobStore:
    """Blob store whose every operation fails."""

    def read(self, key: str) -> str | None:
        raise OSError("disk unavailable")

    def write(self, key: str, value: str) -> None:
        raise OSError("disk full")


def fixed_target(target: int) -> FixedTargetRandom:
    rng = FixedTargetRandom(0)
    rng.target = target
    return rng


@pytest.fixture
def activities() -> tuple[Activity, ...]:
    return load_activities()


@pytest.fixture
def announcements() -> list[str]:
    return []


@pytest.fixture
def make_engine(activities: tuple[Activity, ...], announcements: list[str]) -> Callable[..., ActivityFlowEngine]:
    def factory(
        rng: random.Random | None = None,
        store: LedgerStore | None = None,
        **kwargs: object,
    ) -> ActivityFlowEngine:
        return ActivityFlowEngine(
            activities,
            store or LedgerStore(SqliteBlobStore(":memory:")),
            announcer=announcements.append,
            rng=rng or fixed_target(2),
            clock=lambda: FIXED_DAY,
            **kwargs,  # type: ignore[arg-type]
        )

    return factory
