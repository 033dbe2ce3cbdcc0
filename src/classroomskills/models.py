"""Core domain models for the classroom skills learning loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SKILL_KEYS: tuple[str, ...] = (
    "raiseHand",
    "staySeated",
    "takeTurns",
    "lineUp",
    "cleanDesk",
    "transitionTasks",
)

# Week key -> skill key -> accumulated stars.
Ledger = dict[str, dict[str, int]]


class Phase(str, Enum):
    """One stage of the learning loop, or the idle home screen."""

    HOME = "home"
    TUTORIAL = "tutorial"
    PRACTICE = "practice"
    QUIZ = "quiz"
    REWARD = "reward"


@dataclass(frozen=True)
class Activity:
    """One classroom behaviour skill with its ordered steps."""

    key: str
    title: str
    why: str
    steps: tuple[str, ...]


@dataclass(frozen=True)
class SessionState:
    """Ephemeral state of one engine instance.

    Replaced as a whole on every stimulus; never mutated in place.
    """

    phase: Phase = Phase.HOME
    activity: Activity | None = None
    tutorial_step: int = 0
    countdown: int = 45
    expired_naturally: bool = False
    quiz_target: int | None = None
    quiz_choices: tuple[str, ...] = ()
    stars: int | None = None
    sound_on: bool = True
