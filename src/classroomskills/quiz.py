"""Single-question step quiz generation and answer evaluation."""

from __future__ import annotations

import random
from dataclasses import dataclass

from .models import Activity


@dataclass(frozen=True)
class Quiz:
    """One quiz: find the step at ``target_index`` among shuffled choices."""

    target_index: int
    choices: tuple[str, ...]
    answer: str

    def is_correct(self, choice: str) -> bool:
        """Compare by value, so duplicate step texts are all accepted."""
        return choice == self.answer


def generate_quiz(activity: Activity, rng: random.Random) -> Quiz:
    """Pick a uniformly random target step and shuffle all steps for display."""
    target_index = rng.randrange(len(activity.steps))
    choices = list(activity.steps)
    rng.shuffle(choices)
    return Quiz(target_index=target_index, choices=tuple(choices), answer=activity.steps[target_index])
