"""Activity flow engine: tutorial, practice, quiz and reward for one skill."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import replace

from .catalog import find_activity
from .config import DEFAULT_SETTINGS, FlowSettings
from .ledger import LedgerStore, award, total_for_week
from .models import Activity, Ledger, Phase, SessionState
from .quiz import Quiz, generate_quiz
from .scoring import score
from .timers import Scheduler, TimerHandle
from .weeks import Clock, today, week_key

logger = logging.getLogger(__name__)

Announcer = Callable[[str], None]


def _silent(text: str) -> None:
    return None


class ActivityFlowEngine:
    """Owns the session state and drives every phase transition.

    Every public action returns True when applied and False when it is not
    valid for the current phase; rejected actions leave state untouched.
    Timer callbacks and actions are processed one at a time, and at most one
    phase timer is live.
    """

    def __init__(
        self,
        activities: Iterable[Activity],
        store: LedgerStore,
        *,
        announcer: Announcer | None = None,
        rng: random.Random | None = None,
        clock: Clock = today,
        scheduler: Scheduler | None = None,
        settings: FlowSettings = DEFAULT_SETTINGS,
        sound_on: bool = True,
    ) -> None:
        self.activities = tuple(activities)
        self.store = store
        self.settings = settings
        self.scheduler = scheduler or Scheduler()
        self._announcer = announcer or _silent
        self._rng = rng or random.Random()
        self._clock = clock
        self._timer: TimerHandle | None = None
        self._quiz: Quiz | None = None
        self.ledger: Ledger = store.load()
        self._state = SessionState(countdown=settings.practice_seconds, sound_on=sound_on)

    # -------------------------------------------------------------------------
    # Read model
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def sound_on(self) -> bool:
        return self._state.sound_on

    @property
    def quiz(self) -> Quiz | None:
        return self._quiz

    def current_week_key(self) -> str:
        """Week key for the clock's current date."""
        return week_key(self._clock())

    def week_total(self) -> int:
        """Stars earned across all skills this week."""
        return total_for_week(self.ledger, self.current_week_key())

    def stars_this_week(self, skill_key: str) -> int:
        """Stars earned for one skill this week."""
        return self.ledger.get(self.current_week_key(), {}).get(skill_key, 0)

    def advance(self, units: float) -> None:
        """Let scheduler time pass, firing the active phase timer as it falls due."""
        self.scheduler.advance(units)

    # -------------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------------

    def select(self, skill_key: str) -> bool:
        """Start the loop for one activity from the home screen."""
        if self.phase is not Phase.HOME:
            return self._reject("select")
        activity = find_activity(self.activities, skill_key)
        if activity is None:
            return self._reject(f"select unknown skill '{skill_key}'")
        self._state = replace(self._state, activity=activity, stars=None)
        self._enter_tutorial()
        return True

    def skip(self) -> bool:
        """Leave the current phase early; in the quiz this submits a wrong answer."""
        if self.phase is Phase.TUTORIAL:
            self._enter_practice()
            return True
        if self.phase is Phase.PRACTICE:
            self._state = replace(self._state, expired_naturally=False)
            self._enter_quiz()
            return True
        if self.phase is Phase.QUIZ and self._quiz is not None:
            self._finish_quiz(correct=False)
            return True
        return self._reject("skip")

    def answer(self, choice: str) -> bool:
        """Submit one quiz choice, score the loop and move to the reward."""
        if self.phase is not Phase.QUIZ or self._state.activity is None or self._quiz is None:
            return self._reject("answer")

        self._finish_quiz(self._quiz.is_correct(choice))
        return True

    def _finish_quiz(self, correct: bool) -> None:
        """Score the loop, record the award and move to the reward."""
        activity = self._require_activity()
        stars = score(self._state.expired_naturally, correct, self.settings)
        week = self.current_week_key()
        self.ledger = award(self.ledger, week, activity.key, stars)
        self.store.save(self.ledger)
        logger.info("Awarded %d stars for %s in %s (correct=%s)", stars, activity.key, week, correct)

        self._quiz = None
        self._state = replace(self._state, phase=Phase.REWARD, stars=stars, quiz_target=None, quiz_choices=())
        self._announce(f"Great job. You earned {stars} stars")

    def retry(self) -> bool:
        """Run the full loop again for the same activity."""
        if self.phase is not Phase.REWARD:
            return self._reject("retry")
        self._state = replace(
            self._state,
            countdown=self.settings.practice_seconds,
            expired_naturally=False,
            stars=None,
        )
        self._enter_tutorial()
        return True

    def back_home(self) -> bool:
        """Return home from the reward screen."""
        if self.phase is not Phase.REWARD:
            return self._reject("back home")
        self._go_home()
        return True

    def back(self) -> bool:
        """Escape to home from any non-home phase."""
        if self.phase is Phase.HOME:
            return self._reject("back")
        self._go_home()
        return True

    def toggle_sound(self) -> bool:
        """Flip announcements on or off."""
        self._state = replace(self._state, sound_on=not self._state.sound_on)
        return True

    def close(self) -> None:
        """Stop timers and release storage."""
        self._cancel_timer()
        self.store.close()

    # -------------------------------------------------------------------------
    # Phase entry and timers
    # -------------------------------------------------------------------------

    def _enter_tutorial(self) -> None:
        self._cancel_timer()
        activity = self._require_activity()
        self._state = replace(self._state, phase=Phase.TUTORIAL, tutorial_step=0)
        logger.info("Tutorial started for %s", activity.key)
        self._announce(f"{activity.title}. Step 1. {activity.steps[0]}")
        self._timer = self.scheduler.call_every(self.settings.tutorial_interval, self._on_tutorial_tick)

    def _on_tutorial_tick(self) -> None:
        if self.phase is not Phase.TUTORIAL:
            return
        last_step = self.settings.step_count - 1
        if self._state.tutorial_step >= last_step:
            self._state = replace(self._state, tutorial_step=last_step)
            self._enter_practice()
            return
        self._state = replace(self._state, tutorial_step=self._state.tutorial_step + 1)

    def _enter_practice(self) -> None:
        self._cancel_timer()
        activity = self._require_activity()
        self._state = replace(
            self._state,
            phase=Phase.PRACTICE,
            countdown=self.settings.practice_seconds,
            expired_naturally=False,
        )
        logger.info("Practice started for %s", activity.key)
        self._announce(f"Practice {activity.title} for forty five seconds")
        self._timer = self.scheduler.call_every(1, self._on_practice_tick)

    def _on_practice_tick(self) -> None:
        if self.phase is not Phase.PRACTICE:
            return
        remaining = self._state.countdown - 1
        self._state = replace(self._state, countdown=max(remaining, 0))
        if remaining in self.settings.practice_checkpoints:
            self._announce(f"{remaining} seconds")
        if remaining <= 0:
            self._state = replace(self._state, expired_naturally=True)
            self._enter_quiz()

    def _enter_quiz(self) -> None:
        self._cancel_timer()
        activity = self._require_activity()
        self._quiz = generate_quiz(activity, self._rng)
        self._state = replace(
            self._state,
            phase=Phase.QUIZ,
            quiz_target=self._quiz.target_index,
            quiz_choices=self._quiz.choices,
        )
        logger.info("Quiz started for %s (natural expiry=%s)", activity.key, self._state.expired_naturally)
        self._announce("Quiz. Tap the correct step")

    def _go_home(self) -> None:
        self._cancel_timer()
        self._quiz = None
        self._state = SessionState(countdown=self.settings.practice_seconds, sound_on=self._state.sound_on)
        logger.info("Returned home")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _require_activity(self) -> Activity:
        activity = self._state.activity
        if activity is None:
            raise RuntimeError("No activity selected.")
        return activity

    def _announce(self, text: str) -> None:
        if not self._state.sound_on:
            return
        try:
            self._announcer(text)
        except Exception as exc:
            logger.warning("Announcement failed: %s", exc)

    def _reject(self, action: str) -> bool:
        logger.debug("Ignored '%s' in phase %s", action, self.phase.value)
        return False
