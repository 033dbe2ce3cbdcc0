"""CLI entrypoint for the classroom skills learning loop."""

from __future__ import annotations

import argparse
import logging
import random
import time
from collections.abc import Callable
from pathlib import Path

from .catalog import load_activities
from .config import DEFAULT_SETTINGS, default_db_path
from .engine import ActivityFlowEngine, Announcer
from .ledger import LedgerStore, SqliteBlobStore, export_ledger
from .models import Phase

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
SleepFn = Callable[[float], None]
MENU_QUIT_COMMANDS = {"q"}
MENU_BACK_COMMANDS = {"b"}
SKIP_COMMANDS = {"s"}
WATCH_COMMANDS = {"", "w"}
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _engine(
    data_dir: Path | None,
    seed: int | None = None,
    sound_on: bool = True,
    announcer: Announcer | None = None,
) -> ActivityFlowEngine:
    """Create an engine backed by the local progress database."""
    store = LedgerStore(SqliteBlobStore(default_db_path(data_dir)), DEFAULT_SETTINGS.storage_key)
    return ActivityFlowEngine(
        load_activities(),
        store,
        announcer=announcer,
        rng=random.Random(seed),
        sound_on=sound_on,
    )


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="classroomskills", description="Classroom behaviour skill practice")
    parser.add_argument("command", nargs="?", default="play", choices=["play", "status", "export"])
    parser.add_argument("target", nargs="?", help="export file path")
    parser.add_argument("--data-dir", type=Path, default=None, help="directory holding progress.db")
    parser.add_argument("--seed", type=int, default=None, help="seed for quiz shuffling")
    parser.add_argument("--no-sound", action="store_true", help="start with announcements off")
    parser.add_argument("--log-level", default="WARNING", choices=LOG_LEVELS)
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "status":
        return status_report(args.data_dir)
    if args.command == "export":
        if not args.target:
            parser.error("export requires a target file path")
        return export_report(args.data_dir, args.target)
    return play_shell(data_dir=args.data_dir, seed=args.seed, sound_on=not args.no_sound)


def play_shell(
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
    sleep_fn: SleepFn = time.sleep,
    *,
    data_dir: Path | None = None,
    seed: int | None = None,
    sound_on: bool = True,
) -> int:
    """Run the menu-driven learning loop until the user quits."""
    engine = _engine(data_dir, seed, sound_on, lambda text: print_fn(f"(say) {text}"))
    try:
        while True:
            if engine.phase is Phase.HOME:
                if not _home_screen(engine, input_fn, print_fn):
                    return 0
            elif engine.phase is Phase.TUTORIAL:
                _tutorial_screen(engine, input_fn, print_fn, sleep_fn)
            elif engine.phase is Phase.PRACTICE:
                _practice_screen(engine, input_fn, print_fn, sleep_fn)
            elif engine.phase is Phase.QUIZ:
                _quiz_screen(engine, input_fn, print_fn)
            else:
                _reward_screen(engine, input_fn, print_fn)
    finally:
        engine.close()


def _home_screen(engine: ActivityFlowEngine, input_fn: InputFn, print_fn: PrintFn) -> bool:
    """Show activities with this week's stars; return False to quit."""
    print_fn("\n=== Classroom Skills ===")
    sound = "On" if engine.sound_on else "Off"
    print_fn(f"Week {engine.current_week_key()} | Total ★ {engine.week_total()} | Sound {sound}")
    title_width = max(len(activity.title) for activity in engine.activities)
    for idx, activity in enumerate(engine.activities, start=1):
        stars = engine.stars_this_week(activity.key)
        print_fn(f"{idx}) {activity.title:<{title_width}} ★ {stars:>3}  {activity.why}")
    print_fn("s) Sound on/off")
    print_fn("q) Quit")

    choice = input_fn("Choose activity: ").strip().lower()
    if choice in MENU_QUIT_COMMANDS:
        return False
    if choice == "s":
        engine.toggle_sound()
        return True
    if choice.isdigit():
        index = int(choice) - 1
        if 0 <= index < len(engine.activities):
            engine.select(engine.activities[index].key)
            return True
    print_fn("Invalid choice.")
    return True


def _schedule_line(engine: ActivityFlowEngine) -> str:
    activity = engine.state.activity
    title = activity.title if activity is not None else ""
    settings = engine.settings
    return f"First {title}, Then Reward | Steps {settings.step_count} | Timer {settings.practice_seconds}s | Quiz 1"


def _tutorial_screen(engine: ActivityFlowEngine, input_fn: InputFn, print_fn: PrintFn, sleep_fn: SleepFn) -> None:
    """Show the tutorial steps with the current one highlighted."""
    state = engine.state
    if state.activity is None:
        return
    print_fn(f"\n=== Tutorial: {state.activity.title} ===")
    print_fn(_schedule_line(engine))
    for idx, step in enumerate(state.activity.steps):
        marker = ">" if idx == state.tutorial_step else " "
        print_fn(f"{marker} Step {idx + 1}: {step}")
    _timed_phase_actions(engine, input_fn, print_fn, sleep_fn)


def _practice_screen(engine: ActivityFlowEngine, input_fn: InputFn, print_fn: PrintFn, sleep_fn: SleepFn) -> None:
    """Show the practice countdown."""
    state = engine.state
    if state.activity is None:
        return
    total = engine.settings.practice_seconds
    filled = round(20 * (total - state.countdown) / total)
    print_fn(f"\n=== Practice: {state.activity.title} ===")
    print_fn(f"Time left: {state.countdown}s [{'#' * filled}{'.' * (20 - filled)}]")
    _timed_phase_actions(engine, input_fn, print_fn, sleep_fn)


def _timed_phase_actions(engine: ActivityFlowEngine, input_fn: InputFn, print_fn: PrintFn, sleep_fn: SleepFn) -> None:
    print_fn("Enter) Watch")
    print_fn("s) Skip")
    print_fn("b) Back")
    choice = input_fn("Choose: ").strip().lower()
    if choice in WATCH_COMMANDS:
        _watch(engine, print_fn, sleep_fn)
    elif choice in SKIP_COMMANDS:
        engine.skip()
    elif choice in MENU_BACK_COMMANDS:
        engine.back()
    else:
        print_fn("Invalid choice.")


def _watch(engine: ActivityFlowEngine, print_fn: PrintFn, sleep_fn: SleepFn) -> None:
    """Let real time drive the phase timer until the phase changes."""
    phase = engine.phase
    step = engine.state.tutorial_step
    while engine.phase is phase:
        sleep_fn(1)
        engine.advance(1)
        state = engine.state
        if state.phase is Phase.TUTORIAL and state.activity is not None and state.tutorial_step != step:
            step = state.tutorial_step
            print_fn(f"> Step {step + 1}: {state.activity.steps[step]}")


def _quiz_screen(engine: ActivityFlowEngine, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Ask for the target step among shuffled choices."""
    state = engine.state
    if state.activity is None or state.quiz_target is None:
        return
    print_fn(f"\n=== Quiz: {state.activity.title} ===")
    print_fn(f"Tap the correct step {state.quiz_target + 1}")
    for idx, choice_text in enumerate(state.quiz_choices, start=1):
        print_fn(f"{idx}) {choice_text}")
    print_fn("s) Skip")
    print_fn("b) Back")
    choice = input_fn("Answer: ").strip().lower()
    if choice in SKIP_COMMANDS:
        engine.skip()
        return
    if choice in MENU_BACK_COMMANDS:
        engine.back()
        return
    if choice.isdigit():
        index = int(choice) - 1
        if 0 <= index < len(state.quiz_choices):
            engine.answer(state.quiz_choices[index])
            return
    print_fn("Invalid choice.")


def _reward_screen(engine: ActivityFlowEngine, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Show earned stars and offer another round."""
    stars = engine.state.stars or 0
    max_stars = engine.settings.max_stars
    print_fn("\n=== Reward ===")
    print_fn(" ".join("★" if idx < stars else "☆" for idx in range(max_stars)))
    print_fn(f"You earned {stars} stars. This week: {engine.week_total()}")
    print_fn("r) Try again")
    print_fn("h) Back home")
    choice = input_fn("Choose: ").strip().lower()
    if choice == "r":
        engine.retry()
    elif choice == "h" or choice in MENU_BACK_COMMANDS:
        engine.back_home()
    else:
        print_fn("Invalid choice.")


def status_report(data_dir: Path | None, print_fn: PrintFn = print) -> int:
    """Print this week's stars per activity."""
    engine = _engine(data_dir, sound_on=False)
    try:
        print_fn(f"Week {engine.current_week_key()}")
        title_width = max(len("Activity"), max(len(activity.title) for activity in engine.activities))
        header = f"{'Activity':<{title_width}} Stars"
        print_fn(header)
        print_fn("-" * len(header))
        for activity in engine.activities:
            print_fn(f"{activity.title:<{title_width}} {engine.stars_this_week(activity.key):>5}")
        print_fn(f"{'Total':<{title_width}} {engine.week_total():>5}")
    finally:
        engine.close()
    return 0


def export_report(data_dir: Path | None, target: str, print_fn: PrintFn = print) -> int:
    """Write the whole ledger to a JSON export file."""
    engine = _engine(data_dir, sound_on=False)
    try:
        summary = export_ledger(engine.ledger, target)
    except OSError as exc:
        print_fn(f"Export failed: {exc}")
        return 1
    finally:
        engine.close()
    print_fn(f"Exported progress to {target}")
    print_fn(f"- weeks: {summary.weeks}")
    print_fn(f"- entries: {summary.entries}")
    print_fn(f"- stars: {summary.total_stars}")
    return 0


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
