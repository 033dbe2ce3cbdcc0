"""Load the read-only activity catalog from bundled JSON resources."""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

from .config import DEFAULT_SETTINGS
from .models import SKILL_KEYS, Activity

CONTENT_PACKAGE = "classroomskills"
CONTENT_RESOURCE = "content/activities.json"


def _activity_from_dict(raw: dict[str, Any], step_count: int) -> Activity:
    """Build an activity from raw JSON content."""
    key = str(raw.get("key", "")).strip()
    if key not in SKILL_KEYS:
        raise ValueError(f"Unknown skill key: '{key}'.")

    title = str(raw.get("title", "")).strip()
    if not title:
        raise ValueError(f"Activity '{key}' has no title.")

    raw_steps = raw.get("steps", [])
    if not isinstance(raw_steps, list):
        raise ValueError(f"Activity '{key}' steps must be a list.")
    steps = tuple(str(step).strip() for step in raw_steps)
    if len(steps) != step_count:
        raise ValueError(f"Activity '{key}' must have exactly {step_count} steps, found {len(steps)}.")
    if not all(steps):
        raise ValueError(f"Activity '{key}' has an empty step.")

    return Activity(key=key, title=title, why=str(raw.get("why", "")).strip(), steps=steps)


def _activities_from_payload(raw: object, step_count: int) -> tuple[Activity, ...]:
    """Build the ordered catalog from a decoded JSON document."""
    if not isinstance(raw, dict) or not isinstance(raw.get("activities"), list):
        raise ValueError("Catalog root must be an object with an 'activities' list.")

    activities: list[Activity] = []
    seen: set[str] = set()
    for item in raw["activities"]:
        if not isinstance(item, dict):
            raise ValueError("Catalog entries must be objects.")
        activity = _activity_from_dict(item, step_count)
        if activity.key in seen:
            raise ValueError(f"Duplicate activity key: {activity.key}")
        seen.add(activity.key)
        activities.append(activity)
    if not activities:
        raise ValueError("Catalog has no activities.")
    return tuple(activities)


def load_activities(step_count: int = DEFAULT_SETTINGS.step_count) -> tuple[Activity, ...]:
    """Load the bundled catalog."""
    entry = resources.files(CONTENT_PACKAGE).joinpath(CONTENT_RESOURCE)
    raw = json.loads(entry.read_text(encoding="utf-8-sig"))
    return _activities_from_payload(raw, step_count)


def load_activities_from_file(path: Path | str, step_count: int = DEFAULT_SETTINGS.step_count) -> tuple[Activity, ...]:
    """Load a catalog from an arbitrary JSON file for tests/tools."""
    raw = json.loads(Path(path).read_text(encoding="utf-8-sig"))
    return _activities_from_payload(raw, step_count)


def find_activity(activities: tuple[Activity, ...], key: str) -> Activity | None:
    """Return the activity with a skill key, if present."""
    for activity in activities:
        if activity.key == key:
            return activity
    return None
