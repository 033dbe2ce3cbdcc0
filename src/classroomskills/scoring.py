"""Star scoring for one completed activity loop."""

from __future__ import annotations

from .config import DEFAULT_SETTINGS, FlowSettings


def score(
    timer_expired_naturally: bool,
    answered_correctly: bool,
    settings: FlowSettings = DEFAULT_SETTINGS,
) -> int:
    """Return stars earned: the base award plus one per bonus, clamped to the star range."""
    stars = settings.base_stars + int(timer_expired_naturally) + int(answered_correctly)
    return max(settings.min_stars, min(settings.max_stars, stars))
