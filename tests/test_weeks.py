from datetime import date, datetime, timedelta

import pytest

from classroomskills.weeks import week_key


@pytest.mark.parametrize(
    ("day", "expected"),
    [
        (date(2024, 1, 1), "2024-W01"),
        (date(2023, 12, 31), "2023-W52"),
        (date(2024, 3, 1), "2024-W09"),
        (date(2020, 12, 31), "2020-W53"),
        (date(2021, 1, 3), "2020-W53"),
        (date(2021, 1, 4), "2021-W01"),
        (date(2019, 12, 30), "2020-W01"),
        (date(2024, 12, 30), "2025-W01"),
    ],
)
def test_week_key_iso_boundaries(day: date, expected: str) -> None:
    assert week_key(day) == expected


def test_week_key_accepts_datetime() -> None:
    assert week_key(datetime(2024, 1, 1, 23, 59)) == "2024-W01"


def test_monday_to_sunday_share_one_key() -> None:
    monday = date(2023, 12, 25)
    keys = {week_key(monday + timedelta(days=offset)) for offset in range(7)}
    assert keys == {"2023-W52"}
    assert week_key(monday + timedelta(days=7)) == "2024-W01"
