from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from app.scheduling.business_hours import (
    BUSINESS_HOURS,
    BusinessHoursWindow,
    adjust_to_business_hours,
    is_within_business_hours,
    weekday_index,
)

# 2026-10-17 is a Saturday.
SATURDAY = datetime(2026, 10, 17)
SUNDAY = datetime(2026, 10, 18)
MONDAY = datetime(2026, 10, 19)
TUESDAY = datetime(2026, 10, 20)


def test_weekday_index_starts_on_sunday():
    assert weekday_index(SUNDAY) == 0
    assert weekday_index(MONDAY) == 1
    assert weekday_index(SATURDAY) == 6


@pytest.mark.parametrize(
    "moment, expected",
    [
        (SUNDAY.replace(hour=14), MONDAY.replace(hour=9)),
        (SATURDAY.replace(hour=22), MONDAY.replace(hour=9)),
        (SATURDAY.replace(hour=20), MONDAY.replace(hour=9)),
        (TUESDAY.replace(hour=8), TUESDAY.replace(hour=9)),
        (TUESDAY.replace(hour=20, minute=15), TUESDAY.replace(hour=9) + timedelta(days=1)),
        (MONDAY.replace(hour=0, minute=30), MONDAY.replace(hour=9)),
    ],
)
def test_moments_outside_window_move_to_next_opening(moment, expected):
    assert adjust_to_business_hours(moment) == expected


def test_moment_inside_window_is_unchanged_with_seconds_kept():
    moment = TUESDAY.replace(hour=10, minute=5, second=42, microsecond=7)
    assert adjust_to_business_hours(moment) is moment


def test_opening_is_inclusive_and_closing_exclusive():
    assert is_within_business_hours(TUESDAY.replace(hour=9)) is True
    assert is_within_business_hours(TUESDAY.replace(hour=19, minute=59, second=59)) is True
    assert is_within_business_hours(TUESDAY.replace(hour=20)) is False
    assert is_within_business_hours(SUNDAY.replace(hour=12)) is False


def test_adjusted_value_is_always_inside_window_and_never_earlier():
    moment = SATURDAY.replace(hour=0)
    while moment < SATURDAY + timedelta(days=8):
        adjusted = adjust_to_business_hours(moment)
        assert adjusted >= moment
        assert is_within_business_hours(adjusted)
        assert adjust_to_business_hours(adjusted) == adjusted
        moment += timedelta(minutes=37)


def test_adjustment_is_monotonic():
    moments = [SATURDAY + timedelta(minutes=53 * step) for step in range(300)]
    adjusted = [adjust_to_business_hours(moment) for moment in moments]
    assert adjusted == sorted(adjusted)


def test_aware_input_is_read_in_window_timezone():
    window = BusinessHoursWindow(tz=ZoneInfo("America/Sao_Paulo"))
    # 23:30 UTC on Tuesday is 20:30 in Sao Paulo (UTC-3), after closing.
    moment = datetime(2026, 10, 20, 23, 30, tzinfo=timezone.utc)

    adjusted = adjust_to_business_hours(moment, window)

    assert adjusted.tzinfo is not None
    local = adjusted.astimezone(ZoneInfo("America/Sao_Paulo"))
    assert (local.year, local.month, local.day, local.hour, local.minute) == (2026, 10, 21, 9, 0)


def test_aware_input_without_window_timezone_keeps_its_offset():
    moment = datetime(2026, 10, 18, 14, 0, tzinfo=timezone.utc)
    adjusted = adjust_to_business_hours(moment, BUSINESS_HOURS)
    assert adjusted == datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def test_custom_window_bounds_are_respected():
    window = BusinessHoursWindow(start="08:30", end="18:00")
    assert adjust_to_business_hours(TUESDAY.replace(hour=8)) == TUESDAY.replace(hour=9)
    assert adjust_to_business_hours(TUESDAY.replace(hour=8), window) == TUESDAY.replace(hour=8, minute=30)
    assert adjust_to_business_hours(TUESDAY.replace(hour=18), window) == TUESDAY.replace(hour=8, minute=30) + timedelta(days=1)
