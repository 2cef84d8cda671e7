"""Business-hours calendar for follow-up delivery.

Follow-ups may only fire Monday through Saturday between 09:00 (inclusive)
and 20:00 (exclusive). Any timestamp outside that window is pushed forward
to the next opening:

- Sunday 14:00   -> Monday 09:00
- Saturday 22:00 -> Monday 09:00
- Tuesday 08:00  -> Tuesday 09:00
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from app.core.config import get_config

SUNDAY = 0
SATURDAY = 6


def _parse_clock(value: str) -> time:
    hours, minutes = value.split(":", 1)
    return time(int(hours), int(minutes))


def weekday_index(moment: datetime) -> int:
    """Day of week with 0 = Sunday through 6 = Saturday."""
    return moment.isoweekday() % 7


@dataclass(frozen=True)
class BusinessHoursWindow:
    """Allowed delivery window; ``tz`` is used to read aware timestamps."""

    start: str = "09:00"
    end: str = "20:00"
    days: frozenset[int] = field(default_factory=lambda: frozenset({1, 2, 3, 4, 5, 6}))
    tz: tzinfo | None = None

    @property
    def start_time(self) -> time:
        return _parse_clock(self.start)

    @property
    def end_time(self) -> time:
        return _parse_clock(self.end)

    def localize(self, moment: datetime) -> datetime:
        if moment.tzinfo is None or self.tz is None:
            return moment
        return moment.astimezone(self.tz)

    def contains(self, moment: datetime) -> bool:
        local = self.localize(moment)
        clock = local.time().replace(tzinfo=None)
        return weekday_index(local) in self.days and self.start_time <= clock < self.end_time


BUSINESS_HOURS = BusinessHoursWindow()


def default_window() -> BusinessHoursWindow:
    """Fixed window bounds read in the configured business timezone."""
    return BusinessHoursWindow(
        start=BUSINESS_HOURS.start,
        end=BUSINESS_HOURS.end,
        days=BUSINESS_HOURS.days,
        tz=ZoneInfo(get_config().BUSINESS_TIMEZONE),
    )


def _at_opening(local: datetime, window: BusinessHoursWindow) -> datetime:
    opening = window.start_time
    return local.replace(hour=opening.hour, minute=opening.minute, second=0, microsecond=0)


def adjust_to_business_hours(moment: datetime, window: BusinessHoursWindow | None = None) -> datetime:
    """Return the next timestamp inside the window, or ``moment`` unchanged.

    Naive input is read as wall-clock time and a naive value comes back.
    Aware input is converted into ``window.tz`` first and stays aware.
    """
    window = window or BUSINESS_HOURS
    local = window.localize(moment)
    day = weekday_index(local)
    clock = local.time().replace(tzinfo=None)

    if day == SUNDAY:
        return _at_opening(local + timedelta(days=1), window)

    if clock < window.start_time:
        return _at_opening(local, window)

    if clock >= window.end_time:
        step = 2 if day == SATURDAY else 1
        adjusted = _at_opening(local + timedelta(days=step), window)
        if weekday_index(adjusted) == SUNDAY:
            adjusted = adjusted + timedelta(days=1)
        return adjusted

    return moment


def is_within_business_hours(moment: datetime, window: BusinessHoursWindow | None = None) -> bool:
    return (window or BUSINESS_HOURS).contains(moment)
