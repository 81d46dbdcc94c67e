from __future__ import annotations

import re
from datetime import date, datetime, timedelta, tzinfo

from timeclock.errors import ApiError, NonWorkDayError
from timeclock.settings import get_attendance_timezone, get_settings

SATURDAY = 5
SUNDAY = 6
_ISO_WEEK_PATTERN = re.compile(r"^(?P<year>\d{4})-W(?P<week>0[1-9]|[1-4]\d|5[0-3])$")


class Clock:
    """Source of "now" and "today" in the attendance timezone."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def __init__(self, tz: tzinfo | None = None) -> None:
        self._tz = tz

    def now(self) -> datetime:
        return datetime.now(self._tz or get_attendance_timezone())


class FixedClock(Clock):
    def __init__(self, moment: datetime) -> None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=get_attendance_timezone())
        self._moment = moment

    def now(self) -> datetime:
        return self._moment


def get_clock() -> Clock:
    return SystemClock()


def expected_work_hours(day: date) -> float:
    settings = get_settings()
    weekday = day.weekday()
    if weekday == SUNDAY:
        raise NonWorkDayError()
    if weekday == SATURDAY:
        return float(settings.saturday_work_hours)
    return float(settings.weekday_work_hours)


def holiday_expected_hours(day: date) -> float:
    settings = get_settings()
    if day.weekday() == SUNDAY and settings.holiday_allows_sunday:
        return float(settings.sunday_work_hours)
    return expected_work_hours(day)


def iso_week_range(week: str) -> tuple[date, date]:
    match = _ISO_WEEK_PATTERN.match(week.strip())
    if match is None:
        raise ApiError(
            status_code=422,
            code="INVALID_WEEK",
            message="Week must use the YYYY-Www format (e.g. 2025-W42).",
        )
    try:
        monday = date.fromisocalendar(int(match.group("year")), int(match.group("week")), 1)
    except ValueError as exc:
        raise ApiError(status_code=422, code="INVALID_WEEK", message=str(exc)) from exc
    return monday, monday + timedelta(days=6)


def trailing_window(today: date, days: int = 7) -> tuple[date, date]:
    return today - timedelta(days=max(1, days) - 1), today
