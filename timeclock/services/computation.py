from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from timeclock.models import AttendanceRecord, DayType, LifecycleState
from timeclock.settings import get_attendance_timezone, get_settings, get_workday_start

_HUNDREDTH = Decimal("0.01")
_SECONDS_PER_HOUR = Decimal(3600)
_LEAVE_DAY_TYPES = frozenset({DayType.MEDICAL_LEAVE, DayType.VACATION, DayType.OTHER_LEAVE})


class DayBranch(str, enum.Enum):
    FULL_CREDIT = "FULL_CREDIT"
    TIMED = "TIMED"
    PENDING = "PENDING"
    NO_CREDIT = "NO_CREDIT"
    MISSING_DATA = "MISSING_DATA"


class Observation(str, enum.Enum):
    HOLIDAY = "HOLIDAY"
    HOME_OFFICE = "HOME_OFFICE"
    MEDICAL_LEAVE = "MEDICAL_LEAVE"
    VACATION = "VACATION"
    LEAVE = "LEAVE"
    MISSING_DATA = "ERROR (PRESENT WITHOUT DATA)"
    PENDING_CHECKOUT = "PENDING CHECKOUT"
    LATE = "LATE"
    OK = "OK"


_OBSERVATION_BY_DAY_TYPE: dict[DayType, Observation] = {
    DayType.HOLIDAY: Observation.HOLIDAY,
    DayType.HOME_OFFICE: Observation.HOME_OFFICE,
    DayType.MEDICAL_LEAVE: Observation.MEDICAL_LEAVE,
    DayType.VACATION: Observation.VACATION,
    DayType.OTHER_LEAVE: Observation.LEAVE,
}


@dataclass(frozen=True)
class ComputedRecord:
    id: int
    employee_id: int
    employee_name: str | None
    day_date: date
    check_in: datetime | None
    check_out: datetime | None
    day_type: DayType
    description: str | None
    lifecycle_state: LifecycleState
    expected_hours: float
    effective_check_in: datetime | None
    effective_check_out: datetime | None
    worked_hours: float
    overtime_hours: float
    observation: Observation


def to_local(ts: datetime, tz: tzinfo) -> datetime:
    # Naive values come back from stores that drop the offset; they were written as UTC.
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz)


def _workday_boundary(local_ts: datetime) -> datetime:
    return datetime.combine(local_ts.date(), get_workday_start(), tzinfo=local_ts.tzinfo)


def _grace_limit(local_ts: datetime) -> datetime:
    return _workday_boundary(local_ts) + timedelta(minutes=get_settings().checkin_grace_minutes)


def resolve_effective_check_in(check_in: datetime | None, tz: tzinfo | None = None) -> datetime | None:
    """Snap a check-in inside the grace window (08:00 < t <= 08:15) back to 08:00.

    Time of day is compared at whole-second precision in the attendance timezone.
    """
    if check_in is None:
        return None
    local = to_local(check_in, tz or get_attendance_timezone())
    boundary = _workday_boundary(local)
    truncated = local.replace(microsecond=0)
    if boundary < truncated <= _grace_limit(local):
        return boundary
    return local


def resolve_effective_check_out(check_out: datetime | None, tz: tzinfo | None = None) -> datetime | None:
    if check_out is None:
        return None
    return to_local(check_out, tz or get_attendance_timezone())


def is_late(effective_check_in: datetime) -> bool:
    return effective_check_in.replace(microsecond=0) > _grace_limit(effective_check_in)


def classify_day(day_type: DayType, check_in: datetime | None, check_out: datetime | None) -> DayBranch:
    if day_type in (DayType.HOLIDAY, DayType.HOME_OFFICE):
        return DayBranch.FULL_CREDIT
    if day_type in _LEAVE_DAY_TYPES:
        return DayBranch.NO_CREDIT
    if check_in is None:
        return DayBranch.MISSING_DATA
    if check_out is None:
        return DayBranch.PENDING
    return DayBranch.TIMED


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(_HUNDREDTH, rounding=ROUND_HALF_UP)


def calculate_raw_worked(effective_check_in: datetime, effective_check_out: datetime) -> Decimal:
    settings = get_settings()
    elapsed = Decimal(str((effective_check_out - effective_check_in).total_seconds())) / _SECONDS_PER_HOUR
    if elapsed > Decimal(str(settings.meal_break_threshold_hours)):
        elapsed -= Decimal(str(settings.meal_break_hours))
    return _quantize(elapsed)


def calculate_hours(
    branch: DayBranch,
    *,
    expected_hours: float,
    effective_check_in: datetime | None,
    effective_check_out: datetime | None,
) -> tuple[float, float]:
    if branch == DayBranch.FULL_CREDIT:
        return float(expected_hours), 0.0
    if branch != DayBranch.TIMED or effective_check_in is None or effective_check_out is None:
        return 0.0, 0.0

    raw_worked = calculate_raw_worked(effective_check_in, effective_check_out)
    overtime = max(Decimal(0), raw_worked - Decimal(str(expected_hours)))
    return float(raw_worked), float(_quantize(overtime))


def classify_observation(branch: DayBranch, day_type: DayType, effective_check_in: datetime | None) -> Observation:
    mapped = _OBSERVATION_BY_DAY_TYPE.get(day_type)
    if mapped is not None:
        return mapped
    if branch == DayBranch.MISSING_DATA or effective_check_in is None:
        return Observation.MISSING_DATA
    if branch == DayBranch.PENDING:
        return Observation.PENDING_CHECKOUT
    if is_late(effective_check_in):
        return Observation.LATE
    return Observation.OK


def compute_record(record: AttendanceRecord, tz: tzinfo | None = None) -> ComputedRecord:
    tz = tz or get_attendance_timezone()
    effective_in = resolve_effective_check_in(record.check_in, tz)
    effective_out = resolve_effective_check_out(record.check_out, tz)
    branch = classify_day(record.day_type, record.check_in, record.check_out)
    worked_hours, overtime_hours = calculate_hours(
        branch,
        expected_hours=record.expected_hours,
        effective_check_in=effective_in,
        effective_check_out=effective_out,
    )
    employee = record.employee
    return ComputedRecord(
        id=record.id,
        employee_id=record.employee_id,
        employee_name=employee.full_name if employee is not None else None,
        day_date=record.day_date,
        check_in=to_local(record.check_in, tz) if record.check_in is not None else None,
        check_out=effective_out,
        day_type=record.day_type,
        description=record.description,
        lifecycle_state=record.lifecycle_state,
        expected_hours=float(record.expected_hours),
        effective_check_in=effective_in,
        effective_check_out=effective_out,
        worked_hours=worked_hours,
        overtime_hours=overtime_hours,
        observation=classify_observation(branch, record.day_type, effective_in),
    )


def compute_records(records: list[AttendanceRecord], tz: tzinfo | None = None) -> list[ComputedRecord]:
    tz = tz or get_attendance_timezone()
    return [compute_record(record, tz) for record in records]
