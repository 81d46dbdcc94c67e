from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, tzinfo
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from timeclock.errors import ApiError, NotFoundError
from timeclock.models import AttendanceRecord, Employee
from timeclock.services.calendar import Clock, trailing_window
from timeclock.services.computation import ComputedRecord, compute_record, compute_records
from timeclock.settings import get_attendance_timezone, get_settings


@dataclass(frozen=True)
class EmployeeWeekTotals:
    employee_id: int
    full_name: str
    username: str
    days_attended: int
    total_hours: float
    total_overtime: float


@dataclass(frozen=True)
class SystemStats:
    active_employees: int
    today_count: int
    today_completed: int
    week_overtime: float


def _validate_range(start_date: date | None, end_date: date | None) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ApiError(
            status_code=422,
            code="INVALID_DATE_RANGE",
            message="start_date must be less than or equal to end_date",
        )


def _records_between(db: Session, start_date: date, end_date: date) -> list[AttendanceRecord]:
    return list(
        db.scalars(
            select(AttendanceRecord)
            .options(selectinload(AttendanceRecord.employee))
            .where(
                AttendanceRecord.day_date >= start_date,
                AttendanceRecord.day_date <= end_date,
            )
        ).all()
    )


def _sum_hours(values: list[float]) -> float:
    return float(sum((Decimal(str(value)) for value in values), Decimal(0)))


def get_computed_record(db: Session, record_id: int, *, tz: tzinfo | None = None) -> ComputedRecord:
    record = db.scalar(
        select(AttendanceRecord)
        .options(selectinload(AttendanceRecord.employee))
        .where(AttendanceRecord.id == record_id)
    )
    if record is None:
        raise NotFoundError()
    return compute_record(record, tz)


def list_computed_records(
    db: Session,
    *,
    day: date | None = None,
    employee_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int | None = None,
    tz: tzinfo | None = None,
) -> list[ComputedRecord]:
    _validate_range(start_date, end_date)
    stmt = (
        select(AttendanceRecord)
        .options(selectinload(AttendanceRecord.employee))
        .order_by(
            AttendanceRecord.day_date.desc(),
            AttendanceRecord.check_in.desc().nulls_last(),
            AttendanceRecord.id.desc(),
        )
        .limit(limit or get_settings().default_list_limit)
    )
    if day is not None:
        stmt = stmt.where(AttendanceRecord.day_date == day)
    if employee_id is not None:
        stmt = stmt.where(AttendanceRecord.employee_id == employee_id)
    if start_date is not None:
        stmt = stmt.where(AttendanceRecord.day_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(AttendanceRecord.day_date <= end_date)

    return compute_records(list(db.scalars(stmt).all()), tz)


def list_records_for_export(
    db: Session,
    *,
    start_date: date,
    end_date: date,
    tz: tzinfo | None = None,
) -> list[ComputedRecord]:
    _validate_range(start_date, end_date)
    computed = compute_records(_records_between(db, start_date, end_date), tz)
    # Name ascending, newest day first within each employee.
    computed.sort(key=lambda item: item.day_date, reverse=True)
    computed.sort(key=lambda item: ((item.employee_name or "").casefold(), item.employee_id))
    return computed


def weekly_summary(
    db: Session,
    *,
    start_date: date,
    end_date: date,
    tz: tzinfo | None = None,
) -> list[EmployeeWeekTotals]:
    _validate_range(start_date, end_date)
    tz = tz or get_attendance_timezone()
    employees = list(
        db.scalars(
            select(Employee)
            .where(Employee.is_active.is_(True))
            .order_by(Employee.full_name.asc(), Employee.id.asc())
        ).all()
    )

    by_employee: dict[int, list[ComputedRecord]] = defaultdict(list)
    for item in compute_records(_records_between(db, start_date, end_date), tz):
        by_employee[item.employee_id].append(item)

    summary: list[EmployeeWeekTotals] = []
    for employee in employees:
        items = by_employee.get(employee.id, [])
        summary.append(
            EmployeeWeekTotals(
                employee_id=employee.id,
                full_name=employee.full_name,
                username=employee.username,
                days_attended=len(items),
                total_hours=_sum_hours([item.worked_hours for item in items]),
                total_overtime=_sum_hours([item.overtime_hours for item in items]),
            )
        )
    return summary


def system_stats(db: Session, *, clock: Clock, tz: tzinfo | None = None) -> SystemStats:
    today = clock.today()
    window_start, window_end = trailing_window(today, days=7)

    active_employees = db.scalar(
        select(func.count()).select_from(Employee).where(Employee.is_active.is_(True))
    )
    today_count = db.scalar(
        select(func.count()).select_from(AttendanceRecord).where(AttendanceRecord.day_date == today)
    )
    today_completed = db.scalar(
        select(func.count())
        .select_from(AttendanceRecord)
        .where(
            AttendanceRecord.day_date == today,
            AttendanceRecord.check_out.is_not(None),
        )
    )
    window_records = compute_records(_records_between(db, window_start, window_end), tz)

    return SystemStats(
        active_employees=int(active_employees or 0),
        today_count=int(today_count or 0),
        today_completed=int(today_completed or 0),
        week_overtime=_sum_hours([item.overtime_hours for item in window_records]),
    )
