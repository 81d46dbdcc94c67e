from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timeclock.errors import (
    AlreadyClosedError,
    ApiError,
    ConflictError,
    DuplicateRecordError,
    NotFoundError,
)
from timeclock.models import AttendanceRecord, DayType, Employee, LeaveKind, LifecycleState
from timeclock.schemas import AttendanceCorrectionRequest
from timeclock.settings import get_attendance_timezone
from timeclock.services.calendar import Clock, expected_work_hours, holiday_expected_hours
from timeclock.services.computation import to_local
from timeclock.services.employees import list_active_ids

logger = logging.getLogger("timeclock.attendance")

DEFAULT_HOLIDAY_DESCRIPTION = "HOLIDAY"


def _resolve_active_employee(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError(code="EMPLOYEE_NOT_FOUND", message="Employee not found.")
    if not employee.is_active:
        raise ApiError(
            status_code=403,
            code="EMPLOYEE_INACTIVE",
            message="Inactive employee cannot perform attendance actions.",
        )
    return employee


def _insert_record(db: Session, record: AttendanceRecord) -> AttendanceRecord:
    log_context = {
        "employee_id": record.employee_id,
        "day_date": record.day_date.isoformat(),
        "day_type": record.day_type.value,
    }
    db.add(record)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("attendance_duplicate_rejected", extra=log_context)
        raise DuplicateRecordError() from exc
    db.refresh(record)
    return record


def _find_record_for_day(db: Session, *, employee_id: int, day: date) -> AttendanceRecord | None:
    return db.scalar(
        select(AttendanceRecord).where(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.day_date == day,
        )
    )


def check_in(db: Session, employee_id: int, *, clock: Clock) -> AttendanceRecord:
    _resolve_active_employee(db, employee_id)
    now = clock.now()
    today = now.date()
    expected_hours = expected_work_hours(today)

    record = _insert_record(
        db,
        AttendanceRecord(
            employee_id=employee_id,
            day_date=today,
            check_in=now.astimezone(timezone.utc),
            day_type=DayType.PRESENT,
            lifecycle_state=LifecycleState.OPEN,
            expected_hours=expected_hours,
        ),
    )
    logger.info(
        "attendance_checkin_recorded",
        extra={"employee_id": employee_id, "record_id": record.id, "check_in": now.isoformat()},
    )
    return record


def check_out(db: Session, employee_id: int, *, clock: Clock) -> AttendanceRecord:
    now = clock.now()
    record = _find_record_for_day(db, employee_id=employee_id, day=now.date())
    if record is None or record.day_type != DayType.PRESENT:
        raise NotFoundError(
            code="OPEN_RECORD_NOT_FOUND",
            message="No check-in was found for today.",
        )
    if record.check_out is not None or record.lifecycle_state == LifecycleState.CLOSED:
        raise AlreadyClosedError()

    record.check_out = now.astimezone(timezone.utc)
    record.lifecycle_state = LifecycleState.CLOSED
    db.commit()
    db.refresh(record)
    logger.info(
        "attendance_checkout_recorded",
        extra={"employee_id": employee_id, "record_id": record.id, "check_out": now.isoformat()},
    )
    return record


def _insert_closed_day(
    db: Session,
    *,
    employee_id: int,
    day: date,
    day_type: DayType,
    description: str | None,
) -> AttendanceRecord:
    _resolve_active_employee(db, employee_id)
    expected_hours = expected_work_hours(day)
    return _insert_record(
        db,
        AttendanceRecord(
            employee_id=employee_id,
            day_date=day,
            day_type=day_type,
            description=description,
            lifecycle_state=LifecycleState.CLOSED,
            expected_hours=expected_hours,
        ),
    )


def log_home_office(
    db: Session,
    employee_id: int,
    *,
    clock: Clock,
    day: date | None = None,
) -> AttendanceRecord:
    target_day = day or clock.today()
    record = _insert_closed_day(
        db,
        employee_id=employee_id,
        day=target_day,
        day_type=DayType.HOME_OFFICE,
        description="HOME_OFFICE",
    )
    logger.info(
        "attendance_home_office_recorded",
        extra={"employee_id": employee_id, "record_id": record.id, "day_date": target_day.isoformat()},
    )
    return record


def log_leave(
    db: Session,
    employee_id: int,
    *,
    day: date,
    kind: LeaveKind,
    description: str | None = None,
) -> AttendanceRecord:
    record = _insert_closed_day(
        db,
        employee_id=employee_id,
        day=day,
        day_type=kind.to_day_type(),
        description=description,
    )
    logger.info(
        "attendance_leave_recorded",
        extra={
            "employee_id": employee_id,
            "record_id": record.id,
            "day_date": day.isoformat(),
            "leave_kind": kind.value,
        },
    )
    return record


def register_holiday(db: Session, day: date, description: str | None = None) -> int:
    expected_hours = holiday_expected_hours(day)
    employee_ids = list_active_ids(db)
    if not employee_ids:
        return 0

    db.add_all(
        [
            AttendanceRecord(
                employee_id=employee_id,
                day_date=day,
                day_type=DayType.HOLIDAY,
                description=description or DEFAULT_HOLIDAY_DESCRIPTION,
                lifecycle_state=LifecycleState.CLOSED,
                expected_hours=expected_hours,
            )
            for employee_id in employee_ids
        ]
    )
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning(
            "holiday_registration_rolled_back",
            extra={"day_date": day.isoformat(), "employee_count": len(employee_ids)},
        )
        raise ConflictError() from exc
    except Exception:
        db.rollback()
        raise

    logger.info(
        "holiday_registered",
        extra={"day_date": day.isoformat(), "inserted_count": len(employee_ids)},
    )
    return len(employee_ids)


def delete_holiday(db: Session, day: date) -> int:
    result = db.execute(
        delete(AttendanceRecord).where(
            AttendanceRecord.day_date == day,
            AttendanceRecord.day_type == DayType.HOLIDAY,
        )
    )
    db.commit()
    deleted_count = int(result.rowcount or 0)
    logger.info("holiday_deleted", extra={"day_date": day.isoformat(), "deleted_count": deleted_count})
    return deleted_count


def _normalize_correction_ts(ts: datetime | None) -> datetime | None:
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=get_attendance_timezone())
    return ts.astimezone(timezone.utc)


def _stored_utc(ts: datetime | None) -> datetime | None:
    if ts is None:
        return None
    return to_local(ts, timezone.utc)


def correct_record(db: Session, record_id: int, payload: AttendanceCorrectionRequest) -> AttendanceRecord:
    record = db.get(AttendanceRecord, record_id)
    if record is None:
        raise NotFoundError()

    changes = payload.model_dump(exclude_unset=True)
    if "check_in" in changes:
        check_in_ts = _normalize_correction_ts(changes["check_in"])
    else:
        check_in_ts = _stored_utc(record.check_in)
    if "check_out" in changes:
        check_out_ts = _normalize_correction_ts(changes["check_out"])
    else:
        check_out_ts = _stored_utc(record.check_out)

    if record.day_type != DayType.PRESENT:
        if check_in_ts is not None or check_out_ts is not None:
            raise ApiError(
                status_code=422,
                code="TIMESTAMPS_NOT_ALLOWED",
                message="Only present-type records carry check-in/check-out times.",
            )
    elif check_in_ts is not None and check_out_ts is not None and check_out_ts < check_in_ts:
        raise ApiError(
            status_code=422,
            code="INVALID_TIME_RANGE",
            message="check_out must be greater than or equal to check_in.",
        )

    tz = get_attendance_timezone()
    for field_name, ts in (("check_in", check_in_ts), ("check_out", check_out_ts)):
        if field_name in changes and ts is not None and to_local(ts, tz).date() != record.day_date:
            raise ApiError(
                status_code=422,
                code="INVALID_TIME_RANGE",
                message=f"{field_name} must fall on the record date {record.day_date.isoformat()}.",
            )

    if "check_in" in changes:
        record.check_in = check_in_ts
    if "check_out" in changes:
        record.check_out = check_out_ts
    if "description" in changes:
        record.description = changes["description"]
    if record.day_type == DayType.PRESENT:
        record.lifecycle_state = LifecycleState.CLOSED if record.check_out is not None else LifecycleState.OPEN

    db.commit()
    db.refresh(record)
    logger.info(
        "attendance_record_corrected",
        extra={"record_id": record.id, "fields": sorted(changes)},
    )
    return record
