from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from timeclock.db import get_db
from timeclock.schemas import (
    AttendanceCorrectionRequest,
    AttendanceRecordRead,
    ComputedRecordRead,
    EmployeeCreate,
    EmployeeRead,
    EmployeeUpdate,
    EmployeeWeekTotalsRead,
    HolidayCreateRequest,
    HolidayCreateResponse,
    HolidayDeleteResponse,
    LeaveCreateRequest,
    RecordCreatedResponse,
    SystemStatsRead,
    WeeklySummaryResponse,
)
from timeclock.services.calendar import Clock, get_clock, iso_week_range
from timeclock.services.computation import ComputedRecord
from timeclock.services.employees import (
    create_employee,
    deactivate_employee,
    get_employee,
    list_employees,
    reactivate_employee,
    update_employee,
)
from timeclock.services.lifecycle import correct_record, delete_holiday, log_leave, register_holiday
from timeclock.services.reports import (
    get_computed_record,
    list_computed_records,
    list_records_for_export,
    system_stats,
    weekly_summary,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _to_computed_reads(records: list[ComputedRecord]) -> list[ComputedRecordRead]:
    return [ComputedRecordRead.model_validate(item) for item in records]


def _weekly_response(db: Session, *, start_date: date, end_date: date, week: str | None) -> WeeklySummaryResponse:
    rows = weekly_summary(db, start_date=start_date, end_date=end_date)
    return WeeklySummaryResponse(
        week=week,
        start_date=start_date,
        end_date=end_date,
        employees=[EmployeeWeekTotalsRead.model_validate(row) for row in rows],
    )


@router.post("/employees", response_model=EmployeeRead, status_code=status.HTTP_201_CREATED)
def admin_create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)) -> EmployeeRead:
    return EmployeeRead.model_validate(create_employee(db, payload))


@router.get("/employees", response_model=list[EmployeeRead])
def admin_list_employees(
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> list[EmployeeRead]:
    return [EmployeeRead.model_validate(item) for item in list_employees(db, include_inactive=include_inactive)]


@router.get("/employees/{employee_id}", response_model=EmployeeRead)
def admin_get_employee(employee_id: int, db: Session = Depends(get_db)) -> EmployeeRead:
    return EmployeeRead.model_validate(get_employee(db, employee_id))


@router.patch("/employees/{employee_id}", response_model=EmployeeRead)
def admin_update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
) -> EmployeeRead:
    return EmployeeRead.model_validate(update_employee(db, employee_id, payload))


@router.delete("/employees/{employee_id}", response_model=EmployeeRead)
def admin_deactivate_employee(employee_id: int, db: Session = Depends(get_db)) -> EmployeeRead:
    return EmployeeRead.model_validate(deactivate_employee(db, employee_id))


@router.post("/employees/{employee_id}/reactivate", response_model=EmployeeRead)
def admin_reactivate_employee(employee_id: int, db: Session = Depends(get_db)) -> EmployeeRead:
    return EmployeeRead.model_validate(reactivate_employee(db, employee_id))


@router.post("/leaves", response_model=RecordCreatedResponse, status_code=status.HTTP_201_CREATED)
def admin_register_leave(payload: LeaveCreateRequest, db: Session = Depends(get_db)) -> RecordCreatedResponse:
    record = log_leave(
        db,
        payload.employee_id,
        day=payload.day_date,
        kind=payload.kind,
        description=payload.description,
    )
    return RecordCreatedResponse(message=f"Leave ({payload.kind.value}) registered.", record_id=record.id)


@router.post("/holidays", response_model=HolidayCreateResponse, status_code=status.HTTP_201_CREATED)
def admin_register_holiday(payload: HolidayCreateRequest, db: Session = Depends(get_db)) -> HolidayCreateResponse:
    inserted_count = register_holiday(db, payload.day_date, payload.description)
    return HolidayCreateResponse(
        message=f"Holiday registered for {inserted_count} employees.",
        day_date=payload.day_date,
        inserted_count=inserted_count,
    )


@router.delete("/holidays/{day}", response_model=HolidayDeleteResponse)
def admin_delete_holiday(day: date, db: Session = Depends(get_db)) -> HolidayDeleteResponse:
    deleted_count = delete_holiday(db, day)
    return HolidayDeleteResponse(
        message=f"Removed {deleted_count} holiday records.",
        day_date=day,
        deleted_count=deleted_count,
    )


@router.get("/attendance", response_model=list[ComputedRecordRead])
def admin_list_attendance(
    day: date | None = Query(default=None),
    employee_id: int | None = Query(default=None, ge=1),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[ComputedRecordRead]:
    records = list_computed_records(
        db,
        day=day,
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    return _to_computed_reads(records)


@router.get("/attendance/date/{day}", response_model=list[ComputedRecordRead])
def admin_attendance_by_date(day: date, db: Session = Depends(get_db)) -> list[ComputedRecordRead]:
    return _to_computed_reads(list_computed_records(db, day=day))


@router.get("/attendance/{record_id}", response_model=ComputedRecordRead)
def admin_get_attendance(record_id: int, db: Session = Depends(get_db)) -> ComputedRecordRead:
    return ComputedRecordRead.model_validate(get_computed_record(db, record_id))


@router.patch("/attendance/{record_id}", response_model=AttendanceRecordRead)
def admin_correct_attendance(
    record_id: int,
    payload: AttendanceCorrectionRequest,
    db: Session = Depends(get_db),
) -> AttendanceRecordRead:
    return AttendanceRecordRead.model_validate(correct_record(db, record_id, payload))


@router.get("/weekly", response_model=WeeklySummaryResponse)
def admin_weekly_summary_by_range(
    start_date: date = Query(),
    end_date: date = Query(),
    db: Session = Depends(get_db),
) -> WeeklySummaryResponse:
    return _weekly_response(db, start_date=start_date, end_date=end_date, week=None)


@router.get("/weekly/{week}", response_model=WeeklySummaryResponse)
def admin_weekly_summary(week: str, db: Session = Depends(get_db)) -> WeeklySummaryResponse:
    start_date, end_date = iso_week_range(week)
    return _weekly_response(db, start_date=start_date, end_date=end_date, week=week)


@router.get("/export", response_model=list[ComputedRecordRead])
def admin_export_rows(
    start_date: date = Query(),
    end_date: date = Query(),
    db: Session = Depends(get_db),
) -> list[ComputedRecordRead]:
    return _to_computed_reads(list_records_for_export(db, start_date=start_date, end_date=end_date))


@router.get("/stats", response_model=SystemStatsRead)
def admin_system_stats(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> SystemStatsRead:
    return SystemStatsRead.model_validate(system_stats(db, clock=clock))
