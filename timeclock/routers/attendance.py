from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from timeclock.db import get_db
from timeclock.schemas import (
    CheckoutResponse,
    ComputedRecordRead,
    HomeOfficeRequest,
    RecordCreatedResponse,
)
from timeclock.services.calendar import Clock, get_clock
from timeclock.services.lifecycle import check_in, check_out, log_home_office
from timeclock.services.reports import get_computed_record, list_computed_records

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.post(
    "/{employee_id}/checkin",
    response_model=RecordCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def employee_checkin(
    employee_id: int,
    request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> RecordCreatedResponse:
    request.state.employee_id = employee_id
    record = check_in(db, employee_id, clock=clock)
    request.state.record_id = record.id
    return RecordCreatedResponse(message="Check-in registered.", record_id=record.id)


@router.post("/{employee_id}/checkout", response_model=CheckoutResponse)
def employee_checkout(
    employee_id: int,
    request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> CheckoutResponse:
    request.state.employee_id = employee_id
    record = check_out(db, employee_id, clock=clock)
    request.state.record_id = record.id
    computed = get_computed_record(db, record.id)
    return CheckoutResponse(
        message="Check-out registered.",
        record=ComputedRecordRead.model_validate(computed),
    )


@router.post(
    "/{employee_id}/home-office",
    response_model=RecordCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def employee_home_office(
    employee_id: int,
    request: Request,
    payload: HomeOfficeRequest | None = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> RecordCreatedResponse:
    request.state.employee_id = employee_id
    day = payload.day_date if payload is not None else None
    record = log_home_office(db, employee_id, clock=clock, day=day)
    request.state.record_id = record.id
    return RecordCreatedResponse(message="Home office day registered.", record_id=record.id)


@router.get("/{employee_id}/history", response_model=list[ComputedRecordRead])
def employee_history(
    employee_id: int,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[ComputedRecordRead]:
    records = list_computed_records(
        db,
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    return [ComputedRecordRead.model_validate(item) for item in records]
