from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timeclock.errors import ApiError, NotFoundError
from timeclock.models import Employee
from timeclock.schemas import EmployeeCreate, EmployeeUpdate

logger = logging.getLogger("timeclock.employees")


def create_employee(db: Session, payload: EmployeeCreate) -> Employee:
    employee = Employee(
        full_name=payload.full_name,
        username=payload.username,
        position=payload.position,
        is_active=payload.is_active,
    )
    db.add(employee)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ApiError(status_code=409, code="USERNAME_TAKEN", message="Username already exists.") from exc
    db.refresh(employee)
    logger.info("employee_created", extra={"employee_id": employee.id})
    return employee


def list_employees(db: Session, *, include_inactive: bool = False) -> list[Employee]:
    stmt = select(Employee).order_by(Employee.full_name.asc(), Employee.id.asc())
    if not include_inactive:
        stmt = stmt.where(Employee.is_active.is_(True))
    return list(db.scalars(stmt).all())


def get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError(code="EMPLOYEE_NOT_FOUND", message="Employee not found.")
    return employee


def update_employee(db: Session, employee_id: int, payload: EmployeeUpdate) -> Employee:
    employee = get_employee(db, employee_id)
    changes = payload.model_dump(exclude_unset=True)
    # full_name and username are required columns; only position can be cleared.
    changes = {key: value for key, value in changes.items() if value is not None or key == "position"}
    for field_name, value in changes.items():
        setattr(employee, field_name, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ApiError(status_code=409, code="USERNAME_TAKEN", message="Username already exists.") from exc
    db.refresh(employee)
    logger.info("employee_updated", extra={"employee_id": employee.id, "fields": sorted(changes)})
    return employee


def deactivate_employee(db: Session, employee_id: int) -> Employee:
    employee = get_employee(db, employee_id)

    # Attendance history stays; the employee only drops out of active rollups.
    employee.is_active = False
    db.commit()
    db.refresh(employee)
    logger.info("employee_deactivated", extra={"employee_id": employee.id})
    return employee


def reactivate_employee(db: Session, employee_id: int) -> Employee:
    employee = get_employee(db, employee_id)
    if employee.is_active:
        raise ApiError(status_code=400, code="EMPLOYEE_ALREADY_ACTIVE", message="Employee is already active.")

    employee.is_active = True
    db.commit()
    db.refresh(employee)
    logger.info("employee_reactivated", extra={"employee_id": employee.id})
    return employee


def list_active_ids(db: Session) -> list[int]:
    return list(
        db.scalars(
            select(Employee.id).where(Employee.is_active.is_(True)).order_by(Employee.id.asc())
        ).all()
    )
