from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from timeclock.models import DayType, LeaveKind, LifecycleState
from timeclock.services.computation import Observation


class EmployeeCreate(BaseModel):
    full_name: str = Field(min_length=2, max_length=255)
    username: str = Field(min_length=3, max_length=64)
    position: str | None = Field(default=None, max_length=255)
    is_active: bool = True


class EmployeeUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=2, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64)
    position: str | None = Field(default=None, max_length=255)

    model_config = ConfigDict(extra="forbid")


class EmployeeRead(BaseModel):
    id: int
    full_name: str
    username: str
    position: str | None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class AttendanceRecordRead(BaseModel):
    id: int
    employee_id: int
    day_date: date
    check_in: datetime | None
    check_out: datetime | None
    day_type: DayType
    description: str | None
    lifecycle_state: LifecycleState
    expected_hours: float

    model_config = ConfigDict(from_attributes=True)


class ComputedRecordRead(BaseModel):
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

    model_config = ConfigDict(from_attributes=True)


class RecordCreatedResponse(BaseModel):
    message: str
    record_id: int


class CheckoutResponse(BaseModel):
    message: str
    record: ComputedRecordRead


class HomeOfficeRequest(BaseModel):
    day_date: date | None = None


class LeaveCreateRequest(BaseModel):
    employee_id: int = Field(ge=1)
    day_date: date
    kind: LeaveKind
    description: str | None = Field(default=None, min_length=3, max_length=1000)


class HolidayCreateRequest(BaseModel):
    day_date: date
    description: str | None = Field(default=None, max_length=1000)


class HolidayCreateResponse(BaseModel):
    message: str
    day_date: date
    inserted_count: int


class HolidayDeleteResponse(BaseModel):
    message: str
    day_date: date
    deleted_count: int


class AttendanceCorrectionRequest(BaseModel):
    check_in: datetime | None = None
    check_out: datetime | None = None
    description: str | None = Field(default=None, max_length=1000)

    model_config = ConfigDict(extra="forbid")


class EmployeeWeekTotalsRead(BaseModel):
    employee_id: int
    full_name: str
    username: str
    days_attended: int
    total_hours: float
    total_overtime: float

    model_config = ConfigDict(from_attributes=True)


class WeeklySummaryResponse(BaseModel):
    week: str | None = None
    start_date: date
    end_date: date
    employees: list[EmployeeWeekTotalsRead]


class SystemStatsRead(BaseModel):
    active_employees: int
    today_count: int
    today_completed: int
    week_overtime: float

    model_config = ConfigDict(from_attributes=True)
