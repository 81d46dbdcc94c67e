from __future__ import annotations

import enum
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timeclock.db import Base


class DayType(str, enum.Enum):
    PRESENT = "PRESENT"
    HOME_OFFICE = "HOME_OFFICE"
    HOLIDAY = "HOLIDAY"
    MEDICAL_LEAVE = "MEDICAL_LEAVE"
    VACATION = "VACATION"
    OTHER_LEAVE = "OTHER_LEAVE"


class LeaveKind(str, enum.Enum):
    MEDICAL_LEAVE = "MEDICAL_LEAVE"
    VACATION = "VACATION"
    OTHER_LEAVE = "OTHER_LEAVE"

    def to_day_type(self) -> DayType:
        return DayType(self.value)


class LifecycleState(str, enum.Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    attendance_records: Mapped[list[AttendanceRecord]] = relationship(back_populates="employee")


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("employee_id", "day_date", name="uq_attendance_records_employee_day"),
        Index("ix_attendance_records_employee_day", "employee_id", "day_date"),
        Index("ix_attendance_records_day_date", "day_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="RESTRICT"),
        nullable=False,
    )
    day_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    day_type: Mapped[DayType] = mapped_column(
        Enum(DayType, name="attendance_day_type"),
        nullable=False,
        default=DayType.PRESENT,
        server_default=text("'PRESENT'"),
    )
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    lifecycle_state: Mapped[LifecycleState] = mapped_column(
        Enum(LifecycleState, name="attendance_lifecycle_state"),
        nullable=False,
        default=LifecycleState.OPEN,
        server_default=text("'OPEN'"),
    )
    expected_hours: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    employee: Mapped[Employee] = relationship(back_populates="attendance_records")
