from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError


@dataclass(frozen=True, slots=True)
class SchemaGuardResult:
    ok: bool
    checked_at_utc: datetime
    issues: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "checked_at_utc": self.checked_at_utc.isoformat(),
            "issues": list(self.issues),
            "issue_count": len(self.issues),
        }


REQUIRED_TABLE_COLUMNS: dict[str, set[str]] = {
    "employees": {"id", "full_name", "username", "is_active"},
    "attendance_records": {
        "id",
        "employee_id",
        "day_date",
        "check_in",
        "check_out",
        "day_type",
        "lifecycle_state",
        "expected_hours",
    },
    "alembic_version": {"version_num"},
}


def not_run_result() -> SchemaGuardResult:
    return SchemaGuardResult(
        ok=False,
        checked_at_utc=datetime.now(timezone.utc),
        issues=["SCHEMA_GUARD_NOT_RUN"],
    )


def verify_runtime_schema(engine: Engine) -> SchemaGuardResult:
    issues: list[str] = []
    checked_at_utc = datetime.now(timezone.utc)
    try:
        inspector = inspect(engine)
    except SQLAlchemyError as exc:
        return SchemaGuardResult(
            ok=False,
            checked_at_utc=checked_at_utc,
            issues=[f"DATABASE_UNREACHABLE:{exc.__class__.__name__}"],
        )

    for table_name, required_columns in REQUIRED_TABLE_COLUMNS.items():
        try:
            column_names = {str(item.get("name")) for item in inspector.get_columns(table_name)}
        except SQLAlchemyError as exc:
            issues.append(f"TABLE_UNREADABLE:{table_name}:{exc.__class__.__name__}")
            continue

        missing_columns = sorted(item for item in required_columns if item not in column_names)
        if missing_columns:
            issues.append(f"MISSING_COLUMNS:{table_name}:{','.join(missing_columns)}")

    try:
        with engine.connect() as connection:
            row = connection.execute(text("SELECT version_num FROM alembic_version LIMIT 1")).scalar()
            if not (str(row).strip() if row is not None else ""):
                issues.append("ALEMBIC_VERSION_EMPTY")
    except SQLAlchemyError as exc:
        issues.append(f"ALEMBIC_VERSION_CHECK_FAILED:{exc.__class__.__name__}")

    return SchemaGuardResult(ok=not issues, checked_at_utc=checked_at_utc, issues=issues)
