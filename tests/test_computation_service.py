from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from timeclock.models import AttendanceRecord, DayType, Employee, LifecycleState
from timeclock.services.computation import (
    DayBranch,
    Observation,
    calculate_hours,
    calculate_raw_worked,
    classify_day,
    compute_record,
    resolve_effective_check_in,
)

LIMA = ZoneInfo("America/Lima")
MONDAY = date(2026, 2, 2)
SATURDAY = date(2026, 2, 7)


def _at(hour: int, minute: int = 0, second: int = 0, day: date = MONDAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=LIMA)


def _record(
    *,
    day_type: DayType = DayType.PRESENT,
    check_in: datetime | None = None,
    check_out: datetime | None = None,
    expected_hours: float = 8,
    day: date = MONDAY,
) -> AttendanceRecord:
    record = AttendanceRecord(
        id=1,
        employee_id=7,
        day_date=day,
        check_in=check_in,
        check_out=check_out,
        day_type=day_type,
        lifecycle_state=LifecycleState.CLOSED if check_out or day_type != DayType.PRESENT else LifecycleState.OPEN,
        expected_hours=expected_hours,
    )
    record.employee = Employee(id=7, full_name="Ana Torres", username="atorres", is_active=True)
    return record


class ToleranceResolverTests(unittest.TestCase):
    def test_exact_start_is_unchanged(self) -> None:
        self.assertEqual(resolve_effective_check_in(_at(8, 0, 0), LIMA), _at(8, 0, 0))

    def test_end_of_grace_window_snaps_to_start(self) -> None:
        self.assertEqual(resolve_effective_check_in(_at(8, 15, 0), LIMA), _at(8, 0, 0))

    def test_inside_grace_window_snaps_to_start(self) -> None:
        self.assertEqual(resolve_effective_check_in(_at(8, 7, 42), LIMA), _at(8, 0, 0))

    def test_one_second_past_grace_is_unchanged(self) -> None:
        self.assertEqual(resolve_effective_check_in(_at(8, 15, 1), LIMA), _at(8, 15, 1))

    def test_early_arrival_is_unchanged(self) -> None:
        self.assertEqual(resolve_effective_check_in(_at(7, 59, 0), LIMA), _at(7, 59, 0))

    def test_sub_second_precision_is_ignored(self) -> None:
        check_in = _at(8, 15, 0).replace(microsecond=500000)
        self.assertEqual(resolve_effective_check_in(check_in, LIMA), _at(8, 0, 0))

    def test_naive_values_are_read_as_utc(self) -> None:
        stored = datetime(2026, 2, 2, 13, 10)
        self.assertEqual(resolve_effective_check_in(stored, LIMA), _at(8, 0, 0))

    def test_missing_check_in_resolves_to_none(self) -> None:
        self.assertIsNone(resolve_effective_check_in(None, LIMA))


class HoursCalculatorTests(unittest.TestCase):
    def test_long_day_deducts_meal_break(self) -> None:
        worked, overtime = calculate_hours(
            DayBranch.TIMED,
            expected_hours=8,
            effective_check_in=_at(8),
            effective_check_out=_at(17),
        )
        self.assertEqual(worked, 8.0)
        self.assertEqual(overtime, 0.0)

    def test_overtime_beyond_expected_hours(self) -> None:
        worked, overtime = calculate_hours(
            DayBranch.TIMED,
            expected_hours=8,
            effective_check_in=_at(8),
            effective_check_out=_at(19),
        )
        self.assertEqual(worked, 10.0)
        self.assertEqual(overtime, 2.0)

    def test_short_day_has_no_deduction_and_no_negative_overtime(self) -> None:
        worked, overtime = calculate_hours(
            DayBranch.TIMED,
            expected_hours=8,
            effective_check_in=_at(8),
            effective_check_out=_at(13),
        )
        self.assertEqual(worked, 5.0)
        self.assertEqual(overtime, 0.0)

    def test_exactly_six_hours_keeps_full_time(self) -> None:
        self.assertEqual(str(calculate_raw_worked(_at(8), _at(14))), "6.00")

    def test_just_over_six_hours_deducts_break(self) -> None:
        self.assertEqual(str(calculate_raw_worked(_at(8), _at(14, 1))), "5.02")

    def test_fractional_hours_round_to_two_decimals(self) -> None:
        self.assertEqual(str(calculate_raw_worked(_at(8), _at(16, 20))), "7.33")

    def test_full_credit_branch_uses_expected_hours(self) -> None:
        self.assertEqual(
            calculate_hours(
                DayBranch.FULL_CREDIT,
                expected_hours=5,
                effective_check_in=None,
                effective_check_out=None,
            ),
            (5.0, 0.0),
        )

    def test_pending_and_leave_branches_yield_zero(self) -> None:
        for branch in (DayBranch.PENDING, DayBranch.NO_CREDIT, DayBranch.MISSING_DATA):
            with self.subTest(branch=branch):
                self.assertEqual(
                    calculate_hours(
                        branch,
                        expected_hours=8,
                        effective_check_in=_at(8),
                        effective_check_out=None,
                    ),
                    (0.0, 0.0),
                )


class DayTypeClassifierTests(unittest.TestCase):
    def test_branches(self) -> None:
        cases = [
            (DayType.HOLIDAY, None, None, DayBranch.FULL_CREDIT),
            (DayType.HOME_OFFICE, None, None, DayBranch.FULL_CREDIT),
            (DayType.MEDICAL_LEAVE, None, None, DayBranch.NO_CREDIT),
            (DayType.VACATION, None, None, DayBranch.NO_CREDIT),
            (DayType.OTHER_LEAVE, None, None, DayBranch.NO_CREDIT),
            (DayType.PRESENT, None, None, DayBranch.MISSING_DATA),
            (DayType.PRESENT, _at(8), None, DayBranch.PENDING),
            (DayType.PRESENT, _at(8), _at(17), DayBranch.TIMED),
        ]
        for day_type, check_in, check_out, expected in cases:
            with self.subTest(day_type=day_type, check_in=check_in, check_out=check_out):
                self.assertEqual(classify_day(day_type, check_in, check_out), expected)


class ComputeRecordTests(unittest.TestCase):
    def test_grace_check_in_counts_from_start_of_day(self) -> None:
        computed = compute_record(_record(check_in=_at(8, 12), check_out=_at(17)), LIMA)
        self.assertEqual(computed.effective_check_in, _at(8))
        self.assertEqual(computed.worked_hours, 8.0)
        self.assertEqual(computed.overtime_hours, 0.0)
        self.assertEqual(computed.observation, Observation.OK)
        self.assertEqual(computed.employee_name, "Ana Torres")

    def test_late_check_in_with_checkout_is_flagged(self) -> None:
        computed = compute_record(_record(check_in=_at(8, 20), check_out=_at(18, 20)), LIMA)
        self.assertEqual(computed.observation, Observation.LATE)
        self.assertEqual(computed.observation.value, "LATE")
        self.assertEqual(computed.worked_hours, 9.0)
        self.assertEqual(computed.overtime_hours, 1.0)

    def test_pending_checkout_outranks_lateness(self) -> None:
        computed = compute_record(_record(check_in=_at(8, 20)), LIMA)
        self.assertEqual(computed.observation, Observation.PENDING_CHECKOUT)
        self.assertEqual(computed.observation.value, "PENDING CHECKOUT")
        self.assertEqual(computed.worked_hours, 0.0)
        self.assertEqual(computed.overtime_hours, 0.0)

    def test_present_without_check_in_reports_data_error(self) -> None:
        computed = compute_record(_record(), LIMA)
        self.assertEqual(computed.observation.value, "ERROR (PRESENT WITHOUT DATA)")
        self.assertEqual(computed.worked_hours, 0.0)

    def test_holiday_and_home_office_get_full_credit(self) -> None:
        for day_type, label in ((DayType.HOLIDAY, "HOLIDAY"), (DayType.HOME_OFFICE, "HOME_OFFICE")):
            with self.subTest(day_type=day_type):
                computed = compute_record(_record(day_type=day_type, expected_hours=8), LIMA)
                self.assertEqual(computed.worked_hours, 8.0)
                self.assertEqual(computed.overtime_hours, 0.0)
                self.assertEqual(computed.observation.value, label)

    def test_leave_types_get_no_credit(self) -> None:
        cases = (
            (DayType.MEDICAL_LEAVE, "MEDICAL_LEAVE"),
            (DayType.VACATION, "VACATION"),
            (DayType.OTHER_LEAVE, "LEAVE"),
        )
        for day_type, label in cases:
            with self.subTest(day_type=day_type):
                computed = compute_record(_record(day_type=day_type), LIMA)
                self.assertEqual(computed.worked_hours, 0.0)
                self.assertEqual(computed.overtime_hours, 0.0)
                self.assertEqual(computed.observation.value, label)

    def test_saturday_overtime_measured_against_reduced_quota(self) -> None:
        computed = compute_record(
            _record(
                check_in=_at(8, day=SATURDAY),
                check_out=_at(14, day=SATURDAY),
                expected_hours=5,
                day=SATURDAY,
            ),
            LIMA,
        )
        self.assertEqual(computed.worked_hours, 6.0)
        self.assertEqual(computed.overtime_hours, 1.0)

    def test_utc_storage_is_rendered_in_attendance_timezone(self) -> None:
        computed = compute_record(
            _record(
                check_in=datetime(2026, 2, 2, 13, 0, tzinfo=timezone.utc),
                check_out=datetime(2026, 2, 2, 22, 0, tzinfo=timezone.utc),
            ),
            LIMA,
        )
        self.assertEqual(computed.check_in, _at(8))
        self.assertEqual(computed.check_out, _at(17))
        self.assertEqual(computed.worked_hours, 8.0)


if __name__ == "__main__":
    unittest.main()
