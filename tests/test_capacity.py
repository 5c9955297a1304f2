"""Tests for daily capacity calculation."""

from datetime import date, timedelta

import pytest

from conftest import FRIDAY, MONDAY, SATURDAY, THURSDAY, eight_hour_week
from laborplan.domain.errors import InvalidInputError
from laborplan.domain.models import CapacityParameters, DayUsage
from laborplan.scheduling.capacity import (
    DailyCapacityCalculator,
    available_hours,
    capacity_between,
    daily_capacity,
    is_work_day,
    weekly_capacity_hours,
)


class TestDailyCapacity:
    """Tests for daily_capacity."""

    def test_default_week_scales_with_headcount(self):
        params = CapacityParameters(employee_count=4)

        assert daily_capacity(THURSDAY, params).regular_capacity_hours == 36.0
        assert daily_capacity(FRIDAY, params).regular_capacity_hours == 16.0
        assert daily_capacity(SATURDAY, params).regular_capacity_hours == 0.0

    def test_overtime_zero_unless_requested(self):
        params = CapacityParameters(
            employee_count=3, work_week_schedule=eight_hour_week(with_overtime=True)
        )
        capacity = daily_capacity(MONDAY, params)

        assert capacity.overtime_capacity_hours == 0.0
        assert capacity.overtime_hours_per_employee == 2.0

    def test_overtime_when_requested(self, one_employee_overtime):
        capacity = daily_capacity(MONDAY, one_employee_overtime)

        assert capacity.regular_capacity_hours == 8.0
        assert capacity.overtime_capacity_hours == 2.0
        assert capacity.total_capacity_hours == 10.0

    def test_default_overtime_disabled(self):
        """The default week has overtime windows that are switched off."""
        params = CapacityParameters(employee_count=2, include_overtime=True)
        assert daily_capacity(MONDAY, params).overtime_capacity_hours == 0.0

    def test_disabled_day_has_no_overtime(self, one_employee_overtime):
        assert daily_capacity(SATURDAY, one_employee_overtime).total_capacity_hours == 0.0

    def test_accepts_date_string(self, one_employee):
        capacity = daily_capacity("2026-02-16", one_employee)
        assert capacity.schedule_date == MONDAY
        assert capacity.regular_capacity_hours == 8.0

    def test_to_dict(self, one_employee):
        data = daily_capacity(MONDAY, one_employee).to_dict()
        assert data["date"] == "2026-02-16"
        assert data["total_capacity_hours"] == 8.0


class TestCapacityHelpers:
    """Tests for work day checks, ranges and weekly totals."""

    def test_is_work_day(self, one_employee):
        assert is_work_day(MONDAY, one_employee)
        assert not is_work_day(SATURDAY, one_employee)

    def test_capacity_between_inclusive(self, one_employee):
        days = capacity_between(MONDAY, MONDAY + timedelta(days=6), one_employee)

        assert [d.schedule_date for d in days][0] == MONDAY
        assert len(days) == 7
        assert sum(d.regular_capacity_hours for d in days) == 40.0

    def test_capacity_between_empty_when_reversed(self, one_employee):
        assert capacity_between(FRIDAY, MONDAY, one_employee) == []

    def test_weekly_capacity(self):
        assert weekly_capacity_hours(CapacityParameters(employee_count=3)) == 120.0

    def test_weekly_capacity_with_overtime(self, one_employee_overtime):
        assert weekly_capacity_hours(one_employee_overtime) == 50.0

    def test_available_hours_subtracts_usage(self, one_employee_overtime):
        capacity = daily_capacity(MONDAY, one_employee_overtime)

        assert available_hours(capacity, None) == (8.0, 2.0)
        assert available_hours(capacity, DayUsage(5.0, 0.5)) == (3.0, 1.5)
        assert available_hours(capacity, DayUsage(12.0, 3.0)) == (0.0, 0.0)


class TestDailyCapacityCalculator:
    """Tests for the per-weekday cache."""

    def test_matches_direct_calculation(self):
        params = CapacityParameters(employee_count=5)
        calculator = DailyCapacityCalculator(params)

        start = date(2026, 1, 1)
        for offset in range(30):
            d = start + timedelta(days=offset)
            assert calculator.for_date(d) == daily_capacity(d, params)

    def test_returns_requested_date(self, one_employee):
        calculator = DailyCapacityCalculator(one_employee)
        calculator.for_date(MONDAY)

        next_monday = MONDAY + timedelta(days=7)
        assert calculator.for_date(next_monday).schedule_date == next_monday


class TestCapacityParameters:
    """Tests for parameter validation."""

    @pytest.mark.parametrize("count", [0, -1, 1.5, True, "3", None])
    def test_invalid_employee_count(self, count):
        with pytest.raises(InvalidInputError) as exc_info:
            CapacityParameters(employee_count=count)
        assert exc_info.value.field == "employee_count"

    def test_integral_float_accepted(self):
        assert CapacityParameters(employee_count=2.0).employee_count == 2

    def test_schedule_normalized(self):
        params = CapacityParameters(work_week_schedule={1: 6})
        assert len(params.work_week_schedule) == 7
        assert params.work_week_schedule[1].regular_hours_per_employee == 6.0

    def test_with_overtime_copies(self, one_employee):
        with_ot = one_employee.with_overtime()
        assert with_ot.include_overtime
        assert not one_employee.include_overtime
