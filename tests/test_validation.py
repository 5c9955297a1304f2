"""Tests for plan validation."""

import pytest

from conftest import FRIDAY, MONDAY, SATURDAY, THURSDAY, TUESDAY
from laborplan.config import SchedulerConfig
from laborplan.domain.models import (
    DayUsage,
    JobScheduleInput,
    JobScheduleResult,
    ScheduleAllocation,
    ScheduleOutput,
)
from laborplan.scheduling.backward_scheduler import BackwardScheduler
from laborplan.validation.validator import (
    PlanValidator,
    ValidationError,
    ValidationErrorType,
)


def _allocation(d, regular, overtime=0.0) -> ScheduleAllocation:
    return ScheduleAllocation(
        schedule_date=d,
        scheduled_hours=regular + overtime,
        regular_hours=regular,
        overtime_hours=overtime,
    )


def _single_result_output(allocations, due=FRIDAY, required=None, unscheduled=0.0):
    """Build an output for one hand-made result with a matching ledger."""
    placed = sum(a.scheduled_hours for a in allocations)
    required = placed + unscheduled if required is None else required
    ledger = {}
    for a in allocations:
        ledger.setdefault(a.schedule_date, DayUsage()).add(a.regular_hours, a.overtime_hours)
    result = JobScheduleResult(
        id="J1",
        due_date=due,
        start_date=allocations[0].schedule_date if allocations else due,
        required_hours=required,
        scheduled_hours=placed,
        overtime_hours=sum(a.overtime_hours for a in allocations),
        unscheduled_hours=unscheduled,
        allocations=allocations,
    )
    return ScheduleOutput(results=[result], day_usage=ledger)


class TestPlanValidator:
    """Tests for PlanValidator."""

    @pytest.fixture
    def validator(self):
        """Create a validator with the default tolerance."""
        return PlanValidator()

    @pytest.fixture
    def jobs(self):
        """Jobs that compete for the same week."""
        return [
            JobScheduleInput(id="a", due_date=FRIDAY, required_hours=24),
            JobScheduleInput(id="b", due_date=THURSDAY, required_hours=16, is_rush=True),
            JobScheduleInput(id="c", due_date=FRIDAY, required_hours=12),
        ]

    def test_scheduler_output_is_valid(self, validator, jobs, one_employee):
        output = BackwardScheduler().schedule(jobs, one_employee)
        result = validator.validate(output, one_employee, jobs)

        assert result.is_valid, [str(e) for e in result.errors]
        assert result.warnings == []

    def test_overtime_output_is_valid(self, validator, jobs, one_employee_overtime):
        scheduler = BackwardScheduler(SchedulerConfig(lookback_days=5))
        output = scheduler.schedule(jobs, one_employee_overtime)
        result = validator.validate(output, one_employee_overtime, jobs)

        assert result.is_valid, [str(e) for e in result.errors]

    def test_shortfall_is_warning_not_error(self, validator, one_employee):
        jobs = [JobScheduleInput(id="big", due_date=FRIDAY, required_hours=50)]
        output = BackwardScheduler(SchedulerConfig(lookback_days=5)).schedule(jobs, one_employee)
        result = validator.validate(output, one_employee, jobs)

        assert result.is_valid
        assert len(result.warnings) == 1
        assert "big" in result.warnings[0]
        assert "short" in result.warnings[0]

    def test_seed_ledger(self, validator, one_employee):
        seed = {FRIDAY: DayUsage(regular_hours=3.0)}
        jobs = [JobScheduleInput(id="a", due_date=FRIDAY, required_hours=10)]
        output = BackwardScheduler().schedule(jobs, one_employee, seed)

        assert validator.validate(output, one_employee, jobs, seed_usage=seed).is_valid

        result = validator.validate(output, one_employee, jobs)
        assert result.errors_of_type(ValidationErrorType.LEDGER_MISMATCH)

    def test_regular_capacity_exceeded(self, validator, one_employee):
        output = _single_result_output([_allocation(MONDAY, 10.0)])
        result = validator.validate(output, one_employee)

        assert not result.is_valid
        errors = result.errors_of_type(ValidationErrorType.REGULAR_CAPACITY_EXCEEDED)
        assert len(errors) == 1
        assert errors[0].schedule_date == MONDAY

    def test_work_on_non_work_day(self, validator, one_employee):
        output = _single_result_output([_allocation(SATURDAY, 1.0)], due=SATURDAY)
        result = validator.validate(output, one_employee)
        assert result.errors_of_type(ValidationErrorType.REGULAR_CAPACITY_EXCEEDED)

    def test_overtime_capacity_exceeded(self, validator, one_employee_overtime):
        output = _single_result_output([_allocation(MONDAY, 8.0, 3.0)])
        result = validator.validate(output, one_employee_overtime)
        assert result.errors_of_type(ValidationErrorType.OVERTIME_CAPACITY_EXCEEDED)

    def test_overtime_without_overtime_capacity(self, validator, one_employee):
        output = _single_result_output([_allocation(MONDAY, 8.0, 1.0)])
        result = validator.validate(output, one_employee)
        assert result.errors_of_type(ValidationErrorType.OVERTIME_CAPACITY_EXCEEDED)

    def test_overtime_before_regular(self, validator, one_employee_overtime):
        output = _single_result_output([_allocation(MONDAY, 4.0, 2.0)])
        result = validator.validate(output, one_employee_overtime)
        assert result.errors_of_type(ValidationErrorType.OVERTIME_BEFORE_REGULAR)

    def test_allocation_after_due_date(self, validator, one_employee):
        output = _single_result_output([_allocation(FRIDAY, 4.0)], due=THURSDAY)
        result = validator.validate(output, one_employee)

        errors = result.errors_of_type(ValidationErrorType.ALLOCATION_AFTER_DUE_DATE)
        assert len(errors) == 1
        assert errors[0].job_id == "J1"

    def test_allocations_out_of_order(self, validator, one_employee):
        output = _single_result_output([_allocation(TUESDAY, 4.0), _allocation(MONDAY, 4.0)])
        result = validator.validate(output, one_employee)
        assert result.errors_of_type(ValidationErrorType.ALLOCATIONS_OUT_OF_ORDER)

    def test_invalid_allocation_split(self, validator, one_employee):
        allocation = ScheduleAllocation(
            schedule_date=MONDAY, scheduled_hours=5.0, regular_hours=4.0, overtime_hours=0.0
        )
        output = _single_result_output([allocation], required=5.0)
        result = validator.validate(output, one_employee)
        assert result.errors_of_type(ValidationErrorType.INVALID_ALLOCATION)

    def test_hours_mismatch(self, validator, one_employee):
        output = _single_result_output([_allocation(MONDAY, 4.0)], required=6.0)
        result = validator.validate(output, one_employee)

        errors = result.errors_of_type(ValidationErrorType.HOURS_MISMATCH)
        assert len(errors) == 1
        assert errors[0].details["required"] == 6.0

    def test_hours_checked_against_job_input(self, validator, one_employee):
        jobs = [JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=9)]
        output = _single_result_output([_allocation(MONDAY, 4.0)])
        result = validator.validate(output, one_employee, jobs)
        assert result.errors_of_type(ValidationErrorType.HOURS_MISMATCH)

    def test_ledger_mismatch(self, validator, one_employee):
        output = _single_result_output([_allocation(MONDAY, 4.0)])
        output.day_usage[MONDAY] = DayUsage(2.0, 0.0)
        result = validator.validate(output, one_employee)

        errors = result.errors_of_type(ValidationErrorType.LEDGER_MISMATCH)
        assert len(errors) == 1
        assert errors[0].schedule_date == MONDAY

    def test_unknown_and_missing_jobs(self, validator, one_employee):
        jobs = [JobScheduleInput(id="other", due_date=FRIDAY, required_hours=4)]
        output = _single_result_output([_allocation(MONDAY, 4.0)])
        result = validator.validate(output, one_employee, jobs)

        assert result.errors_of_type(ValidationErrorType.UNKNOWN_JOB)
        missing = result.errors_of_type(ValidationErrorType.MISSING_RESULT)
        assert [e.job_id for e in missing] == ["other"]

    def test_count_days_over_capacity(self, validator, one_employee):
        usage = {MONDAY: DayUsage(10.0, 0.0), TUESDAY: DayUsage(8.0, 0.0)}
        over = validator.count_days_over_capacity(usage, one_employee)
        assert over == {MONDAY: 2.0}


class TestValidationError:
    """Tests for error formatting."""

    def test_str_includes_context(self):
        error = ValidationError(
            error_type=ValidationErrorType.ALLOCATION_AFTER_DUE_DATE,
            message="Work placed after due date",
            job_id="J7",
            schedule_date=FRIDAY,
        )
        text = str(error)
        assert "[allocation_after_due_date]" in text
        assert "Job J7:" in text
        assert "2026-02-20" in text
