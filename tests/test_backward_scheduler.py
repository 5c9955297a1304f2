"""Tests for capacity-aware backward scheduling."""

import logging
import math
from datetime import date, timedelta

import pytest

from conftest import FRIDAY, MONDAY, THURSDAY, TUESDAY, WEDNESDAY, eight_hour_week
from laborplan.config import SchedulerConfig
from laborplan.domain.errors import InvalidInputError
from laborplan.domain.models import CapacityParameters, DayUsage, JobScheduleInput
from laborplan.domain.work_week import DaySchedule
from laborplan.scheduling.backward_scheduler import BackwardScheduler, schedule_backward
from laborplan.scheduling.capacity import daily_capacity


@pytest.fixture
def scheduler():
    """Scheduler with the default one-year lookback."""
    return BackwardScheduler()


@pytest.fixture
def one_week_scheduler():
    """Scheduler that only looks back over the due date's Monday-Friday."""
    return BackwardScheduler(SchedulerConfig(lookback_days=5))


class TestSingleJob:
    """Tests for one job walking back from its due date."""

    def test_due_date_is_a_work_day(self, scheduler, one_employee):
        """32 hours due Friday fill Tuesday through Friday."""
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=32)
        output = scheduler.schedule([job], one_employee)

        result = output.results[0]
        assert [a.schedule_date for a in result.allocations] == [
            TUESDAY,
            WEDNESDAY,
            THURSDAY,
            FRIDAY,
        ]
        assert all(a.scheduled_hours == 8.0 for a in result.allocations)
        assert result.start_date == TUESDAY
        assert result.unscheduled_hours == 0.0
        assert result.is_fully_scheduled

    def test_four_days_ending_thursday(self, scheduler, one_employee):
        job = JobScheduleInput(id="J1", due_date=THURSDAY, required_hours=32)
        result = scheduler.schedule([job], one_employee).results[0]

        assert [a.schedule_date for a in result.allocations] == [
            MONDAY,
            TUESDAY,
            WEDNESDAY,
            THURSDAY,
        ]
        assert result.start_date == MONDAY

    def test_shortfall_within_horizon(self, one_week_scheduler, one_employee):
        """50 hours against one 40-hour week leaves 10 unscheduled."""
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=50)
        result = one_week_scheduler.schedule([job], one_employee).results[0]

        assert result.scheduled_hours == 40.0
        assert result.unscheduled_hours == 10.0
        assert result.start_date == MONDAY
        assert len(result.allocations) == 5
        assert not result.is_fully_scheduled

    def test_spills_into_previous_week(self, scheduler, one_employee):
        """With a long horizon the same job reaches back past the weekend."""
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=50)
        result = scheduler.schedule([job], one_employee).results[0]

        assert result.unscheduled_hours == 0.0
        assert result.start_date == date(2026, 2, 12)
        assert result.allocations[0].scheduled_hours == 2.0
        assert result.hours_on(date(2026, 2, 13)) == 8.0

    def test_weekends_skipped(self, scheduler, one_employee):
        job = JobScheduleInput(id="J1", due_date=MONDAY, required_hours=16)
        result = scheduler.schedule([job], one_employee).results[0]

        assert [a.schedule_date for a in result.allocations] == [date(2026, 2, 13), MONDAY]

    def test_due_on_weekend(self, scheduler, one_employee):
        job = JobScheduleInput(id="J1", due_date=date(2026, 2, 22), required_hours=4)
        result = scheduler.schedule([job], one_employee).results[0]

        assert result.start_date == FRIDAY
        assert result.allocations[0].scheduled_hours == 4.0

    def test_all_days_disabled(self, scheduler):
        params = CapacityParameters(
            work_week_schedule={day: DaySchedule.off_day() for day in range(7)}
        )
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=12)
        result = scheduler.schedule([job], params).results[0]

        assert result.allocations == []
        assert result.unscheduled_hours == 12.0
        assert result.scheduled_hours == 0.0
        assert result.start_date == FRIDAY

    def test_fractional_hours(self, scheduler, one_employee):
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=10.25)
        result = scheduler.schedule([job], one_employee).results[0]

        assert result.hours_on(FRIDAY) == 8.0
        assert result.hours_on(THURSDAY) == pytest.approx(2.25)
        assert result.unscheduled_hours == 0.0


class TestOrdering:
    """Tests for the order jobs claim capacity in."""

    def test_rush_before_non_rush(self, one_week_scheduler, one_employee):
        """Rush job due the same day takes the whole week."""
        jobs = [
            JobScheduleInput(id="normal", due_date=FRIDAY, required_hours=40),
            JobScheduleInput(id="rush", due_date=FRIDAY, required_hours=40, is_rush=True),
        ]
        output = one_week_scheduler.schedule(jobs, one_employee)

        rush = output.get_result("rush")
        normal = output.get_result("normal")
        assert rush.scheduled_hours == 40.0
        assert rush.unscheduled_hours == 0.0
        assert normal.unscheduled_hours == 40.0
        assert normal.allocations == []

    def test_results_in_processing_order(self, scheduler, one_employee):
        jobs = [
            JobScheduleInput(id="late", due_date=FRIDAY, required_hours=8),
            JobScheduleInput(id="rush", due_date=FRIDAY, required_hours=8, is_rush=True),
            JobScheduleInput(id="early", due_date=TUESDAY, required_hours=8),
        ]
        output = scheduler.schedule(jobs, one_employee)
        assert [r.id for r in output.results] == ["early", "rush", "late"]

    def test_earlier_due_date_first(self, one_week_scheduler, one_employee):
        """The job due Thursday keeps its days even though it was listed last."""
        jobs = [
            JobScheduleInput(id="friday", due_date=FRIDAY, required_hours=40),
            JobScheduleInput(id="thursday", due_date=THURSDAY, required_hours=32),
        ]
        output = one_week_scheduler.schedule(jobs, one_employee)

        assert output.get_result("thursday").is_fully_scheduled
        assert output.get_result("friday").scheduled_hours == 8.0
        assert output.get_result("friday").unscheduled_hours == 32.0

    def test_priority_breaks_tie(self, scheduler, one_employee):
        jobs = [
            JobScheduleInput(id="second", due_date=FRIDAY, required_hours=8, priority=2),
            JobScheduleInput(id="first", due_date=FRIDAY, required_hours=8, priority=1),
        ]
        output = scheduler.schedule(jobs, one_employee)

        assert output.results[0].id == "first"
        assert output.get_result("first").start_date == FRIDAY
        assert output.get_result("second").start_date == THURSDAY

    def test_input_order_is_final_tie_break(self, scheduler, one_employee):
        jobs = [
            JobScheduleInput(id=n, due_date=FRIDAY, required_hours=8) for n in ("a", "b", "c")
        ]
        output = scheduler.schedule(jobs, one_employee)

        assert [r.id for r in output.results] == ["a", "b", "c"]
        assert [r.start_date for r in output.results] == [FRIDAY, THURSDAY, WEDNESDAY]

    def test_order_jobs_stable(self, scheduler):
        jobs = [
            JobScheduleInput(id=1, due_date=FRIDAY, required_hours=1),
            JobScheduleInput(id=2, due_date=MONDAY, required_hours=1),
            JobScheduleInput(id=3, due_date=FRIDAY, required_hours=1, is_rush=True),
        ]
        assert [j.id for j in scheduler.order_jobs(jobs)] == [2, 3, 1]


class TestOvertime:
    """Tests for regular-before-overtime consumption."""

    def test_regular_before_overtime_each_day(self, one_week_scheduler, one_employee_overtime):
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=45)
        result = one_week_scheduler.schedule([job], one_employee_overtime).results[0]

        friday = result.allocations[-1]
        assert friday.regular_hours == 8.0
        assert friday.overtime_hours == 2.0
        monday = result.allocations[0]
        assert monday.schedule_date == MONDAY
        assert monday.regular_hours == 5.0
        assert monday.overtime_hours == 0.0
        assert result.overtime_hours == 8.0
        assert result.unscheduled_hours == 0.0

    def test_no_overtime_when_regular_suffices(self, scheduler, one_employee_overtime):
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=6)
        result = scheduler.schedule([job], one_employee_overtime).results[0]

        assert result.overtime_hours == 0.0
        assert result.allocations[0].regular_hours == 6.0

    def test_overtime_excluded_without_flag(self, one_week_scheduler):
        params = CapacityParameters(work_week_schedule=eight_hour_week(with_overtime=True))
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=45)
        result = one_week_scheduler.schedule([job], params).results[0]

        assert result.overtime_hours == 0.0
        assert result.unscheduled_hours == 5.0

    def test_allocation_reports_capacity(self, scheduler, one_employee_overtime):
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=1)
        allocation = scheduler.schedule([job], one_employee_overtime).results[0].allocations[0]

        assert allocation.regular_capacity_hours == 8.0
        assert allocation.overtime_capacity_hours == 2.0
        assert allocation.capacity_hours == 10.0


class TestLedger:
    """Tests for the shared day-usage ledger."""

    def test_ledger_sums_allocations(self, scheduler, one_employee):
        jobs = [
            JobScheduleInput(id="a", due_date=FRIDAY, required_hours=5),
            JobScheduleInput(id="b", due_date=FRIDAY, required_hours=5),
        ]
        output = scheduler.schedule(jobs, one_employee)

        assert output.day_usage[FRIDAY].regular_hours == 8.0
        assert output.day_usage[THURSDAY].regular_hours == 2.0
        assert output.get_result("b").hours_on(FRIDAY) == 3.0

    def test_seed_ledger_respected_and_not_modified(self, scheduler, one_employee):
        seed = {FRIDAY: DayUsage(regular_hours=6.0)}
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=8)
        output = scheduler.schedule([job], one_employee, seed)

        result = output.results[0]
        assert result.hours_on(FRIDAY) == 2.0
        assert result.hours_on(THURSDAY) == 6.0
        assert seed[FRIDAY].regular_hours == 6.0
        assert output.day_usage[FRIDAY].regular_hours == 8.0

    def test_seed_ledger_from_plain_mapping(self, scheduler, one_employee):
        seed = {"2026-02-20": {"regularHours": 8}}
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=4)
        result = scheduler.schedule([job], one_employee, seed).results[0]

        assert result.start_date == THURSDAY
        assert result.hours_on(FRIDAY) == 0.0

    def test_capacity_never_exceeded(self, scheduler):
        params = CapacityParameters(employee_count=2)
        jobs = [
            JobScheduleInput(
                id=i,
                due_date=MONDAY + timedelta(days=i % 10),
                required_hours=5 + (i * 7) % 23,
                is_rush=i % 4 == 0,
            )
            for i in range(25)
        ]
        output = scheduler.schedule(jobs, params)

        for usage_date, usage in output.day_usage.items():
            capacity = daily_capacity(usage_date, params)
            assert usage.regular_hours <= capacity.regular_capacity_hours + 1e-9
            assert usage.overtime_hours <= capacity.overtime_capacity_hours + 1e-9

        for job, result in zip(sorted(jobs, key=lambda j: j.id), sorted(output.results, key=lambda r: r.id)):
            placed = sum(a.scheduled_hours for a in result.allocations)
            assert placed + result.unscheduled_hours == pytest.approx(job.required_hours)
            assert all(a.schedule_date <= job.due_date for a in result.allocations)

    def test_summary(self, one_week_scheduler, one_employee):
        jobs = [
            JobScheduleInput(id="a", due_date=FRIDAY, required_hours=30),
            JobScheduleInput(id="b", due_date=FRIDAY, required_hours=30),
        ]
        summary = one_week_scheduler.schedule(jobs, one_employee).get_summary()

        assert summary["total_jobs"] == 2
        assert summary["at_risk_jobs"] == 1
        assert summary["total_scheduled_hours"] == 40.0
        assert summary["total_unscheduled_hours"] == 20.0
        assert summary["first_day"] == MONDAY
        assert summary["last_day"] == FRIDAY

    def test_empty_batch(self, scheduler, one_employee):
        output = scheduler.schedule([], one_employee)
        assert output.results == []
        assert output.day_usage == {}

    def test_shortfall_logged(self, one_week_scheduler, one_employee, caplog):
        job = JobScheduleInput(id="J9", due_date=FRIDAY, required_hours=50)
        with caplog.at_level(logging.WARNING, logger="laborplan.scheduling.backward_scheduler"):
            one_week_scheduler.schedule([job], one_employee)
        assert "J9" in caplog.text

    def test_module_function(self, one_employee):
        job = JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=8)
        output = schedule_backward([job], one_employee)
        assert output.results[0].start_date == FRIDAY


class TestJobInput:
    """Tests for job input validation."""

    @pytest.mark.parametrize("hours", [0, -4, math.nan, math.inf, "8", None, True])
    def test_invalid_hours(self, hours):
        with pytest.raises(InvalidInputError):
            JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=hours)

    @pytest.mark.parametrize("due", ["2026-13-01", "soon", None, 20260220])
    def test_invalid_due_date(self, due):
        with pytest.raises(InvalidInputError) as exc_info:
            JobScheduleInput(id="J1", due_date=due, required_hours=8)
        assert exc_info.value.field == "due_date"

    def test_due_date_string_with_time(self):
        job = JobScheduleInput(id="J1", due_date="2026-02-20T15:30:00", required_hours=8)
        assert job.due_date == FRIDAY

    def test_from_dict_camel_case(self):
        job = JobScheduleInput.from_dict(
            {"id": "J1", "dueDate": "2026-02-20", "requiredHours": 12, "isRush": True}
        )
        assert job.due_date == FRIDAY
        assert job.required_hours == 12.0
        assert job.is_rush

    @pytest.mark.parametrize("priority", ["high", True, 1.5, [1], math.nan])
    def test_invalid_priority(self, priority):
        with pytest.raises(InvalidInputError) as exc_info:
            JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=8, priority=priority)
        assert exc_info.value.field == "priority"

    def test_priority_coerced(self):
        assert JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=8, priority="3").priority == 3
        assert JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=8, priority=2.0).priority == 2

    def test_from_dict_priority_defaults_to_zero(self):
        job = JobScheduleInput.from_dict({"id": "J1", "dueDate": "2026-02-20", "requiredHours": 4})
        assert job.priority == 0

    @pytest.mark.parametrize(
        "value,expected",
        [("false", False), ("TRUE", True), (" true ", True), (0, False), (1, True), (None, False)],
    )
    def test_rush_flag_parsed(self, value, expected):
        job = JobScheduleInput.from_dict(
            {"id": "J1", "dueDate": "2026-02-20", "requiredHours": 4, "isRush": value}
        )
        assert job.is_rush is expected

    @pytest.mark.parametrize("value", ["maybe", "yes", 2, 0.5])
    def test_invalid_rush_flag(self, value):
        with pytest.raises(InvalidInputError) as exc_info:
            JobScheduleInput(id="J1", due_date=FRIDAY, required_hours=4, is_rush=value)
        assert exc_info.value.field == "is_rush"

    def test_from_dict_missing_id(self):
        with pytest.raises(InvalidInputError):
            JobScheduleInput.from_dict({"due_date": "2026-02-20", "required_hours": 4})

    def test_invalid_horizon(self):
        with pytest.raises(InvalidInputError):
            SchedulerConfig(lookback_days=0)
