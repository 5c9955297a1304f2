"""Domain models for the labor scheduling engine.

This module contains the data structures passed into and returned from the
scheduler: capacity parameters, job inputs, the day-usage ledger and the
allocation plans. All of them are created fresh per call and carry no
identity beyond the call that produced them.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Hashable, Mapping, Optional

from laborplan.domain.errors import InvalidInputError
from laborplan.domain.work_week import (
    WorkWeekSchedule,
    default_work_week_schedule,
    normalize_work_week_schedule,
)

# Hours below this are treated as zero when comparing capacity and demand.
EPSILON = 1e-9

_FLAG_STRINGS = {"true": True, "false": False}


def parse_date(value: Any, field_name: str = "date") -> date:
    """Coerce a date, datetime or "YYYY-MM-DD" string to a calendar date.

    A time-of-day suffix on a string ("2026-02-21T12:00") is ignored.

    Raises:
        InvalidInputError: If the value is not a recognizable calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        date_part = value.strip().replace(" ", "T").split("T")[0]
        try:
            return date.fromisoformat(date_part)
        except ValueError:
            pass
    raise InvalidInputError(
        f"{field_name} must be a calendar date (YYYY-MM-DD), got {value!r}",
        field=field_name,
        value=value,
    )


def validate_hours(value: Any, field_name: str = "required_hours") -> float:
    """Check that an hours value is a finite positive number.

    Raises:
        InvalidInputError: If the value is not a positive finite number.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(
            f"{field_name} must be a number, got {value!r}",
            field=field_name,
            value=value,
        )
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(
            f"{field_name} must be positive, got {value!r}",
            field=field_name,
            value=value,
        )
    return float(value)


def parse_flag(value: Any, field_name: str) -> bool:
    """Coerce a yes/no input. Accepts bools, 0/1, "true"/"false" and None (False).

    Raises:
        InvalidInputError: For any other value.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _FLAG_STRINGS:
        return _FLAG_STRINGS[value.strip().lower()]
    raise InvalidInputError(
        f"{field_name} must be true or false, got {value!r}",
        field=field_name,
        value=value,
    )


def validate_priority(value: Any) -> int:
    """Coerce a job priority to an integer; None means 0.

    Raises:
        InvalidInputError: If the value is not a whole number.
    """
    if value is None:
        return 0
    number = value
    if isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            number = None
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    if isinstance(number, bool) or not isinstance(number, int):
        raise InvalidInputError(
            f"priority must be a whole number, got {value!r}",
            field="priority",
            value=value,
        )
    return number


@dataclass
class CapacityParameters:
    """Organization capacity used for one scheduling query.

    The work-week schedule is normalized on construction, so every weekday
    is present and consistent afterwards.

    Attributes:
        employee_count: Number of interchangeable employees (at least 1).
        work_week_schedule: Weekday (0=Sunday) to DaySchedule, or raw config.
        include_overtime: Whether overtime windows count as capacity.
    """

    employee_count: int = 1
    work_week_schedule: WorkWeekSchedule = field(default_factory=default_work_week_schedule)
    include_overtime: bool = False

    def __post_init__(self):
        count = self.employee_count
        if isinstance(count, float) and count.is_integer():
            count = int(count)
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidInputError(
                f"employee_count must be an integer of at least 1, got {self.employee_count!r}",
                field="employee_count",
                value=self.employee_count,
            )
        self.employee_count = count
        self.work_week_schedule = normalize_work_week_schedule(self.work_week_schedule)

    def with_overtime(self, include_overtime: bool = True) -> "CapacityParameters":
        """Copy of these parameters with the overtime flag changed."""
        return replace(self, include_overtime=include_overtime)


@dataclass
class JobScheduleInput:
    """A job to be placed on the calendar.

    Attributes:
        id: Opaque job identifier.
        due_date: Date the work must be finished on.
        required_hours: Labor hours still needed.
        is_rush: Rush jobs go ahead of others due the same day.
        priority: Lower values go first among jobs with the same due date
            and rush status. Input order breaks any remaining tie.
    """

    id: Hashable
    due_date: date
    required_hours: float
    is_rush: bool = False
    priority: int = 0

    def __post_init__(self):
        self.due_date = parse_date(self.due_date, "due_date")
        self.required_hours = validate_hours(self.required_hours, "required_hours")
        self.is_rush = parse_flag(self.is_rush, "is_rush")
        self.priority = validate_priority(self.priority)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobScheduleInput":
        """Build a job input from a record (snake_case or camelCase keys).

        Raises:
            InvalidInputError: If the id, due date or hours are missing, or any
                field is invalid.
        """
        if "id" not in data:
            raise InvalidInputError("job record is missing 'id'", field="id")
        return cls(
            id=data["id"],
            due_date=data.get("due_date", data.get("dueDate")),
            required_hours=data.get("required_hours", data.get("requiredHours")),
            is_rush=data.get("is_rush", data.get("isRush", False)),
            priority=data.get("priority"),
        )


@dataclass
class DayUsage:
    """Capacity already claimed on one date.

    Attributes:
        regular_hours: Regular hours claimed so far.
        overtime_hours: Overtime hours claimed so far.
    """

    regular_hours: float = 0.0
    overtime_hours: float = 0.0

    @property
    def total_hours(self) -> float:
        return self.regular_hours + self.overtime_hours

    def add(self, regular_hours: float, overtime_hours: float) -> None:
        """Record additional claimed hours."""
        self.regular_hours += regular_hours
        self.overtime_hours += overtime_hours

    def copy(self) -> "DayUsage":
        return DayUsage(self.regular_hours, self.overtime_hours)

    def to_dict(self) -> dict:
        return {
            "regular_hours": self.regular_hours,
            "overtime_hours": self.overtime_hours,
            "total_hours": self.total_hours,
        }


# Calendar date to capacity claimed on it.
DayUsageLedger = dict[date, DayUsage]


def copy_day_usage(day_usage: Optional[Mapping] = None) -> DayUsageLedger:
    """Build an independent ledger from a caller-supplied one.

    Keys may be dates or "YYYY-MM-DD" strings. Values may be DayUsage
    objects or mappings with regular_hours/overtime_hours (camelCase
    accepted). The input is never modified.
    """
    ledger: DayUsageLedger = {}
    if not day_usage:
        return ledger

    for key, usage in day_usage.items():
        usage_date = parse_date(key, "day_usage date")
        if isinstance(usage, DayUsage):
            entry = usage.copy()
        elif isinstance(usage, Mapping):
            entry = DayUsage(
                regular_hours=_hours_or_zero(
                    usage.get("regular_hours", usage.get("regularHours"))
                ),
                overtime_hours=_hours_or_zero(
                    usage.get("overtime_hours", usage.get("overtimeHours"))
                ),
            )
        else:
            raise InvalidInputError(
                f"day_usage entry for {usage_date} must be a DayUsage or mapping",
                field="day_usage",
                value=usage,
            )
        existing = ledger.get(usage_date)
        if existing is None:
            ledger[usage_date] = entry
        else:
            existing.add(entry.regular_hours, entry.overtime_hours)
    return ledger


def _hours_or_zero(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return 0.0
    return hours if math.isfinite(hours) and hours > 0 else 0.0


@dataclass(frozen=True)
class DailyCapacity:
    """Capacity that could exist on a date, ignoring any ledger.

    Attributes:
        schedule_date: The date.
        regular_capacity_hours: Employees x payable regular hours.
        overtime_capacity_hours: Employees x overtime hours, zero unless
            overtime was requested and is enabled on that weekday.
        regular_hours_per_employee: Payable regular hours per employee.
        overtime_hours_per_employee: Overtime window per employee, whether
            or not overtime was requested.
    """

    schedule_date: date
    regular_capacity_hours: float = 0.0
    overtime_capacity_hours: float = 0.0
    regular_hours_per_employee: float = 0.0
    overtime_hours_per_employee: float = 0.0

    @property
    def total_capacity_hours(self) -> float:
        return self.regular_capacity_hours + self.overtime_capacity_hours

    def to_dict(self) -> dict:
        return {
            "date": self.schedule_date.isoformat(),
            "regular_capacity_hours": self.regular_capacity_hours,
            "overtime_capacity_hours": self.overtime_capacity_hours,
            "total_capacity_hours": self.total_capacity_hours,
            "regular_hours_per_employee": self.regular_hours_per_employee,
            "overtime_hours_per_employee": self.overtime_hours_per_employee,
        }


@dataclass
class ScheduleAllocation:
    """Hours of one job placed on one date.

    Attributes:
        schedule_date: The date worked.
        scheduled_hours: Regular plus overtime hours placed.
        regular_hours: Regular hours placed.
        overtime_hours: Overtime hours placed.
        regular_capacity_hours: The day's regular capacity.
        overtime_capacity_hours: The day's usable overtime capacity.
        capacity_hours: The day's total capacity at evaluation time.
    """

    schedule_date: date
    scheduled_hours: float
    regular_hours: float
    overtime_hours: float
    regular_capacity_hours: float = 0.0
    overtime_capacity_hours: float = 0.0
    capacity_hours: float = 0.0

    def to_dict(self) -> dict:
        return {
            "date": self.schedule_date.isoformat(),
            "scheduled_hours": self.scheduled_hours,
            "regular_hours": self.regular_hours,
            "overtime_hours": self.overtime_hours,
            "regular_capacity_hours": self.regular_capacity_hours,
            "overtime_capacity_hours": self.overtime_capacity_hours,
            "capacity_hours": self.capacity_hours,
        }


@dataclass
class JobScheduleResult:
    """Backward allocation plan for one job.

    Attributes:
        id: Job identifier.
        due_date: The job's due date.
        start_date: Earliest allocated date, or the due date if nothing fit.
        required_hours: Hours the job needed.
        scheduled_hours: Hours actually placed.
        overtime_hours: Overtime hours across all allocations.
        unscheduled_hours: Hours that could not be placed by the due date.
        allocations: Per-day rows, ordered by date.
    """

    id: Hashable
    due_date: date
    start_date: date
    required_hours: float
    scheduled_hours: float = 0.0
    overtime_hours: float = 0.0
    unscheduled_hours: float = 0.0
    allocations: list[ScheduleAllocation] = field(default_factory=list)

    @property
    def is_fully_scheduled(self) -> bool:
        return self.unscheduled_hours <= EPSILON

    @property
    def regular_hours(self) -> float:
        return sum(a.regular_hours for a in self.allocations)

    def hours_on(self, schedule_date: date) -> float:
        """Hours of this job placed on a date."""
        return sum(a.scheduled_hours for a in self.allocations if a.schedule_date == schedule_date)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "due_date": self.due_date.isoformat(),
            "start_date": self.start_date.isoformat(),
            "required_hours": self.required_hours,
            "scheduled_hours": self.scheduled_hours,
            "overtime_hours": self.overtime_hours,
            "unscheduled_hours": self.unscheduled_hours,
            "allocations": [a.to_dict() for a in self.allocations],
        }


@dataclass
class ScheduleOutput:
    """Result of one backward scheduling run.

    Attributes:
        results: One result per job, in the order jobs were processed.
        day_usage: Ledger of capacity claimed per date by this run.
    """

    results: list[JobScheduleResult] = field(default_factory=list)
    day_usage: DayUsageLedger = field(default_factory=dict)

    def get_result(self, job_id: Hashable) -> Optional[JobScheduleResult]:
        """Look up a job's result by id."""
        for result in self.results:
            if result.id == job_id:
                return result
        return None

    @property
    def at_risk_results(self) -> list[JobScheduleResult]:
        """Results with hours that could not be placed by the due date."""
        return [r for r in self.results if not r.is_fully_scheduled]

    def get_summary(self) -> dict:
        """Get summary statistics for the run."""
        return {
            "total_jobs": len(self.results),
            "at_risk_jobs": len(self.at_risk_results),
            "total_required_hours": sum(r.required_hours for r in self.results),
            "total_scheduled_hours": sum(r.scheduled_hours for r in self.results),
            "total_overtime_hours": sum(r.overtime_hours for r in self.results),
            "total_unscheduled_hours": sum(r.unscheduled_hours for r in self.results),
            "days_used": len(self.day_usage),
            "first_day": min(self.day_usage) if self.day_usage else None,
            "last_day": max(self.day_usage) if self.day_usage else None,
        }

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "day_usage": {
                d.isoformat(): usage.to_dict() for d, usage in sorted(self.day_usage.items())
            },
        }


@dataclass
class ForwardPlanResult:
    """Projection for a hypothetical job walked forward from a start date.

    Attributes:
        completion_date: Last date the job would occupy, or None if it does
            not fit in the search window.
        overtime_hours: Overtime the projection uses.
        remaining_hours: Hours that did not fit (zero when it fits).
        allocations: Per-day rows the job would occupy, ordered by date.
    """

    completion_date: Optional[date]
    overtime_hours: float = 0.0
    remaining_hours: float = 0.0
    allocations: list[ScheduleAllocation] = field(default_factory=list)

    @property
    def fits(self) -> bool:
        return self.remaining_hours <= EPSILON

    @property
    def scheduled_hours(self) -> float:
        return sum(a.scheduled_hours for a in self.allocations)

    def to_dict(self) -> dict:
        return {
            "completion_date": self.completion_date.isoformat() if self.completion_date else None,
            "overtime_hours": self.overtime_hours,
            "remaining_hours": self.remaining_hours,
            "allocations": [a.to_dict() for a in self.allocations],
        }


@dataclass
class WhatIfProjection:
    """Answers for the "what-if" planning surface.

    Attributes:
        required_hours: Hours the hypothetical job needs.
        from_date: First date it could be worked.
        earliest: Earliest-completion projection (overtime per the toggle).
        due_date: Target due date being tested, if any.
        regular_only: Due-date check using regular capacity only.
        with_overtime: Due-date check with overtime capacity allowed.
    """

    required_hours: float
    from_date: date
    earliest: ForwardPlanResult
    due_date: Optional[date] = None
    regular_only: Optional[ForwardPlanResult] = None
    with_overtime: Optional[ForwardPlanResult] = None

    @property
    def fits_without_overtime(self) -> Optional[bool]:
        if self.regular_only is None:
            return None
        return self.regular_only.fits

    @property
    def fits_with_overtime(self) -> Optional[bool]:
        if self.with_overtime is None:
            return None
        return self.with_overtime.fits

    @property
    def overtime_needed(self) -> float:
        """Minimum overtime required to hit the due date (zero if none tested)."""
        if self.regular_only is None or self.with_overtime is None:
            return 0.0
        if self.regular_only.fits:
            return 0.0
        return self.with_overtime.overtime_hours

    def to_dict(self) -> dict:
        return {
            "required_hours": self.required_hours,
            "from_date": self.from_date.isoformat(),
            "earliest": self.earliest.to_dict(),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "regular_only": self.regular_only.to_dict() if self.regular_only else None,
            "with_overtime": self.with_overtime.to_dict() if self.with_overtime else None,
            "fits_without_overtime": self.fits_without_overtime,
            "fits_with_overtime": self.fits_with_overtime,
            "overtime_needed": self.overtime_needed,
        }
