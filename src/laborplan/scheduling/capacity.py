"""Daily capacity calculation.

Capacity here is what *could* be worked on a date given the work-week
schedule and headcount. It never looks at a ledger; subtracting what is
already claimed is the schedulers' job.
"""

from dataclasses import replace
from datetime import date, timedelta
from typing import Any, Optional

from laborplan.domain.models import (
    CapacityParameters,
    DailyCapacity,
    DayUsage,
    parse_date,
)
from laborplan.domain.work_week import weekday_index, weekly_work_hours


def daily_capacity(schedule_date: Any, params: CapacityParameters) -> DailyCapacity:
    """Calculate regular and overtime capacity for a date.

    Args:
        schedule_date: Date (or "YYYY-MM-DD" string) to evaluate.
        params: Headcount, work week and overtime flag.

    Returns:
        DailyCapacity for the date. Overtime capacity is zero unless
        params.include_overtime is set and overtime is enabled that weekday.
    """
    schedule_date = parse_date(schedule_date)
    day = params.work_week_schedule[weekday_index(schedule_date)]

    regular_per_employee = day.regular_hours_per_employee
    overtime_per_employee = day.overtime_hours_per_employee
    overtime_capacity = (
        params.employee_count * overtime_per_employee if params.include_overtime else 0.0
    )

    return DailyCapacity(
        schedule_date=schedule_date,
        regular_capacity_hours=params.employee_count * regular_per_employee,
        overtime_capacity_hours=overtime_capacity,
        regular_hours_per_employee=regular_per_employee,
        overtime_hours_per_employee=overtime_per_employee,
    )


def available_hours(
    capacity: DailyCapacity,
    usage: Optional[DayUsage],
) -> tuple[float, float]:
    """Regular and overtime capacity left on a date after claimed usage."""
    if usage is None:
        return capacity.regular_capacity_hours, capacity.overtime_capacity_hours
    return (
        max(0.0, capacity.regular_capacity_hours - usage.regular_hours),
        max(0.0, capacity.overtime_capacity_hours - usage.overtime_hours),
    )


def is_work_day(schedule_date: Any, params: CapacityParameters) -> bool:
    """Check if any capacity exists on a date."""
    return daily_capacity(schedule_date, params).total_capacity_hours > 0


def capacity_between(start: Any, end: Any, params: CapacityParameters) -> list[DailyCapacity]:
    """Daily capacity for every date from start to end, inclusive.

    Returns an empty list when end is before start.
    """
    current = parse_date(start, "start")
    end = parse_date(end, "end")
    days = []
    while current <= end:
        days.append(daily_capacity(current, params))
        current += timedelta(days=1)
    return days


def weekly_capacity_hours(params: CapacityParameters) -> float:
    """Capacity of one full week for the whole team."""
    return params.employee_count * weekly_work_hours(
        params.work_week_schedule, include_overtime=params.include_overtime
    )


class DailyCapacityCalculator:
    """Caches daily capacity per weekday for repeated lookups.

    Capacity depends only on the weekday, so schedulers walking many dates
    reuse seven computed values instead of recomputing each date.

    Example:
        >>> calculator = DailyCapacityCalculator(CapacityParameters(employee_count=4))
        >>> calculator.for_date(date(2026, 2, 19)).regular_capacity_hours
        36.0
    """

    def __init__(self, params: CapacityParameters):
        self.params = params
        self._by_weekday: dict[int, DailyCapacity] = {}

    def for_date(self, schedule_date: date) -> DailyCapacity:
        weekday = weekday_index(schedule_date)
        template = self._by_weekday.get(weekday)
        if template is None:
            template = daily_capacity(schedule_date, self.params)
            self._by_weekday[weekday] = template
        if template.schedule_date == schedule_date:
            return template
        return replace(template, schedule_date=schedule_date)
