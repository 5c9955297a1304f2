"""Domain models and work-week rules for labor scheduling."""

from laborplan.domain.errors import InvalidInputError
from laborplan.domain.models import (
    CapacityParameters,
    DailyCapacity,
    DayUsage,
    DayUsageLedger,
    ForwardPlanResult,
    JobScheduleInput,
    JobScheduleResult,
    ScheduleAllocation,
    ScheduleOutput,
    WhatIfProjection,
    copy_day_usage,
    parse_date,
)
from laborplan.domain.work_week import (
    DEFAULT_WORK_WEEK_SCHEDULE,
    DaySchedule,
    WorkWeekSchedule,
    day_schedule_hours,
    default_work_week_schedule,
    hours_between,
    normalize_work_week_schedule,
    weekly_work_hours,
)

__all__ = [
    # Models
    "CapacityParameters",
    "DailyCapacity",
    "DayUsage",
    "DayUsageLedger",
    "ForwardPlanResult",
    "JobScheduleInput",
    "JobScheduleResult",
    "ScheduleAllocation",
    "ScheduleOutput",
    "WhatIfProjection",
    "copy_day_usage",
    "parse_date",
    # Work week
    "DEFAULT_WORK_WEEK_SCHEDULE",
    "DaySchedule",
    "WorkWeekSchedule",
    "day_schedule_hours",
    "default_work_week_schedule",
    "hours_between",
    "normalize_work_week_schedule",
    "weekly_work_hours",
    # Errors
    "InvalidInputError",
]
