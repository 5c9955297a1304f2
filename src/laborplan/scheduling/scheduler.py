"""Main scheduler interface.

This module provides the high-level CapacityScheduler class that
coordinates backward scheduling of real jobs and forward "what-if"
planning of hypothetical ones.
"""

from datetime import date
from typing import Any, Iterable, Mapping, Optional

from laborplan.config import SchedulerConfig
from laborplan.domain.models import (
    CapacityParameters,
    ForwardPlanResult,
    JobScheduleInput,
    ScheduleAllocation,
    ScheduleOutput,
    WhatIfProjection,
    parse_date,
    validate_hours,
)
from laborplan.scheduling.backward_scheduler import BackwardScheduler
from laborplan.scheduling.capacity import daily_capacity
from laborplan.scheduling.forward_planner import ForwardPlanner


class CapacityScheduler:
    """High-level scheduler for job plans and what-if projections.

    Example:
        >>> scheduler = CapacityScheduler()
        >>> params = CapacityParameters(employee_count=3)
        >>> output = scheduler.schedule_jobs(jobs, params)
        >>> projection = scheduler.project_what_if(
        ...     40, date(2026, 3, 2), params, output.day_usage,
        ...     due_date=date(2026, 3, 13),
        ... )
        >>> projection.overtime_needed
    """

    def __init__(self, config: Optional[SchedulerConfig] = None):
        """Initialize scheduler.

        Args:
            config: Search horizons shared by both schedulers.
        """
        self.config = config or SchedulerConfig()
        self.backward = BackwardScheduler(self.config)
        self.forward = ForwardPlanner(self.config)

    def schedule_jobs(
        self,
        jobs: Iterable[JobScheduleInput],
        params: CapacityParameters,
        day_usage: Optional[Mapping] = None,
    ) -> ScheduleOutput:
        """Schedule real jobs backward from their due dates."""
        return self.backward.schedule(jobs, params, day_usage)

    def schedule_jobs_with_stats(
        self,
        jobs: Iterable[JobScheduleInput],
        params: CapacityParameters,
    ) -> tuple[ScheduleOutput, dict]:
        """Schedule jobs and return statistics.

        Returns:
            Tuple of (output, stats_dict).
        """
        output = self.schedule_jobs(jobs, params)
        return output, self._calculate_stats(output, params)

    def allocate_job(
        self,
        due_date: Any,
        required_hours: float,
        params: CapacityParameters,
    ) -> list[ScheduleAllocation]:
        """Daily allocation for one job scheduled alone against empty capacity."""
        job = JobScheduleInput(id="job", due_date=due_date, required_hours=required_hours)
        return self.backward.schedule([job], params).results[0].allocations

    def start_date_for(
        self,
        due_date: Any,
        required_hours: float,
        params: CapacityParameters,
    ) -> date:
        """Start date for one job scheduled alone; the due date if nothing fits."""
        allocations = self.allocate_job(due_date, required_hours, params)
        return allocations[0].schedule_date if allocations else parse_date(due_date, "due_date")

    def plan_forward(
        self,
        required_hours: float,
        from_date: Any,
        params: CapacityParameters,
        day_usage: Optional[Mapping] = None,
        due_date: Any = None,
    ) -> ForwardPlanResult:
        """Project a hypothetical job forward. See ForwardPlanner.plan."""
        return self.forward.plan(required_hours, from_date, params, day_usage, due_date)

    def project_what_if(
        self,
        required_hours: float,
        from_date: Any,
        params: CapacityParameters,
        day_usage: Optional[Mapping] = None,
        due_date: Any = None,
        allow_overtime: bool = False,
    ) -> WhatIfProjection:
        """Answer the what-if questions for a hypothetical job.

        The earliest completion honors allow_overtime. When a due date is
        given it is checked twice, once with regular capacity only and once
        with overtime allowed, which tells apart overtime that is needed
        from overtime that is merely possible.

        Args:
            required_hours: Hours the job needs.
            from_date: First date the job could be worked.
            params: Headcount and work week; its overtime flag is ignored in
                favor of allow_overtime and the two due-date checks.
            day_usage: Capacity already claimed by real jobs.
            due_date: Optional target date to test.
            allow_overtime: Whether the earliest projection may use overtime.
        """
        required_hours = validate_hours(required_hours, "required_hours")
        from_date = parse_date(from_date, "from_date")

        earliest = self.forward.plan(
            required_hours, from_date, params.with_overtime(allow_overtime), day_usage
        )
        projection = WhatIfProjection(
            required_hours=required_hours,
            from_date=from_date,
            earliest=earliest,
        )

        if due_date is not None:
            projection.due_date = parse_date(due_date, "due_date")
            projection.regular_only = self.forward.plan(
                required_hours,
                from_date,
                params.with_overtime(False),
                day_usage,
                projection.due_date,
            )
            projection.with_overtime = self.forward.plan(
                required_hours,
                from_date,
                params.with_overtime(True),
                day_usage,
                projection.due_date,
            )

        return projection

    def _calculate_stats(
        self,
        output: ScheduleOutput,
        params: CapacityParameters,
    ) -> dict:
        """Calculate plan statistics."""
        stats = output.get_summary()

        total_capacity = 0.0
        total_used = 0.0
        for usage_date, usage in output.day_usage.items():
            total_capacity += daily_capacity(usage_date, params).total_capacity_hours
            total_used += usage.total_hours

        stats["employee_count"] = params.employee_count
        stats["include_overtime"] = params.include_overtime
        stats["utilization_on_used_days"] = (
            total_used / total_capacity if total_capacity > 0 else 0.0
        )
        return stats
