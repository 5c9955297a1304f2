"""Capacity-aware backward scheduling.

This module places each job's labor hours on the calendar by walking
backward from its due date, day by day, and claiming whatever shared
capacity is still free. Jobs are processed in due-date order so the jobs
with the least slack get the days nearest their deadlines first:

1. Earlier due date first
2. Rush before non-rush on the same due date
3. Lower priority value first
4. Input order

Regular capacity is always consumed before overtime on any given day.
The allocator is greedy and deterministic; it does not search for a
globally optimal plan.
"""

import logging
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional

from laborplan.config import SchedulerConfig
from laborplan.domain.models import (
    EPSILON,
    CapacityParameters,
    DayUsage,
    DayUsageLedger,
    JobScheduleInput,
    JobScheduleResult,
    ScheduleAllocation,
    ScheduleOutput,
    copy_day_usage,
)
from laborplan.scheduling.capacity import DailyCapacityCalculator, available_hours

logger = logging.getLogger(__name__)


class BackwardScheduler:
    """Allocates a batch of jobs backward from their due dates.

    The scheduler keeps no state between calls. Each call builds its own
    day-usage ledger (optionally seeded from a caller's ledger, which is
    copied) and returns it with the per-job results.

    Example:
        >>> scheduler = BackwardScheduler()
        >>> output = scheduler.schedule(jobs, CapacityParameters(employee_count=3))
        >>> for result in output.at_risk_results:
        ...     print(result.id, result.unscheduled_hours)
    """

    def __init__(self, config: Optional[SchedulerConfig] = None):
        """Initialize the scheduler.

        Args:
            config: Search horizons. lookback_days bounds how many dates
                are visited per job, counting the due date.
        """
        self.config = config or SchedulerConfig()

    def order_jobs(self, jobs: Iterable[JobScheduleInput]) -> list[JobScheduleInput]:
        """Return jobs in the order they will claim capacity."""
        indexed = list(enumerate(jobs))
        indexed.sort(
            key=lambda item: (
                item[1].due_date,
                not item[1].is_rush,
                item[1].priority,
                item[0],
            )
        )
        return [job for _, job in indexed]

    def schedule(
        self,
        jobs: Iterable[JobScheduleInput],
        params: CapacityParameters,
        day_usage: Optional[Mapping] = None,
    ) -> ScheduleOutput:
        """Schedule every job against shared daily capacity.

        Args:
            jobs: Jobs to place. Each must have positive required hours and
                a due date (enforced by JobScheduleInput).
            params: Headcount, work week and overtime flag.
            day_usage: Optional ledger of capacity already claimed. It is
                copied, never modified.

        Returns:
            ScheduleOutput with one result per job, in processing order, and
            the ledger of everything claimed (seed included).
        """
        ledger = copy_day_usage(day_usage)
        calculator = DailyCapacityCalculator(params)

        ordered = self.order_jobs(jobs)
        logger.debug(
            "Scheduling %d jobs backward (overtime=%s, employees=%d)",
            len(ordered),
            params.include_overtime,
            params.employee_count,
        )
        logger.debug("Processing order: %s", [job.id for job in ordered])

        results = [self._schedule_job(job, calculator, ledger) for job in ordered]
        return ScheduleOutput(results=results, day_usage=ledger)

    def _schedule_job(
        self,
        job: JobScheduleInput,
        calculator: DailyCapacityCalculator,
        ledger: DayUsageLedger,
    ) -> JobScheduleResult:
        """Walk one job backward from its due date, claiming capacity."""
        remaining = job.required_hours
        allocations: list[ScheduleAllocation] = []
        current = job.due_date

        for _ in range(self.config.lookback_days):
            if remaining <= EPSILON:
                break

            capacity = calculator.for_date(current)
            if capacity.total_capacity_hours > 0:
                free_regular, free_overtime = available_hours(capacity, ledger.get(current))

                regular_hours = min(remaining, free_regular)
                remaining -= regular_hours
                overtime_hours = min(remaining, free_overtime) if remaining > EPSILON else 0.0
                remaining -= overtime_hours

                scheduled = regular_hours + overtime_hours
                if scheduled > 0:
                    ledger.setdefault(current, DayUsage()).add(regular_hours, overtime_hours)
                    allocations.append(
                        ScheduleAllocation(
                            schedule_date=current,
                            scheduled_hours=scheduled,
                            regular_hours=regular_hours,
                            overtime_hours=overtime_hours,
                            regular_capacity_hours=capacity.regular_capacity_hours,
                            overtime_capacity_hours=capacity.overtime_capacity_hours,
                            capacity_hours=capacity.total_capacity_hours,
                        )
                    )

            if current == date.min:
                break
            current -= timedelta(days=1)

        unscheduled = remaining if remaining > EPSILON else 0.0
        allocations.reverse()

        result = JobScheduleResult(
            id=job.id,
            due_date=job.due_date,
            start_date=allocations[0].schedule_date if allocations else job.due_date,
            required_hours=job.required_hours,
            scheduled_hours=job.required_hours - unscheduled,
            overtime_hours=sum(a.overtime_hours for a in allocations),
            unscheduled_hours=unscheduled,
            allocations=allocations,
        )

        if unscheduled > 0:
            logger.warning(
                "Job %s due %s is short %.2f of %.2f hours",
                job.id,
                job.due_date,
                unscheduled,
                job.required_hours,
            )
        else:
            logger.debug(
                "Job %s due %s starts %s across %d days",
                job.id,
                job.due_date,
                result.start_date,
                len(allocations),
            )
        return result


def schedule_backward(
    jobs: Iterable[JobScheduleInput],
    params: CapacityParameters,
    day_usage: Optional[Mapping] = None,
    config: Optional[SchedulerConfig] = None,
) -> ScheduleOutput:
    """Schedule jobs backward from their due dates. See BackwardScheduler."""
    return BackwardScheduler(config).schedule(jobs, params, day_usage)
