"""Forward "what-if" planning for hypothetical jobs.

The planner projects a job that does not exist yet against capacity that
real jobs have already claimed. It reads the supplied ledger and never
writes to it.

Two modes:
- Without a due date: walk forward from the start date and report the
  earliest completion date.
- With a due date: look only at [start, due] and report whether the job
  fits, how much overtime it needs and how many hours fall short.
"""

import logging
from datetime import date, timedelta
from typing import Any, Mapping, Optional

from laborplan.config import SchedulerConfig
from laborplan.domain.models import (
    EPSILON,
    CapacityParameters,
    DailyCapacity,
    DayUsageLedger,
    ForwardPlanResult,
    ScheduleAllocation,
    copy_day_usage,
    parse_date,
    validate_hours,
)
from laborplan.scheduling.capacity import DailyCapacityCalculator, available_hours

logger = logging.getLogger(__name__)


class ForwardPlanner:
    """Projects a hypothetical job forward against existing commitments.

    Example:
        >>> planner = ForwardPlanner()
        >>> plan = planner.plan(24, date(2026, 3, 2), params, output.day_usage)
        >>> plan.completion_date
    """

    def __init__(self, config: Optional[SchedulerConfig] = None):
        """Initialize the planner.

        Args:
            config: Search horizons. lookahead_days bounds how many dates
                are visited when no due date is given, counting the start.
        """
        self.config = config or SchedulerConfig()

    def plan(
        self,
        required_hours: float,
        from_date: Any,
        params: CapacityParameters,
        day_usage: Optional[Mapping] = None,
        due_date: Any = None,
    ) -> ForwardPlanResult:
        """Project a hypothetical job.

        Args:
            required_hours: Hours the job needs (must be positive).
            from_date: First date the job could be worked (inclusive).
            params: Headcount, work week and overtime flag.
            day_usage: Capacity already claimed, usually the ledger from a
                backward scheduling run. Read only.
            due_date: Optional date the job must be done by (inclusive).

        Returns:
            ForwardPlanResult. completion_date is None when the job does not
            fit in the window searched.

        Raises:
            InvalidInputError: For non-positive hours or malformed dates.
        """
        required_hours = validate_hours(required_hours, "required_hours")
        from_date = parse_date(from_date, "from_date")
        ledger = copy_day_usage(day_usage)
        calculator = DailyCapacityCalculator(params)

        if due_date is None:
            return self._plan_earliest(required_hours, from_date, calculator, ledger)

        due_date = parse_date(due_date, "due_date")
        return self._plan_until(required_hours, from_date, due_date, calculator, ledger)

    def _plan_earliest(
        self,
        required_hours: float,
        from_date: date,
        calculator: DailyCapacityCalculator,
        ledger: DayUsageLedger,
    ) -> ForwardPlanResult:
        """Walk forward until the hours are placed or the horizon runs out."""
        remaining = required_hours
        allocations: list[ScheduleAllocation] = []
        current = from_date

        for _ in range(self.config.lookahead_days):
            if remaining <= EPSILON:
                break

            capacity = calculator.for_date(current)
            free_regular, free_overtime = available_hours(capacity, ledger.get(current))

            regular_hours = min(remaining, free_regular)
            remaining -= regular_hours
            overtime_hours = min(remaining, free_overtime) if remaining > EPSILON else 0.0
            remaining -= overtime_hours

            if regular_hours + overtime_hours > 0:
                allocations.append(_allocation(capacity, regular_hours, overtime_hours))

            if current == date.max:
                break
            current += timedelta(days=1)

        remaining = remaining if remaining > EPSILON else 0.0
        completion = allocations[-1].schedule_date if remaining == 0 and allocations else None
        if completion is None:
            logger.debug(
                "No completion within %d days of %s: %.2f hours short",
                self.config.lookahead_days,
                from_date,
                remaining,
            )

        return ForwardPlanResult(
            completion_date=completion,
            overtime_hours=sum(a.overtime_hours for a in allocations),
            remaining_hours=remaining,
            allocations=allocations,
        )

    def _plan_until(
        self,
        required_hours: float,
        from_date: date,
        due_date: date,
        calculator: DailyCapacityCalculator,
        ledger: DayUsageLedger,
    ) -> ForwardPlanResult:
        """Check the window [from_date, due_date] for enough capacity.

        Regular capacity across the whole window is used before any
        overtime, so the overtime reported is the minimum needed. The
        window is also capped at lookahead_days dates.
        """
        window: list[tuple[DailyCapacity, float, float]] = []
        current = from_date
        for _ in range(self.config.lookahead_days):
            if current > due_date:
                break
            capacity = calculator.for_date(current)
            free_regular, free_overtime = available_hours(capacity, ledger.get(current))
            if free_regular > 0 or free_overtime > 0:
                window.append((capacity, free_regular, free_overtime))
            if current == date.max:
                break
            current += timedelta(days=1)

        # Regular hours first, earliest dates first
        remaining = required_hours
        regular_taken: list[float] = []
        for _, free_regular, _ in window:
            taken = min(remaining, free_regular) if remaining > EPSILON else 0.0
            regular_taken.append(taken)
            remaining -= taken

        overtime_taken: list[float] = []
        for _, _, free_overtime in window:
            taken = min(remaining, free_overtime) if remaining > EPSILON else 0.0
            overtime_taken.append(taken)
            remaining -= taken

        allocations = [
            _allocation(capacity, regular, overtime)
            for (capacity, _, _), regular, overtime in zip(window, regular_taken, overtime_taken)
            if regular + overtime > 0
        ]

        remaining = remaining if remaining > EPSILON else 0.0
        completion = allocations[-1].schedule_date if remaining == 0 and allocations else None
        logger.debug(
            "Window %s..%s: %.2f of %.2f hours fit",
            from_date,
            due_date,
            required_hours - remaining,
            required_hours,
        )

        return ForwardPlanResult(
            completion_date=completion,
            overtime_hours=sum(overtime_taken),
            remaining_hours=remaining,
            allocations=allocations,
        )


def _allocation(
    capacity: DailyCapacity,
    regular_hours: float,
    overtime_hours: float,
) -> ScheduleAllocation:
    return ScheduleAllocation(
        schedule_date=capacity.schedule_date,
        scheduled_hours=regular_hours + overtime_hours,
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        regular_capacity_hours=capacity.regular_capacity_hours,
        overtime_capacity_hours=capacity.overtime_capacity_hours,
        capacity_hours=capacity.total_capacity_hours,
    )


def plan_forward(
    required_hours: float,
    from_date: Any,
    params: CapacityParameters,
    day_usage: Optional[Mapping] = None,
    due_date: Any = None,
    config: Optional[SchedulerConfig] = None,
) -> ForwardPlanResult:
    """Project a hypothetical job forward. See ForwardPlanner."""
    return ForwardPlanner(config).plan(required_hours, from_date, params, day_usage, due_date)
