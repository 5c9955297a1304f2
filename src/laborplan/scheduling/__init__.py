"""Scheduling engine for capacity-aware labor plans."""

from laborplan.scheduling.backward_scheduler import BackwardScheduler, schedule_backward
from laborplan.scheduling.capacity import (
    DailyCapacityCalculator,
    available_hours,
    capacity_between,
    daily_capacity,
    is_work_day,
    weekly_capacity_hours,
)
from laborplan.scheduling.forward_planner import ForwardPlanner, plan_forward
from laborplan.scheduling.scheduler import CapacityScheduler

__all__ = [
    # Core schedulers
    "CapacityScheduler",
    "BackwardScheduler",
    "ForwardPlanner",
    "schedule_backward",
    "plan_forward",
    # Capacity
    "DailyCapacityCalculator",
    "available_hours",
    "capacity_between",
    "daily_capacity",
    "is_work_day",
    "weekly_capacity_hours",
]
