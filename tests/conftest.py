"""Shared fixtures for scheduling tests.

Reference dates: 2026-02-16 is a Monday and 2026-02-20 the Friday after it.
"""

from datetime import date

import pytest

from laborplan.domain.models import CapacityParameters
from laborplan.domain.work_week import DaySchedule

MONDAY = date(2026, 2, 16)
TUESDAY = date(2026, 2, 17)
WEDNESDAY = date(2026, 2, 18)
THURSDAY = date(2026, 2, 19)
FRIDAY = date(2026, 2, 20)
SATURDAY = date(2026, 2, 21)


def eight_hour_week(with_overtime: bool = False) -> dict:
    """Monday-Friday 08:00-16:00 with no break, weekend off.

    With overtime, each weekday also has a 16:00-18:00 overtime window.
    """
    if with_overtime:
        weekday = DaySchedule.from_times("08:00", "16:00", 0, "16:00", "18:00")
    else:
        weekday = DaySchedule.from_times("08:00", "16:00")
    return {
        0: DaySchedule.off_day(),
        1: weekday,
        2: weekday,
        3: weekday,
        4: weekday,
        5: weekday,
        6: DaySchedule.off_day(),
    }


@pytest.fixture
def one_employee():
    """Single employee working 8 regular hours Monday-Friday."""
    return CapacityParameters(employee_count=1, work_week_schedule=eight_hour_week())


@pytest.fixture
def one_employee_overtime():
    """Single employee with 8 regular and 2 overtime hours Monday-Friday."""
    return CapacityParameters(
        employee_count=1,
        work_week_schedule=eight_hour_week(with_overtime=True),
        include_overtime=True,
    )
