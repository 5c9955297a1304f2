"""Configuration for the scheduling engine.

SchedulerConfig holds the engine's own tunables (search horizons).
OrganizationSettings mirrors the organization-wide settings record the
engine reads: headcount and work week, plus the overtime multiplier and
labor rate that callers pair with scheduling output for cost display.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from laborplan.domain.errors import InvalidInputError
from laborplan.domain.models import CapacityParameters

logger = logging.getLogger(__name__)

# Days walked before a search gives up.
DEFAULT_LOOKBACK_DAYS = 365
DEFAULT_LOOKAHEAD_DAYS = 365


@dataclass
class SchedulerConfig:
    """Search horizons for the schedulers.

    Attributes:
        lookback_days: Dates the backward scheduler visits per job,
            counting the due date itself.
        lookahead_days: Dates the forward planner visits, counting the
            start date itself.
    """

    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS

    def __post_init__(self):
        for name in ("lookback_days", "lookahead_days"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidInputError(
                    f"{name} must be a positive integer, got {value!r}",
                    field=name,
                    value=value,
                )


@dataclass
class OrganizationSettings:
    """Organization-wide settings relevant to scheduling.

    Attributes:
        employee_count: Number of interchangeable employees.
        work_week_schedule: Raw work-week mapping as stored; normalized
            when capacity parameters are built.
        overtime_multiplier: Pay multiplier for overtime hours. Not used
            by the engine.
        labor_rate: Hourly labor rate. Not used by the engine.
    """

    employee_count: int = 1
    work_week_schedule: Optional[Mapping] = field(default=None)
    overtime_multiplier: float = 1.5
    labor_rate: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrganizationSettings":
        """Build settings from a stored record (snake_case or camelCase keys)."""
        def pick(*keys, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        return cls(
            employee_count=pick("employee_count", "employeeCount", default=1),
            work_week_schedule=pick("work_week_schedule", "workWeekSchedule"),
            overtime_multiplier=float(pick("overtime_multiplier", "overtimeMultiplier", default=1.5)),
            labor_rate=float(pick("labor_rate", "laborRate", default=0.0)),
        )

    def to_capacity_parameters(self, include_overtime: bool = False) -> CapacityParameters:
        """Capacity parameters for a scheduling query.

        Raises:
            InvalidInputError: If the employee count is below one.
        """
        return CapacityParameters(
            employee_count=self.employee_count,
            work_week_schedule=self.work_week_schedule,
            include_overtime=include_overtime,
        )


def load_settings(path: Union[str, Path]) -> OrganizationSettings:
    """Load organization settings from a JSON file.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the file is not valid JSON.
        InvalidInputError: If the document is not a JSON object.
    """
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise InvalidInputError(
            f"Settings file {path} must contain a JSON object",
            field="settings",
            value=type(data).__name__,
        )
    settings = OrganizationSettings.from_dict(data)
    logger.debug(
        "Loaded settings from %s: %s employees", path, settings.employee_count
    )
    return settings
