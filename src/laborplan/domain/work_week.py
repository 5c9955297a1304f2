"""Work-week schedule model and normalization.

This module holds the per-weekday work window model (DaySchedule) and the
normalizer that turns whatever the configuration store hands us into a
complete, internally consistent seven-day schedule. Normalization never
raises: partial or legacy configuration is repaired, not rejected.

Weekdays are indexed 0=Sunday through 6=Saturday.
"""

import logging
import math
import re
from dataclasses import asdict, dataclass, replace
from datetime import date, time
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

DAY_INDICES = (0, 1, 2, 3, 4, 5, 6)
DAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

# Legacy numeric day entries start at this time of day.
LEGACY_START_MINUTES = 480  # 08:00
LAST_MINUTE_OF_DAY = 1439  # 23:59

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

# Accepted spellings for each DaySchedule field (snake_case, camelCase).
_FIELD_ALIASES = {
    "enabled": ("enabled",),
    "standard_start": ("standard_start", "standardStart"),
    "standard_end": ("standard_end", "standardEnd"),
    "unpaid_break_minutes": ("unpaid_break_minutes", "unpaidBreakMinutes"),
    "overtime_enabled": ("overtime_enabled", "overtimeEnabled"),
    "overtime_start": ("overtime_start", "overtimeStart"),
    "overtime_end": ("overtime_end", "overtimeEnd"),
}


def parse_time(value: Any) -> Optional[time]:
    """Parse an "HH:MM" string (or pass through a time) to minute resolution.

    Returns None for anything that is not a valid time of day.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        return None
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return time(hour=hours, minute=minutes)


def time_to_minutes(t: time) -> int:
    """Minutes from midnight."""
    return t.hour * 60 + t.minute


def minutes_to_time(minutes: int) -> time:
    """Time of day for minutes from midnight, clamped to the same day."""
    minutes = min(max(0, int(minutes)), LAST_MINUTE_OF_DAY)
    hours, mins = divmod(minutes, 60)
    return time(hour=hours, minute=mins)


def format_time(t: time) -> str:
    return t.strftime("%H:%M")


def hours_between(start: time, end: time) -> float:
    """Hours from start to end on the same day; zero when end is not after start."""
    return max(0, time_to_minutes(end) - time_to_minutes(start)) / 60.0


def weekday_index(d: date) -> int:
    """Weekday index with 0=Sunday, matching the work-week schedule keys."""
    return d.isoweekday() % 7


@dataclass(frozen=True)
class DaySchedule:
    """Regular and overtime work windows for one weekday.

    Hours are per employee. The unpaid break is deducted from the regular
    window only; overtime is a separate window added on top of regular hours
    and is used only when the caller opts into overtime capacity.

    Attributes:
        enabled: Whether employees work this weekday at all.
        standard_start: Start of the regular window.
        standard_end: End of the regular window.
        unpaid_break_minutes: Break deducted from the regular window.
        overtime_enabled: Whether an overtime window exists on this day.
        overtime_start: Start of the overtime window.
        overtime_end: End of the overtime window.
    """

    enabled: bool = False
    standard_start: time = time(0, 0)
    standard_end: time = time(0, 0)
    unpaid_break_minutes: int = 0
    overtime_enabled: bool = False
    overtime_start: time = time(0, 0)
    overtime_end: time = time(0, 0)

    @classmethod
    def off_day(cls) -> "DaySchedule":
        """Create a disabled day with no windows."""
        return cls()

    @classmethod
    def from_times(
        cls,
        start: str,
        end: str,
        unpaid_break_minutes: int = 0,
        overtime_start: Optional[str] = None,
        overtime_end: Optional[str] = None,
    ) -> "DaySchedule":
        """Create an enabled day from "HH:MM" strings.

        Overtime is enabled when both overtime times are given.
        """
        has_overtime = overtime_start is not None and overtime_end is not None
        return cls(
            enabled=True,
            standard_start=parse_time(start) or time(0, 0),
            standard_end=parse_time(end) or time(0, 0),
            unpaid_break_minutes=unpaid_break_minutes,
            overtime_enabled=has_overtime,
            overtime_start=parse_time(overtime_start) or time(0, 0),
            overtime_end=parse_time(overtime_end) or time(0, 0),
        )

    @property
    def standard_window_minutes(self) -> int:
        """Length of the regular window in minutes, ignoring the break."""
        return max(0, time_to_minutes(self.standard_end) - time_to_minutes(self.standard_start))

    @property
    def regular_hours_per_employee(self) -> float:
        """Payable regular hours for one employee (window minus break)."""
        if not self.enabled:
            return 0.0
        window_hours = hours_between(self.standard_start, self.standard_end)
        return max(0.0, window_hours - self.unpaid_break_minutes / 60.0)

    @property
    def overtime_hours_per_employee(self) -> float:
        """Overtime window hours for one employee."""
        if not self.enabled or not self.overtime_enabled:
            return 0.0
        return hours_between(self.overtime_start, self.overtime_end)

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "standard_start": format_time(self.standard_start),
            "standard_end": format_time(self.standard_end),
            "unpaid_break_minutes": self.unpaid_break_minutes,
            "overtime_enabled": self.overtime_enabled,
            "overtime_start": format_time(self.overtime_start),
            "overtime_end": format_time(self.overtime_end),
        }


# Weekday index (0=Sunday) to that day's schedule.
WorkWeekSchedule = dict[int, DaySchedule]


def default_work_week_schedule() -> WorkWeekSchedule:
    """Create the built-in shop week.

    Per employee:
    - Monday-Thursday: 06:30-16:30 with a 60-minute unpaid break (9 hours)
    - Friday: 07:00-11:00, no break (4 hours)
    - Saturday, Sunday: off

    Overtime windows are pre-filled (after the regular window) but disabled.
    """
    long_day = DaySchedule(
        enabled=True,
        standard_start=time(6, 30),
        standard_end=time(16, 30),
        unpaid_break_minutes=60,
        overtime_enabled=False,
        overtime_start=time(16, 30),
        overtime_end=time(18, 30),
    )
    friday = DaySchedule(
        enabled=True,
        standard_start=time(7, 0),
        standard_end=time(11, 0),
        unpaid_break_minutes=0,
        overtime_enabled=False,
        overtime_start=time(11, 0),
        overtime_end=time(13, 0),
    )
    return {
        0: DaySchedule.off_day(),
        1: long_day,
        2: long_day,
        3: long_day,
        4: long_day,
        5: friday,
        6: DaySchedule.off_day(),
    }


DEFAULT_WORK_WEEK_SCHEDULE: WorkWeekSchedule = default_work_week_schedule()


def repair_day_schedule(day: DaySchedule) -> DaySchedule:
    """Make a day schedule internally consistent.

    - A regular window whose end is not after its start becomes empty
      (end = start). The enabled flag is left as supplied.
    - The unpaid break is clamped to [0, regular window minutes].
    - An overtime window whose end is not after its start disables overtime.
    """
    standard_end = day.standard_end
    if time_to_minutes(standard_end) <= time_to_minutes(day.standard_start):
        standard_end = day.standard_start

    window_minutes = time_to_minutes(standard_end) - time_to_minutes(day.standard_start)
    unpaid_break = min(max(0, int(day.unpaid_break_minutes)), window_minutes)

    overtime_enabled = day.overtime_enabled and (
        time_to_minutes(day.overtime_end) > time_to_minutes(day.overtime_start)
    )

    return replace(
        day,
        standard_end=standard_end,
        unpaid_break_minutes=unpaid_break,
        overtime_enabled=overtime_enabled,
    )


def normalize_work_week_schedule(schedule: Optional[Mapping] = None) -> WorkWeekSchedule:
    """Fill in and repair a work-week schedule.

    Accepts a mapping keyed by weekday (ints or numeric strings, 0=Sunday).
    Each value may be a DaySchedule or a partial mapping of DaySchedule
    fields (snake_case or camelCase keys; missing or unparseable fields fall
    back to that weekday's default, for DaySchedule values too), or a
    legacy number of regular hours starting at 08:00 (zero or less disables
    the day). Missing weekdays get the default. Every day is then repaired
    with repair_day_schedule.

    Args:
        schedule: Raw schedule from configuration, or None.

    Returns:
        A complete seven-day schedule. Normalizing twice gives the same result.
    """
    normalized = default_work_week_schedule()

    entries: dict[int, Any] = {}
    if isinstance(schedule, Mapping):
        entries = _index_entries(schedule)
    elif schedule is not None:
        logger.warning(
            "Ignoring work week schedule of type %s, using defaults",
            type(schedule).__name__,
        )

    for day in DAY_INDICES:
        raw = entries.get(day)
        base = normalized[day]

        if isinstance(raw, DaySchedule):
            # Field types are not enforced on the dataclass
            candidate = _merge_fields(asdict(raw), base)
        elif isinstance(raw, Mapping):
            candidate = _merge_fields(raw, base)
        elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
            candidate = _from_legacy_hours(raw, base)
        else:
            if raw is not None:
                logger.debug("Unusable entry for %s, using default", DAY_NAMES[day])
            candidate = base

        normalized[day] = repair_day_schedule(candidate)

    return normalized


def day_schedule_hours(day: DaySchedule) -> tuple[float, float]:
    """Per-employee (regular, overtime) hours for one day schedule."""
    return day.regular_hours_per_employee, day.overtime_hours_per_employee


def weekly_work_hours(
    schedule: Optional[Mapping] = None,
    include_overtime: bool = False,
) -> float:
    """Per-employee hours in one week of the (normalized) schedule."""
    normalized = normalize_work_week_schedule(schedule)
    total = 0.0
    for day in DAY_INDICES:
        regular, overtime = day_schedule_hours(normalized[day])
        total += regular
        if include_overtime:
            total += overtime
    return total


def _index_entries(schedule: Mapping) -> dict[int, Any]:
    """Key entries by integer weekday, dropping keys that are not 0-6."""
    entries = {}
    for key, value in schedule.items():
        if isinstance(key, bool):
            continue
        if isinstance(key, str) and key.strip().isdigit():
            key = int(key.strip())
        if isinstance(key, int) and key in DAY_INDICES:
            entries[key] = value
    return entries


def _lookup(raw: Mapping, field_name: str) -> Any:
    for alias in _FIELD_ALIASES[field_name]:
        if alias in raw:
            return raw[alias]
    return None


def _coerce_flag(value: Any, fallback: bool) -> bool:
    return value if isinstance(value, bool) else fallback


def _coerce_minutes(value: Any, fallback: int) -> int:
    if isinstance(value, bool) or value is None:
        return fallback
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return fallback
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return fallback
    return int(round(value))


def _merge_fields(raw: Mapping, base: DaySchedule) -> DaySchedule:
    """Overlay the recognizable fields of a partial mapping onto base."""
    return DaySchedule(
        enabled=_coerce_flag(_lookup(raw, "enabled"), base.enabled),
        standard_start=parse_time(_lookup(raw, "standard_start")) or base.standard_start,
        standard_end=parse_time(_lookup(raw, "standard_end")) or base.standard_end,
        unpaid_break_minutes=_coerce_minutes(
            _lookup(raw, "unpaid_break_minutes"), base.unpaid_break_minutes
        ),
        overtime_enabled=_coerce_flag(_lookup(raw, "overtime_enabled"), base.overtime_enabled),
        overtime_start=parse_time(_lookup(raw, "overtime_start")) or base.overtime_start,
        overtime_end=parse_time(_lookup(raw, "overtime_end")) or base.overtime_end,
    )


def _from_legacy_hours(hours: float, base: DaySchedule) -> DaySchedule:
    """Convert a legacy "hours per day" entry to a window starting at 08:00."""
    if not math.isfinite(hours):
        return base
    minutes = int(round(hours * 60))
    if minutes <= 0:
        return replace(base, enabled=False, unpaid_break_minutes=0)

    minutes = min(minutes, LAST_MINUTE_OF_DAY)
    # Long days start earlier so the window stays within the calendar day
    start = min(LEGACY_START_MINUTES, LAST_MINUTE_OF_DAY - minutes)
    return replace(
        base,
        enabled=True,
        standard_start=minutes_to_time(start),
        standard_end=minutes_to_time(start + minutes),
        unpaid_break_minutes=0,
    )
