"""Validation module for verifying plan correctness.

This module checks a backward scheduling run against the invariants every
plan must hold: daily capacity is never exceeded, no work lands after a
due date, overtime is only used once regular capacity is gone, and every
required hour is either placed or reported as unscheduled.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Hashable, Iterable, Mapping, Optional

from laborplan.domain.models import (
    CapacityParameters,
    DayUsage,
    JobScheduleInput,
    JobScheduleResult,
    ScheduleOutput,
    copy_day_usage,
)
from laborplan.scheduling.capacity import DailyCapacityCalculator

# Floating point slack when comparing hour totals.
TOLERANCE = 1e-6


class ValidationErrorType(Enum):
    """Types of validation errors."""

    REGULAR_CAPACITY_EXCEEDED = "regular_capacity_exceeded"
    OVERTIME_CAPACITY_EXCEEDED = "overtime_capacity_exceeded"
    OVERTIME_BEFORE_REGULAR = "overtime_before_regular"
    ALLOCATION_AFTER_DUE_DATE = "allocation_after_due_date"
    ALLOCATIONS_OUT_OF_ORDER = "allocations_out_of_order"
    INVALID_ALLOCATION = "invalid_allocation"
    HOURS_MISMATCH = "hours_mismatch"
    LEDGER_MISMATCH = "ledger_mismatch"
    UNKNOWN_JOB = "unknown_job"
    MISSING_RESULT = "missing_result"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    job_id: Optional[Hashable] = None
    schedule_date: Optional[date] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.job_id is not None:
            parts.append(f"Job {self.job_id}:")
        parts.append(self.message)
        if self.schedule_date is not None:
            parts.append(f"({self.schedule_date.isoformat()})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a plan."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def errors_of_type(self, error_type: ValidationErrorType) -> list[ValidationError]:
        return [e for e in self.errors if e.error_type == error_type]


class PlanValidator:
    """Validates backward scheduling output against capacity and due dates.

    Example:
        >>> validator = PlanValidator()
        >>> result = validator.validate(output, params, jobs)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(self, tolerance: float = TOLERANCE):
        self.tolerance = tolerance

    def validate(
        self,
        output: ScheduleOutput,
        params: CapacityParameters,
        jobs: Optional[Iterable[JobScheduleInput]] = None,
        seed_usage: Optional[Mapping] = None,
    ) -> ValidationResult:
        """Validate a complete plan.

        Args:
            output: The scheduling output to check.
            params: Capacity parameters the plan was produced with.
            jobs: The job inputs. When given, results are matched to
                them by id and their due dates and hours are used.
            seed_usage: Ledger the run was seeded with, if any.

        Returns:
            ValidationResult with is_valid flag, errors and warnings.
        """
        result = ValidationResult(is_valid=True)
        jobs_map = {job.id: job for job in jobs} if jobs is not None else None

        for job_result in output.results:
            job = None
            if jobs_map is not None:
                job = jobs_map.get(job_result.id)
                if job is None:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.UNKNOWN_JOB,
                            message="Result has no matching job input",
                            job_id=job_result.id,
                        )
                    )
            self._validate_job_result(job_result, job, result)

            if not job_result.is_fully_scheduled:
                result.add_warning(
                    f"Job {job_result.id} due {job_result.due_date.isoformat()} is short "
                    f"{job_result.unscheduled_hours:.2f} of {job_result.required_hours:.2f} hours"
                )

        if jobs_map is not None:
            result_ids = {r.id for r in output.results}
            for job_id in jobs_map:
                if job_id not in result_ids:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.MISSING_RESULT,
                            message="Job has no result",
                            job_id=job_id,
                        )
                    )

        self._validate_ledger(output, seed_usage, result)
        self._validate_capacity(output.day_usage, params, result)

        return result

    def _validate_job_result(
        self,
        job_result: JobScheduleResult,
        job: Optional[JobScheduleInput],
        result: ValidationResult,
    ) -> None:
        """Validate a single job's allocations."""
        job_id = job_result.id
        due_date = job.due_date if job is not None else job_result.due_date
        required = job.required_hours if job is not None else job_result.required_hours

        previous: Optional[date] = None
        for allocation in job_result.allocations:
            if allocation.schedule_date > due_date:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.ALLOCATION_AFTER_DUE_DATE,
                        message=f"Work placed after due date {due_date.isoformat()}",
                        job_id=job_id,
                        schedule_date=allocation.schedule_date,
                    )
                )

            if previous is not None and allocation.schedule_date <= previous:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.ALLOCATIONS_OUT_OF_ORDER,
                        message="Allocations are not in ascending date order",
                        job_id=job_id,
                        schedule_date=allocation.schedule_date,
                    )
                )
            previous = allocation.schedule_date

            split_total = allocation.regular_hours + allocation.overtime_hours
            if (
                allocation.regular_hours < -self.tolerance
                or allocation.overtime_hours < -self.tolerance
                or abs(split_total - allocation.scheduled_hours) > self.tolerance
            ):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INVALID_ALLOCATION,
                        message=(
                            f"Regular {allocation.regular_hours:.2f} + overtime "
                            f"{allocation.overtime_hours:.2f} does not make "
                            f"scheduled {allocation.scheduled_hours:.2f}"
                        ),
                        job_id=job_id,
                        schedule_date=allocation.schedule_date,
                    )
                )

        placed = sum(a.scheduled_hours for a in job_result.allocations)
        if abs(placed + job_result.unscheduled_hours - required) > self.tolerance:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.HOURS_MISMATCH,
                    message=(
                        f"Placed {placed:.2f} + unscheduled "
                        f"{job_result.unscheduled_hours:.2f} != required {required:.2f}"
                    ),
                    job_id=job_id,
                    details={
                        "placed": placed,
                        "unscheduled": job_result.unscheduled_hours,
                        "required": required,
                    },
                )
            )

    def _validate_ledger(
        self,
        output: ScheduleOutput,
        seed_usage: Optional[Mapping],
        result: ValidationResult,
    ) -> None:
        """Check that the ledger equals the seed plus every allocation."""
        expected = copy_day_usage(seed_usage)
        for job_result in output.results:
            for allocation in job_result.allocations:
                expected.setdefault(allocation.schedule_date, DayUsage()).add(
                    allocation.regular_hours, allocation.overtime_hours
                )

        for usage_date in sorted(set(expected) | set(output.day_usage)):
            want = expected.get(usage_date, DayUsage())
            got = output.day_usage.get(usage_date, DayUsage())
            if (
                abs(want.regular_hours - got.regular_hours) > self.tolerance
                or abs(want.overtime_hours - got.overtime_hours) > self.tolerance
            ):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.LEDGER_MISMATCH,
                        message=(
                            f"Ledger shows {got.regular_hours:.2f}+{got.overtime_hours:.2f}h, "
                            f"allocations total {want.regular_hours:.2f}+{want.overtime_hours:.2f}h"
                        ),
                        schedule_date=usage_date,
                    )
                )

    def _validate_capacity(
        self,
        day_usage: Mapping[date, DayUsage],
        params: CapacityParameters,
        result: ValidationResult,
    ) -> None:
        """Validate that claimed hours fit each day's regular and overtime pools."""
        calculator = DailyCapacityCalculator(params)
        for usage_date, usage in sorted(day_usage.items()):
            capacity = calculator.for_date(usage_date)

            if usage.regular_hours > capacity.regular_capacity_hours + self.tolerance:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.REGULAR_CAPACITY_EXCEEDED,
                        message=(
                            f"Regular hours {usage.regular_hours:.2f} exceed "
                            f"capacity {capacity.regular_capacity_hours:.2f}"
                        ),
                        schedule_date=usage_date,
                    )
                )

            if usage.overtime_hours > capacity.overtime_capacity_hours + self.tolerance:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.OVERTIME_CAPACITY_EXCEEDED,
                        message=(
                            f"Overtime hours {usage.overtime_hours:.2f} exceed "
                            f"capacity {capacity.overtime_capacity_hours:.2f}"
                        ),
                        schedule_date=usage_date,
                    )
                )

            if (
                usage.overtime_hours > self.tolerance
                and usage.regular_hours < capacity.regular_capacity_hours - self.tolerance
            ):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.OVERTIME_BEFORE_REGULAR,
                        message=(
                            f"Overtime used with {capacity.regular_capacity_hours - usage.regular_hours:.2f} "
                            f"regular hours still free"
                        ),
                        schedule_date=usage_date,
                    )
                )

    def count_days_over_capacity(
        self,
        day_usage: Mapping[date, DayUsage],
        params: CapacityParameters,
    ) -> dict[date, float]:
        """Hours over total capacity per date, for dates that are over."""
        calculator = DailyCapacityCalculator(params)
        over = defaultdict(float)
        for usage_date, usage in day_usage.items():
            excess = usage.total_hours - calculator.for_date(usage_date).total_capacity_hours
            if excess > self.tolerance:
                over[usage_date] = excess
        return dict(over)
