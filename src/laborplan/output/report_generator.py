"""Plain-text output for plan review.

This module renders a scheduling run as text:
- Per-job summary with start, due, overtime and shortfall
- Per-day ledger with utilization bars
- At-risk jobs needing attention
"""

from datetime import date
from pathlib import Path
from typing import Optional, Union

from laborplan.domain.models import CapacityParameters, ScheduleOutput, WhatIfProjection
from laborplan.domain.work_week import DAY_NAMES, weekday_index
from laborplan.scheduling.capacity import DailyCapacityCalculator

BAR_WIDTH = 30


class PlanReportGenerator:
    """Generates text reports for scheduling runs.

    Example:
        >>> generator = PlanReportGenerator()
        >>> print(generator.generate_to_string(output, params))
    """

    def generate(
        self,
        output: ScheduleOutput,
        params: CapacityParameters,
        output_path: Union[str, Path],
    ) -> str:
        """Generate the report and save it to a file.

        Returns:
            The generated text content.
        """
        content = self._generate_content(output, params)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        output: ScheduleOutput,
        params: CapacityParameters,
    ) -> str:
        """Generate the report and return it as a string."""
        return self._generate_content(output, params)

    def _generate_content(
        self,
        output: ScheduleOutput,
        params: CapacityParameters,
    ) -> str:
        lines = []
        summary = output.get_summary()

        lines.append("=" * 80)
        lines.append("LABOR PLAN")
        lines.append("=" * 80)
        lines.append(f"Employees: {params.employee_count}")
        lines.append(f"Overtime: {'included' if params.include_overtime else 'excluded'}")
        lines.append(f"Jobs: {summary['total_jobs']} ({summary['at_risk_jobs']} at risk)")
        lines.append(
            f"Hours: {summary['total_scheduled_hours']:.1f} scheduled of "
            f"{summary['total_required_hours']:.1f} required, "
            f"{summary['total_overtime_hours']:.1f} overtime"
        )
        lines.append("")

        lines.append("-" * 80)
        lines.append("JOBS (in scheduling order)")
        lines.append("-" * 80)
        lines.append(
            f"{'Job':<16} {'Start':>10} {'Due':>10} {'Required':>9} "
            f"{'Overtime':>9} {'Short':>7} {'Days':>5}"
        )
        lines.append("-" * 80)
        for result in output.results:
            lines.append(
                f"{str(result.id)[:16]:<16} {result.start_date.isoformat():>10} "
                f"{result.due_date.isoformat():>10} {result.required_hours:>9.1f} "
                f"{result.overtime_hours:>9.1f} {result.unscheduled_hours:>7.1f} "
                f"{len(result.allocations):>5}"
            )
        lines.append("")

        lines.append("-" * 80)
        lines.append("DAILY LEDGER")
        lines.append("-" * 80)
        calculator = DailyCapacityCalculator(params)
        for usage_date in sorted(output.day_usage):
            usage = output.day_usage[usage_date]
            capacity = calculator.for_date(usage_date)
            lines.append(
                f"{usage_date.isoformat()} {self._day_label(usage_date)} "
                f"{self._bar(usage.total_hours, capacity.total_capacity_hours)} "
                f"{usage.regular_hours:.1f}+{usage.overtime_hours:.1f}h "
                f"of {capacity.total_capacity_hours:.1f}h"
            )
        if not output.day_usage:
            lines.append("(no capacity claimed)")
        lines.append("")

        at_risk = output.at_risk_results
        if at_risk:
            lines.append("-" * 80)
            lines.append("AT RISK")
            lines.append("-" * 80)
            for result in at_risk:
                lines.append(
                    f"{result.id}: {result.unscheduled_hours:.1f}h cannot be placed "
                    f"by {result.due_date.isoformat()}"
                )
            lines.append("")

        lines.append("=" * 80)
        return "\n".join(lines)

    def projection_to_string(self, projection: WhatIfProjection) -> str:
        """Describe a what-if projection in a few lines."""
        lines = [
            f"What-if: {projection.required_hours:.1f}h starting "
            f"{projection.from_date.isoformat()}",
        ]
        earliest = projection.earliest
        if earliest.completion_date is not None:
            lines.append(
                f"  Earliest completion: {earliest.completion_date.isoformat()} "
                f"({earliest.overtime_hours:.1f}h overtime)"
            )
        else:
            lines.append(
                f"  No completion found ({earliest.remaining_hours:.1f}h short)"
            )

        if projection.due_date is not None:
            lines.append(f"  Target due date: {projection.due_date.isoformat()}")
            lines.append(
                f"    Regular only: {self._fit_label(projection.regular_only.remaining_hours)}"
            )
            lines.append(
                f"    With overtime: {self._fit_label(projection.with_overtime.remaining_hours)}"
            )
            lines.append(f"    Overtime needed: {projection.overtime_needed:.1f}h")
        return "\n".join(lines)

    @staticmethod
    def _fit_label(remaining_hours: float) -> str:
        if remaining_hours <= 0:
            return "fits"
        return f"short {remaining_hours:.1f}h"

    @staticmethod
    def _day_label(d: date) -> str:
        return DAY_NAMES[weekday_index(d)][:3]

    @staticmethod
    def _bar(used: float, capacity: Optional[float]) -> str:
        if not capacity:
            return "." * BAR_WIDTH
        filled = min(BAR_WIDTH, int(round(BAR_WIDTH * used / capacity)))
        return "#" * filled + "." * (BAR_WIDTH - filled)
