"""Command-line interface for the labor planning tool."""

import argparse
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from laborplan.config import OrganizationSettings, SchedulerConfig, load_settings
from laborplan.domain.errors import InvalidInputError
from laborplan.domain.models import (
    CapacityParameters,
    JobScheduleInput,
    ScheduleOutput,
    parse_date,
)
from laborplan.output.pdf_generator import PDFGenerator
from laborplan.output.report_generator import PlanReportGenerator
from laborplan.scheduling.scheduler import CapacityScheduler
from laborplan.validation.validator import PlanValidator

logger = logging.getLogger(__name__)


def create_sample_jobs(start: date, count: int = 8) -> list[JobScheduleInput]:
    """Create sample jobs spread over the weeks after start.

    Args:
        start: Date the sample shop is planning from.
        count: Number of jobs to create.
    """
    jobs = []
    for i in range(count):
        due = start + timedelta(days=4 + (i * 3) % 17)
        jobs.append(
            JobScheduleInput(
                id=f"J{i + 1:03d}",
                due_date=due,
                required_hours=float(8 + (i * 13) % 40),
                is_rush=(i % 5 == 0),
            )
        )
    return jobs


def load_jobs(path: str) -> list[JobScheduleInput]:
    """Load jobs from a JSON file.

    The file holds either a list of job records or an object with a "jobs"
    list. Records use id, due_date (or dueDate), required_hours (or
    requiredHours) and optional is_rush and priority.
    """
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("jobs", [])
    if not isinstance(data, list):
        raise InvalidInputError(f"Jobs file {path} must contain a list of jobs", field="jobs")
    return [JobScheduleInput.from_dict(record) for record in data]


def print_plan(
    output: ScheduleOutput,
    params: CapacityParameters,
    jobs: list[JobScheduleInput],
) -> bool:
    """Print the plan report and validation. Returns True if the plan is valid."""
    print(PlanReportGenerator().generate_to_string(output, params))

    result = PlanValidator().validate(output, params, jobs)
    if result.is_valid:
        print("Validation: PASSED")
    else:
        print(f"Validation: FAILED ({len(result.errors)} errors)")
        for error in result.errors[:5]:
            print(f"    - {error}")
        if len(result.errors) > 5:
            print(f"    ... and {len(result.errors) - 5} more errors")

    if result.warnings:
        print(f"\nWarnings ({len(result.warnings)}):")
        for warning in result.warnings[:5]:
            print(f"    - {warning}")
        if len(result.warnings) > 5:
            print(f"    ... and {len(result.warnings) - 5} more warnings")

    return result.is_valid


def run_demo(
    employee_count: int = 2,
    include_overtime: bool = False,
    start: Optional[date] = None,
    pdf_path: Optional[str] = None,
) -> int:
    """Run a demo plan for a sample shop."""
    start = start or date.today()
    print(f"Planning sample jobs for {employee_count} employees from {start}...")

    params = CapacityParameters(
        employee_count=employee_count,
        include_overtime=include_overtime,
    )
    jobs = create_sample_jobs(start)

    scheduler = CapacityScheduler()
    output = scheduler.schedule_jobs(jobs, params)
    valid = print_plan(output, params, jobs)

    projection = scheduler.project_what_if(
        24.0, start, params, output.day_usage,
        due_date=start + timedelta(days=7),
        allow_overtime=include_overtime,
    )
    print("")
    print(PlanReportGenerator().projection_to_string(projection))

    if pdf_path:
        print(f"\nGenerating PDF: {pdf_path}")
        PDFGenerator().generate(output, params, pdf_path)
        print("  PDF created successfully!")

    return 0 if valid else 1


def run_plan(
    settings: OrganizationSettings,
    jobs: list[JobScheduleInput],
    include_overtime: bool = False,
    config: Optional[SchedulerConfig] = None,
    json_path: Optional[str] = None,
    pdf_path: Optional[str] = None,
) -> int:
    """Schedule jobs from files and print (and optionally save) the plan."""
    params = settings.to_capacity_parameters(include_overtime)
    scheduler = CapacityScheduler(config)
    output = scheduler.schedule_jobs(jobs, params)
    valid = print_plan(output, params, jobs)

    if json_path:
        Path(json_path).write_text(json.dumps(output.to_dict(), indent=2, default=str))
        print(f"\nPlan written to {json_path}")

    if pdf_path:
        PDFGenerator().generate(output, params, pdf_path)
        print(f"PDF written to {pdf_path}")

    return 0 if valid else 1


def run_what_if(
    settings: OrganizationSettings,
    jobs: list[JobScheduleInput],
    required_hours: float,
    from_date: date,
    due_date: Optional[date] = None,
    allow_overtime: bool = False,
    config: Optional[SchedulerConfig] = None,
    as_json: bool = False,
    schedule_overtime: bool = False,
) -> int:
    """Project a hypothetical job against the plan for existing jobs.

    allow_overtime only applies to the hypothetical job. Existing jobs are
    planned with overtime only when schedule_overtime is set.
    """
    scheduler = CapacityScheduler(config)
    params = settings.to_capacity_parameters(allow_overtime)

    # Existing jobs claim capacity first
    output = scheduler.schedule_jobs(jobs, params.with_overtime(schedule_overtime))
    projection = scheduler.project_what_if(
        required_hours,
        from_date,
        params,
        output.day_usage,
        due_date=due_date,
        allow_overtime=allow_overtime,
    )

    if as_json:
        print(json.dumps(projection.to_dict(), indent=2, default=str))
    else:
        print(PlanReportGenerator().projection_to_string(projection))
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--overtime",
        action="store_true",
        help="Allow overtime capacity",
    )
    parser.add_argument(
        "--lookback-days",
        type=int,
        default=SchedulerConfig().lookback_days,
        help="Days searched backward from each due date (default: 365)",
    )
    parser.add_argument(
        "--lookahead-days",
        type=int,
        default=SchedulerConfig().lookahead_days,
        help="Days searched forward for what-if projections (default: 365)",
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Labor Plan - Capacity-aware job scheduling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                                  Plan sample jobs for 2 employees
  %(prog)s demo --employees 4 --overtime         Larger shop with overtime
  %(prog)s demo --pdf plan.pdf                   Also render a PDF calendar

  %(prog)s plan --settings shop.json --jobs jobs.json
  %(prog)s plan --settings shop.json --jobs jobs.json --json plan.json

  %(prog)s what-if --settings shop.json --jobs jobs.json --hours 40
  %(prog)s what-if --settings shop.json --hours 40 --due 2026-03-13
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Plan a sample shop")
    demo_parser.add_argument(
        "--employees", "-e",
        type=int,
        default=2,
        help="Number of employees (default: 2)",
    )
    demo_parser.add_argument(
        "--overtime",
        action="store_true",
        help="Allow overtime capacity",
    )
    demo_parser.add_argument(
        "--start",
        type=str,
        help="Planning start date YYYY-MM-DD (default: today)",
    )
    demo_parser.add_argument(
        "--pdf",
        type=str,
        help="Output PDF file path",
    )

    # Plan command
    plan_parser = subparsers.add_parser("plan", help="Schedule jobs from files")
    plan_parser.add_argument("--settings", "-s", required=True, help="Settings JSON file")
    plan_parser.add_argument("--jobs", "-j", required=True, help="Jobs JSON file")
    plan_parser.add_argument("--json", dest="json_path", help="Write the plan as JSON")
    plan_parser.add_argument("--pdf", help="Output PDF file path")
    _add_common_arguments(plan_parser)

    # What-if command
    what_if_parser = subparsers.add_parser(
        "what-if",
        help="Project a hypothetical job against existing work",
    )
    what_if_parser.add_argument("--settings", "-s", required=True, help="Settings JSON file")
    what_if_parser.add_argument("--jobs", "-j", help="Existing jobs JSON file")
    what_if_parser.add_argument(
        "--hours", "-H",
        type=float,
        required=True,
        help="Hours the hypothetical job needs",
    )
    what_if_parser.add_argument(
        "--from",
        dest="from_date",
        type=str,
        help="First workable date YYYY-MM-DD (default: today)",
    )
    what_if_parser.add_argument("--due", type=str, help="Target due date YYYY-MM-DD")
    what_if_parser.add_argument("--json", action="store_true", help="Print JSON")
    what_if_parser.add_argument(
        "--schedule-overtime",
        action="store_true",
        help="Let existing jobs use overtime capacity",
    )
    _add_common_arguments(what_if_parser)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    try:
        if args.command == "demo":
            start = parse_date(args.start, "start") if args.start else None
            return run_demo(args.employees, args.overtime, start, args.pdf)
        elif args.command == "plan":
            config = SchedulerConfig(args.lookback_days, args.lookahead_days)
            return run_plan(
                load_settings(args.settings),
                load_jobs(args.jobs),
                args.overtime,
                config,
                args.json_path,
                args.pdf,
            )
        elif args.command == "what-if":
            config = SchedulerConfig(args.lookback_days, args.lookahead_days)
            from_date = parse_date(args.from_date, "from") if args.from_date else date.today()
            due_date = parse_date(args.due, "due") if args.due else None
            return run_what_if(
                load_settings(args.settings),
                load_jobs(args.jobs) if args.jobs else [],
                args.hours,
                from_date,
                due_date,
                args.overtime,
                config,
                args.json,
                args.schedule_overtime,
            )
        else:
            parser.print_help()
            return 1
    except (InvalidInputError, OSError, json.JSONDecodeError) as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
