"""PDF generation for labor plans.

This module creates a printable calendar of a scheduling run:
- A jobs x dates grid, each cell showing hours placed (regular/overtime)
- Due-date markers and at-risk highlighting
- A summary page with daily utilization
"""

from datetime import date, timedelta
from io import BytesIO
from pathlib import Path
from typing import Union

from laborplan.domain.models import CapacityParameters, JobScheduleResult, ScheduleOutput
from laborplan.scheduling.capacity import DailyCapacityCalculator

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "regular": (0.4, 0.7, 0.4),  # Green
    "overtime": (0.9, 0.6, 0.2),  # Orange
    "due": (0.8, 0.2, 0.2),  # Red
    "at_risk": (1.0, 0.85, 0.85),  # Light red
    "non_work": (0.92, 0.92, 0.92),  # Light gray
    "grid": (0.75, 0.75, 0.75),
}


class PDFGenerator:
    """Generates printable PDF plan calendars.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(output, params, "plan.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
        days_per_page: int = 21,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.days_per_page = days_per_page

    def generate(
        self,
        output: ScheduleOutput,
        params: CapacityParameters,
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate the PDF and save it to a file.

        Args:
            output: The scheduling run to render.
            params: Capacity parameters the run used.
            output_path: Path to save the PDF.
            include_summary: Whether to include the summary page.
        """
        canvas = self._import_canvas()
        c = canvas.Canvas(str(output_path), pagesize=(self.page_width, self.page_height))
        self._draw(c, output, params, include_summary)
        c.save()

    def generate_to_buffer(
        self,
        output: ScheduleOutput,
        params: CapacityParameters,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate the PDF and return it as a bytes buffer."""
        canvas = self._import_canvas()
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(self.page_width, self.page_height))
        self._draw(c, output, params, include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    @staticmethod
    def _import_canvas():
        try:
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )
        return canvas

    def _draw(
        self,
        c,
        output: ScheduleOutput,
        params: CapacityParameters,
        include_summary: bool,
    ) -> None:
        calculator = DailyCapacityCalculator(params)
        dates = self._plan_dates(output)

        if not dates:
            self._draw_header(c, "Labor Plan", "No work scheduled")
            c.showPage()
        else:
            for page_start in range(0, len(dates), self.days_per_page):
                page_dates = dates[page_start : page_start + self.days_per_page]
                self._draw_calendar_page(c, output, page_dates, calculator)

        if include_summary:
            self._draw_summary_page(c, output, params, calculator)

    @staticmethod
    def _plan_dates(output: ScheduleOutput) -> list[date]:
        """Every date from the earliest start to the latest due date."""
        if not output.results:
            return []
        first = min(r.start_date for r in output.results)
        last = max(r.due_date for r in output.results)
        return [first + timedelta(days=i) for i in range((last - first).days + 1)]

    def _draw_header(self, c, title: str, subtitle: str) -> None:
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(self.margin, self.page_height - self.margin - 20, title)
        c.setFont("Helvetica", 10)
        c.drawString(self.margin, self.page_height - self.margin - 35, subtitle)

    def _draw_calendar_page(
        self,
        c,
        output: ScheduleOutput,
        page_dates: list[date],
        calculator: DailyCapacityCalculator,
    ) -> None:
        """Draw one or more pages of the job grid for a range of dates."""
        row_height = 20
        header_height = 70
        footer_height = 40
        label_width = 110
        grid_left = self.margin + label_width
        cell_width = (self.page_width - self.margin - grid_left) / len(page_dates)
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))

        results = output.results
        for row_start in range(0, max(1, len(results)), rows_per_page):
            page_results = results[row_start : row_start + rows_per_page]
            self._draw_header(
                c,
                "Labor Plan",
                f"{page_dates[0].strftime('%b %d, %Y')} - {page_dates[-1].strftime('%b %d, %Y')}",
            )

            top = self.page_height - self.margin - header_height
            self._draw_date_axis(c, page_dates, calculator, grid_left, top, cell_width)

            y = top - 10
            for result in page_results:
                y -= row_height
                self._draw_job_row(
                    c, result, page_dates, calculator, grid_left, y, cell_width, row_height - 4
                )

            self._draw_legend(c, self.margin, self.margin + 10)
            c.showPage()

    def _draw_date_axis(
        self,
        c,
        page_dates: list[date],
        calculator: DailyCapacityCalculator,
        x: float,
        y: float,
        cell_width: float,
    ) -> None:
        c.setFont("Helvetica", 7)
        c.setFillColorRGB(0, 0, 0)
        for i, d in enumerate(page_dates):
            cx = x + i * cell_width + cell_width / 2
            c.drawCentredString(cx, y + 12, d.strftime("%a")[:2])
            c.drawCentredString(cx, y + 3, d.strftime("%m/%d"))
            capacity = calculator.for_date(d).total_capacity_hours
            c.drawCentredString(cx, y - 6, f"{capacity:.0f}h")

    def _draw_job_row(
        self,
        c,
        result: JobScheduleResult,
        page_dates: list[date],
        calculator: DailyCapacityCalculator,
        x: float,
        y: float,
        cell_width: float,
        height: float,
    ) -> None:
        """Draw a single job's row of daily cells."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 8)
        c.drawString(self.margin, y + height / 2, str(result.id)[:20])
        c.setFont("Helvetica", 6)
        c.drawString(
            self.margin, y + height / 2 - 8,
            f"{result.required_hours:.1f}h due {result.due_date.strftime('%m/%d')}",
        )

        by_date = {a.schedule_date: a for a in result.allocations}
        for i, d in enumerate(page_dates):
            cx = x + i * cell_width

            if calculator.for_date(d).total_capacity_hours <= 0:
                c.setFillColorRGB(*COLORS["non_work"])
                c.rect(cx, y, cell_width, height, fill=1, stroke=0)
            if d == result.due_date and not result.is_fully_scheduled:
                c.setFillColorRGB(*COLORS["at_risk"])
                c.rect(cx, y, cell_width, height, fill=1, stroke=0)

            allocation = by_date.get(d)
            if allocation is not None and allocation.scheduled_hours > 0:
                regular_h = height * allocation.regular_hours / allocation.scheduled_hours
                c.setFillColorRGB(*COLORS["regular"])
                c.rect(cx + 1, y, cell_width - 2, regular_h, fill=1, stroke=0)
                if allocation.overtime_hours > 0:
                    c.setFillColorRGB(*COLORS["overtime"])
                    c.rect(cx + 1, y + regular_h, cell_width - 2, height - regular_h, fill=1, stroke=0)
                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica", 6)
                c.drawCentredString(cx + cell_width / 2, y + height / 2 - 2, f"{allocation.scheduled_hours:.1f}")

            c.setStrokeColorRGB(*COLORS["grid"])
            c.setLineWidth(0.3)
            c.rect(cx, y, cell_width, height, fill=0, stroke=1)

            if d == result.due_date:
                c.setStrokeColorRGB(*COLORS["due"])
                c.setLineWidth(1.5)
                c.line(cx + cell_width, y, cx + cell_width, y + height)

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [
            ("regular", "Regular"),
            ("overtime", "Overtime"),
            ("non_work", "Non-work day"),
            ("at_risk", "Due, short"),
        ]

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for key, label in items:
            c.setFillColorRGB(*COLORS[key])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 80

    def _draw_summary_page(
        self,
        c,
        output: ScheduleOutput,
        params: CapacityParameters,
        calculator: DailyCapacityCalculator,
    ) -> None:
        """Draw summary page with totals and daily utilization."""
        summary = output.get_summary()
        self._draw_header(c, "Plan Summary", f"{params.employee_count} employees")

        y = self.page_height - self.margin - 70
        c.setFont("Helvetica", 10)
        stats = [
            f"Jobs: {summary['total_jobs']} ({summary['at_risk_jobs']} at risk)",
            f"Required Hours: {summary['total_required_hours']:.1f}",
            f"Scheduled Hours: {summary['total_scheduled_hours']:.1f}",
            f"Overtime Hours: {summary['total_overtime_hours']:.1f}",
            f"Unscheduled Hours: {summary['total_unscheduled_hours']:.1f}",
        ]
        for stat in stats:
            c.drawString(self.margin + 20, y, stat)
            y -= 15

        y -= 20
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Daily Utilization")
        y -= 20

        bar_width = 300
        c.setFont("Helvetica", 8)
        for usage_date in sorted(output.day_usage):
            if y < self.margin + 20:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 8)
            usage = output.day_usage[usage_date]
            capacity = calculator.for_date(usage_date).total_capacity_hours
            share = min(1.0, usage.total_hours / capacity) if capacity > 0 else 0.0

            c.setFillColorRGB(0, 0, 0)
            c.drawString(self.margin + 20, y, usage_date.strftime("%a %m/%d"))
            c.setFillColorRGB(*COLORS["non_work"])
            c.rect(self.margin + 90, y - 2, bar_width, 9, fill=1, stroke=0)
            c.setFillColorRGB(*COLORS["regular"])
            c.rect(self.margin + 90, y - 2, bar_width * share, 9, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(
                self.margin + 100 + bar_width, y,
                f"{usage.total_hours:.1f} / {capacity:.1f}h",
            )
            y -= 12

        c.showPage()
