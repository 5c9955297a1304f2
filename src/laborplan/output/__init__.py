"""Output generation for labor plans (text, PDF)."""

from laborplan.output.pdf_generator import PDFGenerator
from laborplan.output.report_generator import PlanReportGenerator

__all__ = [
    "PDFGenerator",
    "PlanReportGenerator",
]
