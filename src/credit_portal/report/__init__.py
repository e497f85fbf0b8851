"""Report export (PDF)."""

from credit_portal.report.pdf_report import render_report, report_filename

__all__ = ["render_report", "report_filename"]
