"""Student performance report export.

Renders a one-student PDF report with PyMuPDF:
- profile block (name, roll no, department, year, total credits)
- per semester: progress, credits earned, subject list

All figures come from core.progress; this module only lays them out.

Dependencies:
- pymupdf (fitz)
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import fitz
import structlog

from credit_portal.core.models import (
    DEFAULT_CREDIT_TARGET,
    SEMESTERS,
    CompletionRecord,
    Student,
    Subject,
)
from credit_portal.core.progress import completed_subject_ids, summarize

logger = structlog.get_logger(__name__)

# A4 in points
PAGE_WIDTH = 595
PAGE_HEIGHT = 842

MARGIN_LEFT = 57  # ~20 mm
INDENT_LEFT = 85  # ~30 mm
MARGIN_TOP = 57
MARGIN_BOTTOM = 57
LINE_HEIGHT = 14  # ~5 mm

BACKGROUND = (0, 0, 0)
TITLE_COLOR = (1, 1, 1)
TEXT_COLOR = (224 / 255, 224 / 255, 224 / 255)
HEADING_COLOR = (77 / 255, 171 / 255, 247 / 255)


def display_percent(value: float) -> int:
    """Round a percentage for display, halves rounding up."""
    return int(value + 0.5)


def report_filename(student: Student) -> str:
    """File name for a student's report, e.g. 'Asha Patil_report.pdf'."""
    safe_name = re.sub(r'[\\/:*?"<>|]', "_", student.name).strip() or student.roll_no
    return f"{safe_name}_report.pdf"


@dataclass
class _Cursor:
    """Write position on the current page."""

    page: fitz.Page
    y: float


class _ReportWriter:
    def __init__(self, doc: fitz.Document):
        self.doc = doc
        self.cursor = _Cursor(page=self._new_page(), y=MARGIN_TOP)

    def _new_page(self) -> fitz.Page:
        page = self.doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        page.draw_rect(page.rect, color=None, fill=BACKGROUND)
        return page

    def line(
        self,
        text: str,
        fontsize: float = 12,
        color: tuple[float, float, float] = TEXT_COLOR,
        x: float = MARGIN_LEFT,
        advance: float = LINE_HEIGHT,
    ) -> None:
        if self.cursor.y > PAGE_HEIGHT - MARGIN_BOTTOM:
            self.cursor = _Cursor(page=self._new_page(), y=MARGIN_TOP)
        self.cursor.page.insert_text(
            (x, self.cursor.y), text, fontsize=fontsize, color=color
        )
        self.cursor.y += advance

    def gap(self, amount: float = LINE_HEIGHT) -> None:
        self.cursor.y += amount


def render_report(
    student: Student,
    subjects: list[Subject],
    records: list[CompletionRecord],
    credit_target: int = DEFAULT_CREDIT_TARGET,
    college_name: str | None = None,
) -> bytes:
    """Render the performance report of a student.

    Args:
        student: Student the report is about
        subjects: Full subject catalog
        records: The student's completion records
        credit_target: Credits required to graduate
        college_name: Printed under the title when given

    Returns:
        PDF document as bytes
    """
    summary = summarize(student, subjects, records, credit_target)
    done = completed_subject_ids(records)

    doc = fitz.open()
    doc.set_metadata(
        {
            "title": f"Student Performance Report - {student.name}",
            "subject": f"Roll No. {student.roll_no}",
            "creator": "credit-portal",
        }
    )
    writer = _ReportWriter(doc)

    writer.line("Student Performance Report", fontsize=18, color=TITLE_COLOR, advance=28)
    if college_name:
        writer.line(college_name, color=HEADING_COLOR, advance=LINE_HEIGHT * 2)
    writer.line(f"Name: {student.name}")
    writer.line(f"Roll No.: {student.roll_no}")
    writer.line(f"Department: {student.department}")
    writer.line(f"Year: {student.year_of_study}")
    writer.line(f"Total Credits: {summary.total_credits} / {credit_target}")
    writer.gap()

    for semester in SEMESTERS:
        figures = summary.get_semester(semester)
        writer.line(f"Semester {semester}", color=HEADING_COLOR)
        writer.line(f"Progress: {display_percent(figures.progress)}%")
        writer.line(f"Credits: {figures.credits_earned}")
        for subject in subjects:
            if subject.semester != semester:
                continue
            status = " (Completed)" if subject.subject_id in done else ""
            writer.line(f"{subject.code}: {subject.name}{status}", x=INDENT_LEFT)
        writer.gap()

    data = doc.tobytes()
    pages = doc.page_count
    doc.close()

    logger.info(
        "report.rendered",
        roll_no=student.roll_no,
        pages=pages,
        total_credits=summary.total_credits,
    )
    return data
