"""Progress and credit computation.

All functions are pure and stateless: they take the latest snapshot of the
subject catalog and a student's completion records and recompute from
scratch. Percentages are returned unrounded; rounding is a display concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from credit_portal.core.eligibility import accessible_semesters
from credit_portal.core.lock import is_locked
from credit_portal.core.models import (
    DEFAULT_CREDIT_TARGET,
    SEMESTERS,
    CompletionRecord,
    Student,
    Subject,
)


def completed_subject_ids(
    records: Iterable[CompletionRecord], semester: int | None = None
) -> set[int]:
    """Distinct subject ids with at least one completed record.

    Args:
        records: Completion records of one student
        semester: Restrict to one semester (None for all)
    """
    return {
        r.subject_id
        for r in records
        if r.completed and (semester is None or r.semester == semester)
    }


def semester_progress(
    subjects: Iterable[Subject],
    records: Iterable[CompletionRecord],
    semester: int,
) -> float:
    """Percentage of the semester's subjects that are completed.

    Returns:
        Value in [0, 100]; 0 when the semester has no subjects
    """
    semester_ids = {s.subject_id for s in subjects if s.semester == semester}
    if not semester_ids:
        return 0.0

    done = completed_subject_ids(records, semester) & semester_ids
    return min(len(done) / len(semester_ids) * 100, 100.0)


def semester_credits(
    subjects: Iterable[Subject],
    records: Iterable[CompletionRecord],
    semester: int,
) -> int:
    """Credits earned within one semester, each subject counted once."""
    done = completed_subject_ids(records, semester)
    return sum(s.credits for s in subjects if s.semester == semester and s.subject_id in done)


def total_credits(
    subjects: Iterable[Subject], records: Iterable[CompletionRecord]
) -> int:
    """Credits earned across all semesters, each subject counted once.

    Records referencing subjects missing from the catalog contribute nothing.
    """
    done = completed_subject_ids(records)
    return sum(s.credits for s in subjects if s.subject_id in done)


@dataclass
class SemesterSummary:
    """Computed figures for one semester."""

    semester: int
    progress: float
    credits_earned: int
    subject_count: int
    completed_count: int
    locked: bool
    accessible: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "semester": self.semester,
            "progress": self.progress,
            "credits_earned": self.credits_earned,
            "subject_count": self.subject_count,
            "completed_count": self.completed_count,
            "locked": self.locked,
            "accessible": self.accessible,
        }


@dataclass
class ProgressSummary:
    """Everything a dashboard or report needs for one student."""

    roll_no: str
    year_of_study: str
    total_credits: int
    credit_target: int = DEFAULT_CREDIT_TARGET
    accessible_semesters: list[int] = field(default_factory=list)
    semesters: list[SemesterSummary] = field(default_factory=list)
    completed_subject_ids: list[int] = field(default_factory=list)

    def get_semester(self, semester: int) -> SemesterSummary | None:
        """Get the summary of one semester."""
        for summary in self.semesters:
            if summary.semester == semester:
                return summary
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "roll_no": self.roll_no,
            "year_of_study": self.year_of_study,
            "total_credits": self.total_credits,
            "credit_target": self.credit_target,
            "accessible_semesters": self.accessible_semesters,
            "semesters": [s.to_dict() for s in self.semesters],
            "completed_subject_ids": self.completed_subject_ids,
        }


def summarize(
    student: Student,
    subjects: list[Subject],
    records: list[CompletionRecord],
    credit_target: int = DEFAULT_CREDIT_TARGET,
) -> ProgressSummary:
    """Build a full progress summary from a snapshot.

    Args:
        student: The student the records belong to
        subjects: Full subject catalog
        records: The student's completion records
        credit_target: Credits required to graduate

    Returns:
        ProgressSummary covering semesters 1..8
    """
    allowed = accessible_semesters(student.year_of_study)
    semesters = []
    for semester in SEMESTERS:
        semester_ids = {s.subject_id for s in subjects if s.semester == semester}
        done = completed_subject_ids(records, semester) & semester_ids
        semesters.append(
            SemesterSummary(
                semester=semester,
                progress=semester_progress(subjects, records, semester),
                credits_earned=semester_credits(subjects, records, semester),
                subject_count=len(semester_ids),
                completed_count=len(done),
                locked=is_locked(records, semester),
                accessible=semester in allowed,
            )
        )

    return ProgressSummary(
        roll_no=student.roll_no,
        year_of_study=student.year_of_study,
        total_credits=total_credits(subjects, records),
        credit_target=credit_target,
        accessible_semesters=allowed,
        semesters=semesters,
        completed_subject_ids=sorted(completed_subject_ids(records)),
    )
