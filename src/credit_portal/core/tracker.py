"""Progress operations on behalf of a signed-in user.

ProgressTracker ties the session, the eligibility resolver and the lock
state machine together:
- students read and edit only their own progress
- teachers read any student and may toggle on a student's behalf
- only students lock (save) a semester
- eligibility is re-checked before every write, whatever the UI showed
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from credit_portal.core.eligibility import can_access
from credit_portal.core.errors import (
    AccessDeniedError,
    NotFoundError,
    SemesterNotAccessibleError,
)
from credit_portal.core.lock import save_semester, toggle_completion
from credit_portal.core.models import DEFAULT_CREDIT_TARGET, CompletionRecord, Student
from credit_portal.core.progress import ProgressSummary, summarize
from credit_portal.core.session import UserSession

if TYPE_CHECKING:
    from credit_portal.core.store import ProgressStore

logger = structlog.get_logger(__name__)


class ProgressTracker:
    """Session-scoped entry point for progress reads and writes."""

    def __init__(self, store: ProgressStore, credit_target: int = DEFAULT_CREDIT_TARGET):
        self.store = store
        self.credit_target = credit_target

    def _authorize_read(self, session: UserSession, roll_no: str) -> None:
        if session.is_teacher:
            return
        if session.user_id != roll_no:
            raise AccessDeniedError(
                f"Student '{session.user_id}' cannot access roll no {roll_no}"
            )

    def _get_student(self, roll_no: str) -> Student:
        student = self.store.fetch_student(roll_no)
        if student is None:
            raise NotFoundError("student", roll_no)
        return student

    def _check_semester(self, student: Student, semester: int) -> None:
        if not can_access(student.year_of_study, semester):
            raise SemesterNotAccessibleError(
                student.roll_no, semester, student.year_of_study
            )

    def get_student(self, session: UserSession, roll_no: str) -> Student:
        """Get a student's profile."""
        self._authorize_read(session, roll_no)
        return self._get_student(roll_no)

    def list_students(self, session: UserSession) -> list[Student]:
        """List every student (teachers only)."""
        if not session.is_teacher:
            raise AccessDeniedError("Only teachers can list students")
        return self.store.list_students()

    def dashboard(self, session: UserSession, roll_no: str) -> ProgressSummary:
        """Compute the full progress summary from a fresh snapshot."""
        self._authorize_read(session, roll_no)
        student = self._get_student(roll_no)
        subjects = self.store.fetch_subjects()
        records = self.store.fetch_completion_records(roll_no)
        return summarize(student, subjects, records, self.credit_target)

    def toggle(self, session: UserSession, roll_no: str, subject_id: int) -> CompletionRecord:
        """Toggle completion of a subject for a student.

        Raises:
            AccessDeniedError: If a student targets another roll number
            NotFoundError: If the student or subject is absent
            SemesterNotAccessibleError: If the subject's semester is outside
                the student's year
            LockedSemesterError: If the semester is saved
        """
        self._authorize_read(session, roll_no)
        student = self._get_student(roll_no)

        subject = self.store.fetch_subject(subject_id)
        if subject is None:
            raise NotFoundError("subject", subject_id)
        self._check_semester(student, subject.semester)

        record = toggle_completion(self.store, roll_no, subject_id, subject.semester)
        logger.debug(
            "tracker.toggle",
            actor=session.user_id,
            role=session.role.value,
            roll_no=roll_no,
            subject_id=subject_id,
        )
        return record

    def save(self, session: UserSession, roll_no: str, semester: int) -> int:
        """Lock a semester. Confirmation must be obtained by the caller.

        Returns:
            Number of records marked saved

        Raises:
            AccessDeniedError: If the session is not the student themself
            SemesterNotAccessibleError: If the semester is outside the year
            SemesterAlreadySavedError: If the semester is already saved
        """
        if not session.is_student or session.user_id != roll_no:
            raise AccessDeniedError("Only the student can save their own progress")
        student = self._get_student(roll_no)
        self._check_semester(student, semester)
        return save_semester(self.store, roll_no, semester)
