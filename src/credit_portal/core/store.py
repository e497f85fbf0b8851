"""Data-access contract consumed by the domain core.

The core never talks to a database directly. Any backend that provides
these calls (the bundled SQLite store, a hosted service client, a test
double) can be plugged in.
"""

from __future__ import annotations

from typing import Callable, Protocol

from credit_portal.core.models import CompletionRecord, Student, Subject, Teacher

Unsubscribe = Callable[[], None]


class ProgressStore(Protocol):
    """Storage collaborator for students, subjects and completion records."""

    def fetch_student(self, roll_no: str) -> Student | None:
        """Return the student, or None when absent."""
        ...

    def fetch_teacher(self, teacher_id: str) -> Teacher | None:
        ...

    def list_students(self) -> list[Student]:
        ...

    def fetch_subjects(self) -> list[Subject]:
        """Return the full, unfiltered subject catalog."""
        ...

    def fetch_subject(self, subject_id: int) -> Subject | None:
        ...

    def fetch_completion_records(self, roll_no: str) -> list[CompletionRecord]:
        """Return every completion record of a student."""
        ...

    def upsert_completion_record(
        self,
        roll_no: str,
        subject_id: int,
        semester: int,
        completed: bool,
        saved: bool,
    ) -> CompletionRecord:
        """Create or update the record for (roll_no, subject_id)."""
        ...

    def mark_semester_saved(self, roll_no: str, semester: int) -> int:
        """Set saved=true on all existing records of the semester, atomically.

        Returns:
            Number of records changed
        """
        ...

    def subscribe_to_changes(
        self, roll_no: str, on_change: Callable[[str], None]
    ) -> Unsubscribe:
        """Invoke on_change after any committed write affecting the student."""
        ...

    def insert_student(self, student: Student) -> None:
        ...

    def insert_teacher(self, teacher: Teacher) -> None:
        ...

    def insert_subject(self, subject: Subject) -> Subject:
        ...
