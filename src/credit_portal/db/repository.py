"""SQLite implementation of the progress store.

Provides CRUD operations for students, teachers, subjects and
student_subjects, and publishes an invalidate signal on the change feed
once a write affecting a student has been committed.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Generator

import structlog

from credit_portal.core.errors import (
    DuplicateAccountError,
    NotFoundError,
    SemesterMismatchError,
    TransientIOError,
)
from credit_portal.core.models import CompletionRecord, Student, Subject, Teacher
from credit_portal.core.notifications import ChangeFeed
from credit_portal.db.database import get_db, init_db

logger = structlog.get_logger(__name__)


class SqliteStore:
    """Progress store backed by a local SQLite file."""

    def __init__(self, db_path: Path, feed: ChangeFeed | None = None):
        self.db_path = db_path
        self.feed = feed or ChangeFeed()

    @classmethod
    def open(cls, db_path: Path, feed: ChangeFeed | None = None) -> SqliteStore:
        """Initialize the schema (idempotent) and return a store."""
        init_db(db_path)
        return cls(db_path, feed)

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            with get_db(self.db_path) as conn:
                yield conn
        except sqlite3.OperationalError as e:
            logger.warning("store.io_error", path=str(self.db_path), error=str(e))
            raise TransientIOError(f"Database unavailable: {e}") from e

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def fetch_student(self, roll_no: str) -> Student | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM students WHERE roll_no = ?", (roll_no,)
            ).fetchone()

        if row is None:
            return None
        return _row_to_student(row)

    def list_students(self) -> list[Student]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM students ORDER BY roll_no"
            ).fetchall()

        return [_row_to_student(row) for row in rows]

    def insert_student(self, student: Student) -> None:
        """Insert a new student.

        Raises:
            DuplicateAccountError: If the roll number already exists
        """
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO students (
                        roll_no, student_name, department, year_of_study, password_hash
                    ) VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        student.roll_no,
                        student.name,
                        student.department,
                        student.year_of_study,
                        student.password_hash,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateAccountError("student", student.roll_no) from e

        logger.debug("students.inserted", roll_no=student.roll_no)

    def fetch_teacher(self, teacher_id: str) -> Teacher | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM teachers WHERE teacher_id = ?", (teacher_id,)
            ).fetchone()

        if row is None:
            return None
        return Teacher(
            teacher_id=row["teacher_id"],
            name=row["teacher_name"],
            department=row["department"],
            password_hash=row["password_hash"],
        )

    def insert_teacher(self, teacher: Teacher) -> None:
        """Insert a new teacher.

        Raises:
            DuplicateAccountError: If the teacher id already exists
        """
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO teachers (teacher_id, teacher_name, department, password_hash)
                    VALUES (?, ?, ?, ?)
                    """,
                    (teacher.teacher_id, teacher.name, teacher.department, teacher.password_hash),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateAccountError("teacher", teacher.teacher_id) from e

        logger.debug("teachers.inserted", teacher_id=teacher.teacher_id)

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    def fetch_subjects(self) -> list[Subject]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM subjects ORDER BY semester, subject_code"
            ).fetchall()

        return [_row_to_subject(row) for row in rows]

    def fetch_subject(self, subject_id: int) -> Subject | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM subjects WHERE id = ?", (subject_id,)
            ).fetchone()

        if row is None:
            return None
        return _row_to_subject(row)

    def insert_subject(self, subject: Subject) -> Subject:
        """Insert a catalog subject, or update it if (semester, code) exists.

        The subject_id of the argument is ignored; the stored id is returned.
        """
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO subjects (semester, subject_code, subject_name, mode_of_study, credits)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(semester, subject_code) DO UPDATE SET
                    subject_name = excluded.subject_name,
                    mode_of_study = excluded.mode_of_study,
                    credits = excluded.credits
                """,
                (
                    subject.semester,
                    subject.code,
                    subject.name,
                    subject.mode_of_study,
                    subject.credits,
                ),
            )
            row = conn.execute(
                "SELECT * FROM subjects WHERE semester = ? AND subject_code = ?",
                (subject.semester, subject.code),
            ).fetchone()

        logger.debug("subjects.upserted", code=subject.code, semester=subject.semester)
        return _row_to_subject(row)

    # -------------------------------------------------------------------------
    # Completion records
    # -------------------------------------------------------------------------

    def fetch_completion_records(self, roll_no: str) -> list[CompletionRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM student_subjects WHERE roll_no = ? ORDER BY semester, subject_id",
                (roll_no,),
            ).fetchall()

        return [_row_to_record(row) for row in rows]

    def upsert_completion_record(
        self,
        roll_no: str,
        subject_id: int,
        semester: int,
        completed: bool,
        saved: bool,
    ) -> CompletionRecord:
        """Create or update the record of (roll_no, subject_id).

        The saved flag never goes back to false once set.

        Raises:
            NotFoundError: If the student or subject does not exist
            SemesterMismatchError: If semester differs from the subject's
        """
        with self._connect() as conn:
            subject_row = conn.execute(
                "SELECT semester FROM subjects WHERE id = ?", (subject_id,)
            ).fetchone()
            if subject_row is None:
                raise NotFoundError("subject", subject_id)
            if subject_row["semester"] != semester:
                raise SemesterMismatchError(subject_id, subject_row["semester"], semester)

            try:
                conn.execute(
                    """
                    INSERT INTO student_subjects (roll_no, subject_id, semester, completed, saved)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(roll_no, subject_id) DO UPDATE SET
                        completed = excluded.completed,
                        saved = MAX(student_subjects.saved, excluded.saved),
                        updated_at = datetime('now')
                    """,
                    (roll_no, subject_id, semester, int(completed), int(saved)),
                )
            except sqlite3.IntegrityError as e:
                raise NotFoundError("student", roll_no) from e

            row = conn.execute(
                "SELECT * FROM student_subjects WHERE roll_no = ? AND subject_id = ?",
                (roll_no, subject_id),
            ).fetchone()

        record = _row_to_record(row)
        logger.debug(
            "student_subjects.upserted",
            roll_no=roll_no,
            subject_id=subject_id,
            completed=record.completed,
        )
        self.feed.publish(roll_no)
        return record

    def mark_semester_saved(self, roll_no: str, semester: int) -> int:
        """Set saved on all of a semester's records in a single statement."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE student_subjects
                SET saved = 1, updated_at = datetime('now')
                WHERE roll_no = ? AND semester = ? AND saved = 0
                """,
                (roll_no, semester),
            )
            changed = cursor.rowcount

        logger.debug(
            "student_subjects.saved", roll_no=roll_no, semester=semester, changed=changed
        )
        if changed:
            self.feed.publish(roll_no)
        return changed

    def subscribe_to_changes(
        self, roll_no: str, on_change: Callable[[str], None]
    ) -> Callable[[], None]:
        return self.feed.subscribe(roll_no, on_change)


def _row_to_student(row) -> Student:
    """Convert database row to Student."""
    return Student(
        roll_no=row["roll_no"],
        name=row["student_name"],
        department=row["department"],
        year_of_study=row["year_of_study"],
        password_hash=row["password_hash"],
    )


def _row_to_subject(row) -> Subject:
    """Convert database row to Subject."""
    return Subject(
        subject_id=row["id"],
        semester=row["semester"],
        code=row["subject_code"],
        name=row["subject_name"],
        mode_of_study=row["mode_of_study"],
        credits=row["credits"],
    )


def _row_to_record(row) -> CompletionRecord:
    """Convert database row to CompletionRecord."""
    return CompletionRecord(
        record_id=row["id"],
        roll_no=row["roll_no"],
        subject_id=row["subject_id"],
        semester=row["semester"],
        completed=bool(row["completed"]),
        saved=bool(row["saved"]),
    )
