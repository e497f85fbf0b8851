"""Fixtures for F1 tests - domain core.

MemoryStore is an in-memory stand-in for the progress store so the core
can be exercised without SQLite.
"""

from dataclasses import replace
from typing import Callable

import pytest

from credit_portal.core.models import CompletionRecord, Student, Subject, Teacher
from credit_portal.core.notifications import ChangeFeed
from credit_portal.core.session import Role, UserSession


class MemoryStore:
    """Dict-backed progress store that counts writes."""

    def __init__(self, subjects=(), students=()):
        self.subjects: dict[int, Subject] = {s.subject_id: s for s in subjects}
        self.students: dict[str, Student] = {s.roll_no: s for s in students}
        self.teachers: dict[str, Teacher] = {}
        self.records: list[CompletionRecord] = []
        self.feed = ChangeFeed()
        self.writes = 0
        self._next_id = 1

    def fetch_student(self, roll_no):
        return self.students.get(roll_no)

    def fetch_teacher(self, teacher_id):
        return self.teachers.get(teacher_id)

    def list_students(self):
        return sorted(self.students.values(), key=lambda s: s.roll_no)

    def fetch_subjects(self):
        return list(self.subjects.values())

    def fetch_subject(self, subject_id):
        return self.subjects.get(subject_id)

    def fetch_completion_records(self, roll_no):
        return [r for r in self.records if r.roll_no == roll_no]

    def upsert_completion_record(self, roll_no, subject_id, semester, completed, saved):
        self.writes += 1
        for i, record in enumerate(self.records):
            if record.roll_no == roll_no and record.subject_id == subject_id:
                updated = replace(record, completed=completed, saved=record.saved or saved)
                self.records[i] = updated
                self.feed.publish(roll_no)
                return updated

        record = CompletionRecord(
            record_id=self._next_id,
            roll_no=roll_no,
            subject_id=subject_id,
            semester=semester,
            completed=completed,
            saved=saved,
        )
        self._next_id += 1
        self.records.append(record)
        self.feed.publish(roll_no)
        return record

    def mark_semester_saved(self, roll_no, semester):
        self.writes += 1
        changed = 0
        for i, record in enumerate(self.records):
            if record.roll_no == roll_no and record.semester == semester and not record.saved:
                self.records[i] = replace(record, saved=True)
                changed += 1
        if changed:
            self.feed.publish(roll_no)
        return changed

    def subscribe_to_changes(self, roll_no, on_change: Callable[[str], None]):
        return self.feed.subscribe(roll_no, on_change)

    def insert_student(self, student):
        self.students[student.roll_no] = student

    def insert_teacher(self, teacher):
        self.teachers[teacher.teacher_id] = teacher

    def insert_subject(self, subject):
        self.subjects[subject.subject_id] = subject
        return subject

    def add_record(self, subject_id, semester, completed=True, saved=False, roll_no="VU1F01"):
        """Insert a raw record, bypassing the lock machine (for duplicates)."""
        record = CompletionRecord(
            record_id=self._next_id,
            roll_no=roll_no,
            subject_id=subject_id,
            semester=semester,
            completed=completed,
            saved=saved,
        )
        self._next_id += 1
        self.records.append(record)
        return record


def make_subject(subject_id, semester, credits, code=None):
    return Subject(
        subject_id=subject_id,
        semester=semester,
        code=code or f"SUB{subject_id:03d}",
        name=f"Subject {subject_id}",
        mode_of_study="Theory",
        credits=credits,
    )


@pytest.fixture
def example_subjects():
    """Two semester-1 subjects worth 4 and 3 credits."""
    return [make_subject(1, 1, 4), make_subject(2, 1, 3)]


@pytest.fixture
def student():
    return Student(roll_no="VU1F01", name="Asha Patil", department="Computer", year_of_study="First")


@pytest.fixture
def store(example_subjects, student):
    return MemoryStore(
        subjects=example_subjects + [make_subject(3, 3, 4)],
        students=[student],
    )


@pytest.fixture
def student_session():
    return UserSession(role=Role.STUDENT, user_id="VU1F01")


@pytest.fixture
def teacher_session():
    return UserSession(role=Role.TEACHER, user_id="T001")
