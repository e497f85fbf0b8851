"""Domain entities for the credit portal.

Entities mirror the rows kept by the backing store:
- students / teachers: accounts created at signup
- subjects: read-only catalog, one row per subject per semester
- student_subjects: completion records, created lazily on first toggle
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Semesters 1..8 in order
SEMESTERS: tuple[int, ...] = tuple(range(1, 9))

# Credits required to graduate (shown as "N / 162")
DEFAULT_CREDIT_TARGET = 162


class YearOfStudy(str, Enum):
    """Declared year of study of a student."""

    FIRST = "First"
    SECOND = "Second"
    THIRD = "Third"
    FOURTH = "Fourth"

    @classmethod
    def parse(cls, value: Any) -> YearOfStudy | None:
        """Return the matching member, or None for unrecognized values."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        return None


@dataclass
class Student:
    """A student account."""

    roll_no: str
    name: str
    department: str
    year_of_study: str
    password_hash: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (password hash excluded)."""
        return {
            "roll_no": self.roll_no,
            "name": self.name,
            "department": self.department,
            "year_of_study": self.year_of_study,
        }


@dataclass
class Teacher:
    """A teacher account."""

    teacher_id: str
    name: str
    department: str
    password_hash: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (password hash excluded)."""
        return {
            "teacher_id": self.teacher_id,
            "name": self.name,
            "department": self.department,
        }


@dataclass(frozen=True)
class Subject:
    """A catalog subject taught in one semester."""

    subject_id: int
    semester: int
    code: str
    name: str
    mode_of_study: str
    credits: int

    def __post_init__(self):
        if self.semester not in SEMESTERS:
            raise ValueError(f"Semester out of range: {self.semester}")
        if self.credits <= 0:
            raise ValueError(f"Credits must be positive: {self.credits}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "subject_id": self.subject_id,
            "semester": self.semester,
            "code": self.code,
            "name": self.name,
            "mode_of_study": self.mode_of_study,
            "credits": self.credits,
        }


@dataclass(frozen=True)
class CompletionRecord:
    """Whether a student completed a subject, and whether it is locked."""

    record_id: int
    roll_no: str
    subject_id: int
    semester: int
    completed: bool
    saved: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "record_id": self.record_id,
            "roll_no": self.roll_no,
            "subject_id": self.subject_id,
            "semester": self.semester,
            "completed": self.completed,
            "saved": self.saved,
        }
