"""Fixtures for F2 tests - SQLite store, catalog and accounts."""

import pytest

from credit_portal.core.models import Student, Subject
from credit_portal.db.repository import SqliteStore


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "db" / "credits.db"


@pytest.fixture
def sqlite_store(db_path):
    """Fresh store with schema initialized."""
    return SqliteStore.open(db_path)


@pytest.fixture
def seeded_store(sqlite_store):
    """Store with two semester-1 subjects, one semester-2 subject and a student."""
    for code, semester, credits in [("FEC101", 1, 4), ("FEC102", 1, 3), ("FEC201", 2, 4)]:
        sqlite_store.insert_subject(
            Subject(
                subject_id=0,
                semester=semester,
                code=code,
                name=f"Subject {code}",
                mode_of_study="Theory",
                credits=credits,
            )
        )
    sqlite_store.insert_student(
        Student(
            roll_no="VU1F01",
            name="Asha Patil",
            department="Computer",
            year_of_study="First",
            password_hash="x",
        )
    )
    return sqlite_store


@pytest.fixture
def subject_ids(seeded_store):
    """Map of subject code to stored id."""
    return {s.code: s.subject_id for s in seeded_store.fetch_subjects()}
