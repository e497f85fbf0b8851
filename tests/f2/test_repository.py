"""Tests for the SQLite progress store (F2)."""

import sqlite3

import pytest

from credit_portal.core.errors import (
    DuplicateAccountError,
    LockedSemesterError,
    NotFoundError,
    SemesterMismatchError,
    TransientIOError,
)
from credit_portal.core.lock import is_locked, save_semester, toggle_completion
from credit_portal.core.models import Student, Subject
from credit_portal.db.database import get_db, init_db
from credit_portal.db.repository import SqliteStore


class TestSchema:
    """Tests for schema initialization."""

    def test_init_creates_tables(self, db_path):
        init_db(db_path)
        with get_db(db_path) as conn:
            names = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
        assert {"students", "teachers", "subjects", "student_subjects"} <= names

    def test_init_is_idempotent(self, db_path):
        init_db(db_path)
        init_db(db_path)
        assert db_path.exists()

    def test_rejects_unknown_year(self, sqlite_store):
        with pytest.raises(sqlite3.IntegrityError):
            with get_db(sqlite_store.db_path) as conn:
                conn.execute(
                    "INSERT INTO students VALUES ('R1', 'N', 'D', 'Fifth', 'h', datetime('now'))"
                )


class TestAccounts:
    """Tests for student and teacher rows."""

    def test_fetch_student(self, seeded_store):
        student = seeded_store.fetch_student("VU1F01")
        assert student.name == "Asha Patil"
        assert student.year_of_study == "First"

    def test_fetch_missing_student(self, seeded_store):
        assert seeded_store.fetch_student("NOPE") is None

    def test_duplicate_student(self, seeded_store):
        with pytest.raises(DuplicateAccountError):
            seeded_store.insert_student(
                Student(
                    roll_no="VU1F01",
                    name="Other",
                    department="Civil",
                    year_of_study="Second",
                    password_hash="y",
                )
            )

    def test_list_students_sorted(self, seeded_store):
        seeded_store.insert_student(
            Student(roll_no="A001", name="B", department="C", year_of_study="Third", password_hash="h")
        )
        assert [s.roll_no for s in seeded_store.list_students()] == ["A001", "VU1F01"]


class TestCatalog:
    """Tests for subject rows."""

    def test_fetch_subjects_ordered(self, seeded_store):
        subjects = seeded_store.fetch_subjects()
        assert [(s.semester, s.code) for s in subjects] == [
            (1, "FEC101"),
            (1, "FEC102"),
            (2, "FEC201"),
        ]

    def test_insert_subject_updates_existing(self, seeded_store, subject_ids):
        updated = seeded_store.insert_subject(
            Subject(
                subject_id=0,
                semester=1,
                code="FEC101",
                name="Engineering Mathematics-I",
                mode_of_study="Theory",
                credits=5,
            )
        )
        assert updated.subject_id == subject_ids["FEC101"]
        assert seeded_store.fetch_subject(updated.subject_id).credits == 5
        assert len(seeded_store.fetch_subjects()) == 3


class TestCompletionRecords:
    """Tests for student_subjects rows."""

    def test_upsert_creates_then_updates(self, seeded_store, subject_ids):
        sid = subject_ids["FEC101"]
        first = seeded_store.upsert_completion_record("VU1F01", sid, 1, completed=True, saved=False)
        second = seeded_store.upsert_completion_record("VU1F01", sid, 1, completed=False, saved=False)

        assert first.record_id == second.record_id
        assert second.completed is False
        assert len(seeded_store.fetch_completion_records("VU1F01")) == 1

    def test_saved_never_resets(self, seeded_store, subject_ids):
        sid = subject_ids["FEC101"]
        seeded_store.upsert_completion_record("VU1F01", sid, 1, completed=True, saved=True)
        record = seeded_store.upsert_completion_record("VU1F01", sid, 1, completed=True, saved=False)
        assert record.saved is True

    def test_upsert_unknown_student(self, seeded_store, subject_ids):
        with pytest.raises(NotFoundError):
            seeded_store.upsert_completion_record(
                "GHOST", subject_ids["FEC101"], 1, completed=True, saved=False
            )

    def test_upsert_unknown_subject(self, seeded_store):
        with pytest.raises(NotFoundError):
            seeded_store.upsert_completion_record("VU1F01", 999, 1, completed=True, saved=False)

    def test_upsert_semester_must_match_subject(self, seeded_store, subject_ids):
        with pytest.raises(SemesterMismatchError):
            seeded_store.upsert_completion_record(
                "VU1F01", subject_ids["FEC201"], 1, completed=True, saved=False
            )
        assert seeded_store.fetch_completion_records("VU1F01") == []

    def test_mark_semester_saved_is_scoped(self, seeded_store, subject_ids):
        seeded_store.upsert_completion_record("VU1F01", subject_ids["FEC101"], 1, True, False)
        seeded_store.upsert_completion_record("VU1F01", subject_ids["FEC201"], 2, True, False)

        assert seeded_store.mark_semester_saved("VU1F01", 1) == 1

        saved = {r.semester: r.saved for r in seeded_store.fetch_completion_records("VU1F01")}
        assert saved == {1: True, 2: False}

    def test_mark_semester_saved_twice_changes_nothing(self, seeded_store, subject_ids):
        seeded_store.upsert_completion_record("VU1F01", subject_ids["FEC101"], 1, True, False)
        seeded_store.mark_semester_saved("VU1F01", 1)
        assert seeded_store.mark_semester_saved("VU1F01", 1) == 0


class TestLockMachineOnSqlite:
    """The state machine running against the real store."""

    def test_toggle_save_toggle(self, seeded_store, subject_ids):
        sid = subject_ids["FEC102"]
        toggle_completion(seeded_store, "VU1F01", sid, 1)
        save_semester(seeded_store, "VU1F01", 1)

        with pytest.raises(LockedSemesterError):
            toggle_completion(seeded_store, "VU1F01", sid, 1)

        records = seeded_store.fetch_completion_records("VU1F01")
        assert is_locked(records, 1)
        assert records[0].completed is True


class TestChangeSignals:
    """The store signals subscribers after committed writes."""

    def test_upsert_publishes(self, seeded_store, subject_ids):
        seen = []
        seeded_store.subscribe_to_changes("VU1F01", seen.append)

        seeded_store.upsert_completion_record("VU1F01", subject_ids["FEC101"], 1, True, False)

        assert seen == ["VU1F01"]

    def test_failed_write_does_not_publish(self, seeded_store):
        seen = []
        seeded_store.subscribe_to_changes("VU1F01", seen.append)

        with pytest.raises(NotFoundError):
            seeded_store.upsert_completion_record("VU1F01", 999, 1, True, False)

        assert seen == []

    def test_empty_save_does_not_publish(self, seeded_store):
        seen = []
        seeded_store.subscribe_to_changes("VU1F01", seen.append)
        seeded_store.mark_semester_saved("VU1F01", 1)
        assert seen == []

    def test_signal_sees_committed_data(self, seeded_store, subject_ids):
        """A subscriber re-fetching on the signal reads the new state."""
        observed = []

        def on_change(roll_no):
            observed.extend(seeded_store.fetch_completion_records(roll_no))

        seeded_store.subscribe_to_changes("VU1F01", on_change)
        seeded_store.upsert_completion_record("VU1F01", subject_ids["FEC101"], 1, True, False)

        assert len(observed) == 1
        assert observed[0].completed is True


class TestTransientErrors:
    """Tests for I/O failure translation."""

    def test_missing_schema_is_transient(self, tmp_path):
        """Querying a database without tables surfaces as TransientIOError."""
        store = SqliteStore(tmp_path / "empty.db")
        with pytest.raises(TransientIOError):
            store.fetch_subjects()
