"""Save/lock state machine for semesters.

Each (student, semester) pair is either Unsaved (initial) or Saved
(terminal). Saving is one-way: there is no unsave. Every mutation reads
the latest records from the store and checks the lock before writing.

Double save policy: a save on an already saved semester is rejected with
SemesterAlreadySavedError and performs no write.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

import structlog

from credit_portal.core.errors import (
    LockedSemesterError,
    NotFoundError,
    SemesterAlreadySavedError,
    SemesterMismatchError,
)
from credit_portal.core.models import CompletionRecord

if TYPE_CHECKING:
    from credit_portal.core.store import ProgressStore

logger = structlog.get_logger(__name__)


def is_locked(records: Iterable[CompletionRecord], semester: int) -> bool:
    """A semester is locked once any of its records is saved."""
    return any(r.semester == semester and r.saved for r in records)


def find_record(
    records: Iterable[CompletionRecord], subject_id: int, semester: int
) -> CompletionRecord | None:
    """Find the record for a subject in a semester."""
    for record in records:
        if record.subject_id == subject_id and record.semester == semester:
            return record
    return None


def toggle_completion(
    store: ProgressStore, roll_no: str, subject_id: int, semester: int
) -> CompletionRecord:
    """Flip the completed flag of a subject for a student.

    Args:
        store: Backing store
        roll_no: Student roll number
        subject_id: Catalog subject id
        semester: Semester the subject belongs to

    Returns:
        The record as persisted

    Raises:
        NotFoundError: If the subject is not in the catalog
        SemesterMismatchError: If the subject belongs to another semester
        LockedSemesterError: If the semester is saved (nothing is written)
    """
    subject = store.fetch_subject(subject_id)
    if subject is None:
        raise NotFoundError("subject", subject_id)
    if subject.semester != semester:
        raise SemesterMismatchError(subject_id, subject.semester, semester)

    records = store.fetch_completion_records(roll_no)
    if is_locked(records, semester):
        logger.info(
            "records.toggle_rejected",
            roll_no=roll_no,
            subject_id=subject_id,
            semester=semester,
        )
        raise LockedSemesterError(roll_no, semester)

    existing = find_record(records, subject_id, semester)
    if existing is None:
        completed, saved = True, False
    else:
        completed, saved = not existing.completed, existing.saved

    record = store.upsert_completion_record(
        roll_no, subject_id, semester, completed=completed, saved=saved
    )

    logger.info(
        "records.toggled",
        roll_no=roll_no,
        subject_id=subject_id,
        semester=semester,
        completed=record.completed,
    )
    return record


def save_semester(store: ProgressStore, roll_no: str, semester: int) -> int:
    """Lock a semester's existing records for a student.

    Records are only flagged, never created: subjects that were never
    toggled stay without a record.

    Returns:
        Number of records marked saved

    Raises:
        SemesterAlreadySavedError: If the semester is already saved
    """
    records = store.fetch_completion_records(roll_no)
    if is_locked(records, semester):
        raise SemesterAlreadySavedError(roll_no, semester)

    changed = store.mark_semester_saved(roll_no, semester)

    logger.info("semester.saved", roll_no=roll_no, semester=semester, records=changed)
    return changed
