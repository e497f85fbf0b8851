"""SQLite database connection and schema management.

Provides connection management and schema initialization for the portal
store: students, teachers, the subject catalog and completion records.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/credits.db")


def init_db(db_path: Path | None = None) -> Path:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/credits.db

    Returns:
        The path that was initialized
    """
    path = db_path or DEFAULT_DB_PATH

    with get_db(path) as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(path))
    return path


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    The block runs as one transaction: committed on success, rolled back
    on any exception.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db(path) as conn:
            rows = conn.execute("SELECT * FROM subjects").fetchall()
    """
    path = db_path or DEFAULT_DB_PATH

    # Ensure directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path, timeout=5.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS students (
            roll_no TEXT PRIMARY KEY,
            student_name TEXT NOT NULL,
            department TEXT NOT NULL,
            year_of_study TEXT NOT NULL
                CHECK(year_of_study IN ('First', 'Second', 'Third', 'Fourth')),
            password_hash TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS teachers (
            teacher_id TEXT PRIMARY KEY,
            teacher_name TEXT NOT NULL,
            department TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- Catalog: read-only for the portal once seeded
        CREATE TABLE IF NOT EXISTS subjects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            semester INTEGER NOT NULL CHECK(semester BETWEEN 1 AND 8),
            subject_code TEXT NOT NULL,
            subject_name TEXT NOT NULL,
            mode_of_study TEXT NOT NULL DEFAULT '',
            credits INTEGER NOT NULL CHECK(credits > 0),
            UNIQUE(semester, subject_code)
        );

        -- One row per (student, subject); semester is denormalized from subjects
        CREATE TABLE IF NOT EXISTS student_subjects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            roll_no TEXT NOT NULL REFERENCES students(roll_no) ON DELETE CASCADE,
            subject_id INTEGER NOT NULL REFERENCES subjects(id),
            semester INTEGER NOT NULL CHECK(semester BETWEEN 1 AND 8),
            completed INTEGER NOT NULL DEFAULT 0,
            saved INTEGER NOT NULL DEFAULT 0,
            updated_at TEXT NOT NULL DEFAULT (datetime('now')),
            UNIQUE(roll_no, subject_id)
        );

        CREATE INDEX IF NOT EXISTS idx_subjects_semester ON subjects(semester);
        CREATE INDEX IF NOT EXISTS idx_student_subjects_roll_semester
            ON student_subjects(roll_no, semester);
        """
    )
