"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- SqliteStore: the progress store used by the portal
- Subject catalog seeding
"""

from credit_portal.db.database import get_db, init_db
from credit_portal.db.repository import SqliteStore

__all__ = ["get_db", "init_db", "SqliteStore"]
