"""Login session management for the Web API.

Sessions are opened at login, looked up on every request from the bearer
token, and closed at logout or after a period of inactivity.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import structlog

from credit_portal.core.session import Role, UserSession

logger = structlog.get_logger(__name__)


class SessionManager:
    """Holds the open sessions of the API process.

    Thread-safe session management guarded by an asyncio lock.
    """

    def __init__(self, ttl_minutes: int = 480):
        self._sessions: dict[str, UserSession] = {}
        self._lock = asyncio.Lock()
        self.ttl = timedelta(minutes=ttl_minutes)

    def _is_expired(self, session: UserSession, now: datetime) -> bool:
        last_seen = datetime.fromisoformat(session.last_seen_at)
        return now - last_seen > self.ttl

    def _prune_expired(self, now: datetime) -> int:
        expired = [t for t, s in self._sessions.items() if self._is_expired(s, now)]
        for token in expired:
            self._sessions.pop(token)
        return len(expired)

    async def open_session(self, session: UserSession) -> UserSession:
        """Register a session created by a successful login.

        Idle sessions of any user are dropped at the same time.
        """
        now = datetime.now(timezone.utc)
        async with self._lock:
            pruned = self._prune_expired(now)
            self._sessions[session.token] = session

        if pruned:
            logger.info("sessions_pruned", count=pruned)

        logger.info("session_opened", role=session.role.value, user_id=session.user_id)
        return session

    async def get_session(self, token: str) -> UserSession | None:
        """Get a live session by token, dropping it if it has expired."""
        now = datetime.now(timezone.utc)
        async with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if self._is_expired(session, now):
                self._sessions.pop(token, None)
                logger.info("session_expired", user_id=session.user_id)
                return None
            session.touch()
            return session

    async def close_session(self, token: str) -> bool:
        """Close a session.

        Returns:
            True if session was closed, False if not found
        """
        async with self._lock:
            session = self._sessions.pop(token, None)

        if session is None:
            return False

        logger.info("session_closed", role=session.role.value, user_id=session.user_id)
        return True

    async def close_user_sessions(self, role: Role, user_id: str) -> int:
        """Close every session of one account."""
        async with self._lock:
            tokens = [
                t for t, s in self._sessions.items() if s.role is role and s.user_id == user_id
            ]
            for token in tokens:
                self._sessions.pop(token)
        return len(tokens)

    async def get_session_count(self) -> int:
        """Get count of open sessions."""
        async with self._lock:
            return len(self._sessions)
