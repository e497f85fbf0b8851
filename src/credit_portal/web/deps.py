"""Request dependencies: store, tracker and the caller's session."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from credit_portal.config.app_config import AppConfig
from credit_portal.core.session import UserSession
from credit_portal.core.tracker import ProgressTracker
from credit_portal.db.repository import SqliteStore
from credit_portal.web.sessions import SessionManager

bearer_scheme = HTTPBearer(auto_error=False)


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_store(request: Request) -> SqliteStore:
    return request.app.state.store


def get_tracker(request: Request) -> ProgressTracker:
    return request.app.state.tracker


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


async def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    sessions: SessionManager = Depends(get_session_manager),
) -> UserSession:
    """Resolve the bearer token to an open session, or fail with 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = await sessions.get_session(credentials.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or invalid",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
