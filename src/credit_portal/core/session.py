"""Signed-in user context.

A UserSession is created at login and passed explicitly to every
operation that needs identity. There is no ambient current user.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Account kinds."""

    STUDENT = "student"
    TEACHER = "teacher"


def generate_token() -> str:
    """Generate an opaque session token."""
    return secrets.token_urlsafe(32)


@dataclass
class UserSession:
    """Identity of a signed-in student or teacher."""

    role: Role
    user_id: str
    token: str = field(default_factory=generate_token)
    created_at: str = ""
    last_seen_at: str = ""

    def __post_init__(self):
        now = datetime.now(timezone.utc).isoformat()
        if not self.created_at:
            self.created_at = now
        if not self.last_seen_at:
            self.last_seen_at = self.created_at

    @property
    def is_teacher(self) -> bool:
        return self.role is Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role is Role.STUDENT

    def touch(self) -> None:
        """Record activity on the session."""
        self.last_seen_at = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "user_id": self.user_id,
            "created_at": self.created_at,
        }
