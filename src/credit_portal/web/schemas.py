"""Pydantic schemas for Web API.

Serialization models for accounts, subjects, completion records and
progress summaries.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from credit_portal.core.session import Role


# =============================================================================
# AUTH SCHEMAS
# =============================================================================


class SignupRequest(BaseModel):
    """Request body for creating a student or teacher account."""

    role: Role = Role.STUDENT
    user_id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    department: str = Field(..., min_length=1, max_length=100)
    year_of_study: str | None = None
    password: str = Field(..., min_length=1, max_length=200)


class LoginRequest(BaseModel):
    """Request body for login."""

    role: Role = Role.STUDENT
    user_id: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Response for a successful login."""

    token: str
    role: Role
    user_id: str


class LogoutAllResponse(BaseModel):
    """Response after closing every session of the caller."""

    closed: int


class SessionResponse(BaseModel):
    """Response describing the current session."""

    role: Role
    user_id: str
    created_at: str


# =============================================================================
# ACCOUNT SCHEMAS
# =============================================================================


class StudentResponse(BaseModel):
    """Response for a student."""

    roll_no: str
    name: str
    department: str
    year_of_study: str

    model_config = {"from_attributes": True}


class StudentListResponse(BaseModel):
    """Response for list of students."""

    students: list[StudentResponse]
    count: int


class TeacherResponse(BaseModel):
    """Response for a teacher."""

    teacher_id: str
    name: str
    department: str

    model_config = {"from_attributes": True}


# =============================================================================
# CATALOG & RECORD SCHEMAS
# =============================================================================


class SubjectResponse(BaseModel):
    """Response for a catalog subject."""

    subject_id: int
    semester: int
    code: str
    name: str
    mode_of_study: str
    credits: int

    model_config = {"from_attributes": True}


class SubjectListResponse(BaseModel):
    """Response for the subject catalog."""

    subjects: list[SubjectResponse]
    count: int


class RecordResponse(BaseModel):
    """Response for a completion record."""

    record_id: int
    roll_no: str
    subject_id: int
    semester: int
    completed: bool
    saved: bool

    model_config = {"from_attributes": True}


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class SemesterProgressResponse(BaseModel):
    """Computed figures for one semester."""

    semester: int
    progress: float = Field(..., ge=0, le=100)
    credits_earned: int
    subject_count: int
    completed_count: int
    locked: bool
    accessible: bool


class ProgressResponse(BaseModel):
    """Full progress of a student."""

    roll_no: str
    year_of_study: str
    total_credits: int
    credit_target: int
    accessible_semesters: list[int]
    semesters: list[SemesterProgressResponse]
    completed_subject_ids: list[int]


class SaveRequest(BaseModel):
    """Request to lock a semester. Saving cannot be undone."""

    confirm: bool = False


class SaveResponse(BaseModel):
    """Response after locking a semester."""

    semester: int
    records_saved: int
    locked: bool


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
