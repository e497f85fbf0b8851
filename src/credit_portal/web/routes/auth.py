"""Signup, login and logout endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from credit_portal.config.app_config import AppConfig
from credit_portal.core.auth import authenticate, signup_student, signup_teacher
from credit_portal.core.session import Role, UserSession
from credit_portal.db.repository import SqliteStore
from credit_portal.web.deps import (
    get_config,
    get_current_session,
    get_session_manager,
    get_store,
)
from credit_portal.web.schemas import (
    LoginRequest,
    LoginResponse,
    LogoutAllResponse,
    SessionResponse,
    SignupRequest,
    StudentResponse,
    TeacherResponse,
)
from credit_portal.web.sessions import SessionManager

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=StudentResponse | TeacherResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup(
    request: SignupRequest,
    store: SqliteStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
) -> StudentResponse | TeacherResponse:
    """Create a student or teacher account."""
    scheme = config.auth.password_scheme

    if request.role is Role.TEACHER:
        teacher = signup_teacher(
            store,
            teacher_id=request.user_id,
            name=request.name,
            department=request.department,
            password=request.password,
            scheme=scheme,
        )
        return TeacherResponse.model_validate(teacher)

    try:
        student = signup_student(
            store,
            roll_no=request.user_id,
            name=request.name,
            department=request.department,
            year_of_study=request.year_of_study or "",
            password=request.password,
            scheme=scheme,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return StudentResponse.model_validate(student)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    store: SqliteStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
    sessions: SessionManager = Depends(get_session_manager),
) -> LoginResponse:
    """Verify credentials and open a session."""
    session = authenticate(
        store,
        role=request.role,
        user_id=request.user_id,
        password=request.password,
        scheme=config.auth.password_scheme,
    )
    await sessions.open_session(session)

    return LoginResponse(token=session.token, role=session.role, user_id=session.user_id)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    session: UserSession = Depends(get_current_session),
    sessions: SessionManager = Depends(get_session_manager),
) -> None:
    """Close the current session."""
    await sessions.close_session(session.token)


@router.post("/logout-all", response_model=LogoutAllResponse)
async def logout_all(
    session: UserSession = Depends(get_current_session),
    sessions: SessionManager = Depends(get_session_manager),
) -> LogoutAllResponse:
    """Close every open session of the current account, this one included."""
    closed = await sessions.close_user_sessions(session.role, session.user_id)
    return LogoutAllResponse(closed=closed)


@router.get("/me", response_model=SessionResponse)
async def me(session: UserSession = Depends(get_current_session)) -> SessionResponse:
    """Describe the current session."""
    return SessionResponse(
        role=session.role,
        user_id=session.user_id,
        created_at=session.created_at,
    )
