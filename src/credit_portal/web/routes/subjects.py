"""Subject catalog endpoints."""

from fastapi import APIRouter, Depends

from credit_portal.core.session import UserSession
from credit_portal.db.repository import SqliteStore
from credit_portal.web.deps import get_current_session, get_store
from credit_portal.web.schemas import SubjectListResponse, SubjectResponse

router = APIRouter(prefix="/api/subjects", tags=["subjects"])


@router.get("", response_model=SubjectListResponse)
async def list_subjects(
    semester: int | None = None,
    session: UserSession = Depends(get_current_session),
    store: SqliteStore = Depends(get_store),
) -> SubjectListResponse:
    """List the subject catalog, optionally for one semester."""
    subjects = store.fetch_subjects()
    if semester is not None:
        subjects = [s for s in subjects if s.semester == semester]

    return SubjectListResponse(
        subjects=[SubjectResponse.model_validate(s) for s in subjects],
        count=len(subjects),
    )
