"""Student progress endpoints."""

import asyncio
import json
from typing import AsyncGenerator

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import StreamingResponse

from credit_portal.config.app_config import AppConfig
from credit_portal.core.errors import NotFoundError
from credit_portal.core.notifications import LiveProgress
from credit_portal.core.progress import ProgressSummary
from credit_portal.core.session import UserSession
from credit_portal.core.tracker import ProgressTracker
from credit_portal.db.repository import SqliteStore
from credit_portal.report.pdf_report import render_report, report_filename
from credit_portal.web.deps import get_config, get_current_session, get_store, get_tracker
from credit_portal.web.schemas import (
    ProgressResponse,
    RecordResponse,
    SaveRequest,
    SaveResponse,
    StudentListResponse,
    StudentResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/students", tags=["students"])

# Seconds between keepalives on the event stream
KEEPALIVE_SECONDS = 30.0


def _to_progress_response(summary: ProgressSummary) -> ProgressResponse:
    return ProgressResponse.model_validate(summary.to_dict())


@router.get("", response_model=StudentListResponse)
async def list_students(
    session: UserSession = Depends(get_current_session),
    tracker: ProgressTracker = Depends(get_tracker),
) -> StudentListResponse:
    """List all students (teachers only)."""
    students = tracker.list_students(session)
    return StudentListResponse(
        students=[StudentResponse.model_validate(s) for s in students],
        count=len(students),
    )


@router.get("/{roll_no}", response_model=StudentResponse)
async def get_student(
    roll_no: str,
    session: UserSession = Depends(get_current_session),
    tracker: ProgressTracker = Depends(get_tracker),
) -> StudentResponse:
    """Get a student's profile."""
    return StudentResponse.model_validate(tracker.get_student(session, roll_no))


@router.get("/{roll_no}/progress", response_model=ProgressResponse)
async def get_progress(
    roll_no: str,
    session: UserSession = Depends(get_current_session),
    tracker: ProgressTracker = Depends(get_tracker),
) -> ProgressResponse:
    """Get per-semester progress and total credits."""
    return _to_progress_response(tracker.dashboard(session, roll_no))


@router.get("/{roll_no}/records", response_model=list[RecordResponse])
async def get_records(
    roll_no: str,
    session: UserSession = Depends(get_current_session),
    tracker: ProgressTracker = Depends(get_tracker),
    store: SqliteStore = Depends(get_store),
) -> list[RecordResponse]:
    """Get a student's raw completion records."""
    tracker.get_student(session, roll_no)
    return [RecordResponse.model_validate(r) for r in store.fetch_completion_records(roll_no)]


@router.post("/{roll_no}/subjects/{subject_id}/toggle", response_model=RecordResponse)
async def toggle_subject(
    roll_no: str,
    subject_id: int,
    session: UserSession = Depends(get_current_session),
    tracker: ProgressTracker = Depends(get_tracker),
) -> RecordResponse:
    """Mark a subject complete, or clear the mark."""
    record = tracker.toggle(session, roll_no, subject_id)
    return RecordResponse.model_validate(record)


@router.post("/{roll_no}/semesters/{semester}/save", response_model=SaveResponse)
async def save_semester(
    roll_no: str,
    semester: int,
    request: SaveRequest,
    session: UserSession = Depends(get_current_session),
    tracker: ProgressTracker = Depends(get_tracker),
) -> SaveResponse:
    """Lock a semester's progress. Requires confirm=true."""
    if not request.confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Saving semester {semester} cannot be undone; "
                "resend with confirm=true"
            ),
        )

    changed = tracker.save(session, roll_no, semester)
    summary = tracker.dashboard(session, roll_no)
    figures = summary.get_semester(semester)

    return SaveResponse(
        semester=semester,
        records_saved=changed,
        locked=figures.locked if figures else False,
    )


@router.get("/{roll_no}/report")
async def export_report(
    roll_no: str,
    session: UserSession = Depends(get_current_session),
    tracker: ProgressTracker = Depends(get_tracker),
    store: SqliteStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
) -> Response:
    """Download the PDF performance report of a student (teachers only)."""
    if not session.is_teacher:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only teachers can export reports",
        )

    student = tracker.get_student(session, roll_no)
    pdf = render_report(
        student,
        store.fetch_subjects(),
        store.fetch_completion_records(roll_no),
        credit_target=config.portal.credit_target,
        college_name=config.portal.college_name,
    )

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{report_filename(student)}"'
        },
    )


async def _event_generator(live: LiveProgress) -> AsyncGenerator[str, None]:
    """Generate SSE events: a fresh summary on every change signal."""
    async with live:
        try:
            summary = live.snapshot()
            yield f"event: progress\ndata: {json.dumps(summary.to_dict())}\n\n"

            while True:
                try:
                    summary = await live.next_summary(timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield "event: keepalive\ndata: ping\n\n"
                    continue

                yield f"event: progress\ndata: {json.dumps(summary.to_dict())}\n\n"
        except NotFoundError as e:
            logger.info("event_stream_closed", roll_no=live.roll_no, reason=str(e))
            yield f"event: close\ndata: {e}\n\n"


@router.get("/{roll_no}/events")
async def stream_progress(
    roll_no: str,
    session: UserSession = Depends(get_current_session),
    tracker: ProgressTracker = Depends(get_tracker),
    store: SqliteStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
) -> StreamingResponse:
    """Stream recomputed progress using Server-Sent Events.

    Events:
    - progress: full ProgressSummary as JSON, sent on connect and after
      every change to the student's records
    - keepalive: sent every 30s to keep connection alive
    - close: the student no longer exists
    """
    tracker.get_student(session, roll_no)

    live = LiveProgress(store, roll_no, credit_target=config.portal.credit_target)
    return StreamingResponse(
        _event_generator(live),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
