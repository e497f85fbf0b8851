"""Translation of domain errors into HTTP responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from credit_portal.core.errors import (
    AccessDeniedError,
    AuthenticationError,
    CreditPortalError,
    DuplicateAccountError,
    LockedSemesterError,
    NotFoundError,
    SemesterMismatchError,
    SemesterNotAccessibleError,
    TransientIOError,
)

logger = structlog.get_logger(__name__)

# Checked in order; subclasses before their bases
STATUS_BY_ERROR: list[tuple[type[CreditPortalError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (LockedSemesterError, status.HTTP_409_CONFLICT),
    (DuplicateAccountError, status.HTTP_409_CONFLICT),
    (SemesterNotAccessibleError, status.HTTP_403_FORBIDDEN),
    (AccessDeniedError, status.HTTP_403_FORBIDDEN),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (SemesterMismatchError, status.HTTP_400_BAD_REQUEST),
    (TransientIOError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(error: CreditPortalError) -> int:
    """HTTP status code for a domain error."""
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def credit_portal_error_handler(request: Request, exc: CreditPortalError) -> JSONResponse:
    code = status_for(exc)
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status=code,
    )
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CreditPortalError, credit_portal_error_handler)
