"""Route handlers for Web API."""

from credit_portal.web.routes.health import router as health_router
from credit_portal.web.routes.auth import router as auth_router
from credit_portal.web.routes.subjects import router as subjects_router
from credit_portal.web.routes.students import router as students_router

__all__ = [
    "health_router",
    "auth_router",
    "subjects_router",
    "students_router",
]
