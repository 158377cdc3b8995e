"""API router assembly."""

from fastapi import APIRouter

from reviewdesk.core.config import settings
from reviewdesk.api.routes.v1 import auth, tasks, reviewer, audit
from reviewdesk.api.routes.health import router as health

router = APIRouter()

router.include_router(health, tags=["health"])
router.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["auth"])
router.include_router(tasks.router, prefix=f"{settings.API_PREFIX}/tasks", tags=["tasks"])
router.include_router(reviewer.router, prefix=f"{settings.API_PREFIX}/reviewer", tags=["reviewer"])
router.include_router(audit.router, prefix=f"{settings.API_PREFIX}/audit", tags=["audit"])
