"""API dependencies provider."""

from typing import Annotated, Optional

from fastapi import Depends, Header

from reviewdesk.db.database import ReviewDatabase, get_async_database
from reviewdesk.core.errors import ForbiddenError, UnauthorizedError
from reviewdesk.models.user import User
from reviewdesk.services.task_service import TaskService
from reviewdesk.services.review_service import ReviewService
from reviewdesk.services.history_service import HistoryService
from reviewdesk.services.audit_service import AuditService
from reviewdesk.services.user_service import UserService


async def get_db() -> ReviewDatabase:
    """Get database connection with auto-connect."""
    return await get_async_database()


ReviewDB = Annotated[ReviewDatabase, Depends(get_db)]


async def get_task_service(db: ReviewDB) -> TaskService:
    return TaskService(db)


async def get_review_service(db: ReviewDB) -> ReviewService:
    return ReviewService(db)


async def get_history_service(db: ReviewDB) -> HistoryService:
    return HistoryService(db)


async def get_audit_service(db: ReviewDB) -> AuditService:
    return AuditService(db)


async def get_user_service(db: ReviewDB) -> UserService:
    return UserService(db)


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Sync and return the user forwarded by the identity provider."""
    if not x_user_id:
        raise UnauthorizedError("Unauthorized: X-User-ID header is required")
    return await user_service.sync_user(x_user_id, x_user_email, x_user_name)


async def require_reviewer(user: User = Depends(get_current_user)) -> User:
    if not user.is_reviewer:
        raise ForbiddenError("Forbidden: Reviewer role required")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentReviewer = Annotated[User, Depends(require_reviewer)]
