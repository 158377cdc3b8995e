"""Authentication endpoints."""

from fastapi import APIRouter

from reviewdesk.models import User
from reviewdesk.api.dependencies import CurrentUser

router = APIRouter()


@router.get("/me", response_model=User)
async def get_me(user: CurrentUser):
    """The synced user behind the forwarded identity headers."""
    return user
