"""User sync with the identity provider."""

import logging
from typing import Optional, cast
from datetime import datetime, timezone

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from reviewdesk.core.config import settings
from reviewdesk.db.database import get_database, ReviewDatabase
from reviewdesk.models.user import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Keeps the local user record in step with the identity provider."""

    def __init__(self, database: Optional[ReviewDatabase] = None):
        self.db: ReviewDatabase = database if database is not None else cast(ReviewDatabase, get_database())

    async def sync_user(self, user_id: str, email: Optional[str] = None, name: Optional[str] = None) -> User:
        """Upsert the user, refreshing email and name when they changed."""
        now = datetime.now(timezone.utc)
        email = email or f"{user_id}@users.local"

        update = {
            "$set": {"email": email, "updated_at": now},
            "$setOnInsert": {"created_at": now},
        }
        if name is not None:
            update["$set"]["name"] = name
        # Configured reviewers are promoted even if they signed in before
        if user_id in settings.REVIEWER_IDS:
            update["$set"]["role"] = UserRole.REVIEWER.value
        else:
            update["$setOnInsert"]["role"] = UserRole.CREATOR.value

        try:
            user_data = await self._upsert(user_id, update)
        except DuplicateKeyError:
            # Lost the insert race to a concurrent request
            user_data = await self._upsert(user_id, update)
        return User.from_mongo(user_data)

    async def _upsert(self, user_id: str, update: dict) -> dict:
        return await self.db.users.find_one_and_update(
            {"_id": user_id},
            update,
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    async def get_user(self, user_id: str) -> Optional[User]:
        user_data = await self.db.users.find_one({"_id": user_id})
        return User.from_mongo(user_data) if user_data else None

