from types import SimpleNamespace

from pymongo.errors import DuplicateKeyError

from reviewdesk.core.config import settings
from reviewdesk.services.user_service import UserService


async def test_sync_creates_creator(db):
    user = await UserService(db).sync_user("u1", "u1@example.com", "User One")

    assert user.role == "CREATOR"
    assert user.email == "u1@example.com"
    assert not user.is_reviewer


async def test_sync_updates_profile(db):
    service = UserService(db)
    await service.sync_user("u1", "old@example.com", "Old")

    updated = await service.sync_user("u1", "new@example.com")

    assert updated.email == "new@example.com"
    assert updated.name == "Old"
    assert updated.created_at == (await service.get_user("u1")).created_at


async def test_configured_reviewers_are_promoted(db, monkeypatch):
    service = UserService(db)
    await service.sync_user("r1")
    monkeypatch.setattr(settings, "REVIEWER_IDS", ["r1"])

    user = await service.sync_user("r1")

    assert user.is_reviewer
    assert user.email == "r1@users.local"


class RacingUsers:
    """Users collection whose first upsert loses to a concurrent insert."""

    def __init__(self, users):
        self.users = users
        self.attempts = 0

    async def find_one_and_update(self, *args, **kwargs):
        self.attempts += 1
        if self.attempts == 1:
            await self.users.insert_one({"_id": args[0]["_id"], "email": "first@example.com", "role": "CREATOR"})
            raise DuplicateKeyError("E11000 duplicate key error")
        return await self.users.find_one_and_update(*args, **kwargs)


async def test_sync_retries_after_losing_insert_race(db):
    users = RacingUsers(db.users)
    service = UserService(SimpleNamespace(users=users))

    user = await service.sync_user("u1", "u1@example.com")

    assert users.attempts == 2
    assert user.id == "u1"
    assert user.email == "u1@example.com"
    assert user.role == "CREATOR"
