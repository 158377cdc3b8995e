import asyncio

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from reviewdesk.core.config import settings
from reviewdesk.db.database import init_collections
from reviewdesk.models import TaskCreate, User, UserRole
from reviewdesk.services.task_service import TaskService
from reviewdesk.services.review_service import ReviewService

REVIEWER_ID = "reviewer-1"


@pytest.fixture
def db():
    database = AsyncMongoMockClient()["reviewdesk_test"]
    asyncio.run(init_collections(database))
    return database


@pytest.fixture
def author():
    return User(id="author-1", email="author@example.com", name="Ada Author")


@pytest.fixture
def other_author():
    return User(id="author-2", email="other@example.com", name="Otto Other")


@pytest.fixture
def reviewer():
    return User(id=REVIEWER_ID, email="reviewer@example.com", name="Rae Reviewer", role=UserRole.REVIEWER)


@pytest.fixture
def other_reviewer():
    return User(id="reviewer-2", email="reviewer2@example.com", role=UserRole.REVIEWER)


@pytest.fixture
def task_service(db):
    return TaskService(db)


@pytest.fixture
def review_service(db, task_service):
    return ReviewService(db, task_service)


@pytest.fixture
def task_create():
    return TaskCreate(
        title="Fix the build",
        instruction="Make the failing build green again.",
        difficulty="MEDIUM",
        categories="build,ci",
        solution_sh="make fix",
    )


@pytest.fixture
def client(db, monkeypatch):
    from reviewdesk.main import app
    from reviewdesk.api.dependencies import get_db

    monkeypatch.setattr(settings, "REVIEWER_IDS", [REVIEWER_ID])

    async def override_db():
        return db

    app.dependency_overrides[get_db] = override_db
    # No context manager: the lifespan would connect to a real MongoDB
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def hold_after_load(monkeypatch):
    """Make ``task_service.find_task`` wait until ``callers`` requests have loaded the task.

    The last caller to arrive runs first; the others resume with a stale snapshot.
    """
    def hold(task_service, callers):
        original = task_service.find_task
        arrived = []
        released = asyncio.Event()

        async def find_task(task_id):
            task = await original(task_id)
            arrived.append(task_id)
            if len(arrived) >= callers:
                released.set()
            await released.wait()
            return task

        monkeypatch.setattr(task_service, "find_task", find_task)

    return hold
