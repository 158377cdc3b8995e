import pytest
from pymongo.errors import DuplicateKeyError

from reviewdesk.models import ReviewCreate, TaskUpdate
from reviewdesk.services.history_service import HistoryService

MISSING_TASK_ID = "64b7f0c2a1b2c3d4e5f60718"


@pytest.fixture
def history_service(db):
    return HistoryService(db)


async def create_task(task_service, task_create, author):
    response = await task_service.create_task(task_create, author)
    assert response.success, response.error
    return response.data


async def test_new_task_has_single_created_version(task_service, history_service, task_create, author):
    task = await create_task(task_service, task_create, author)

    response = await history_service.get_task_history(task.id)

    assert response.success
    [version] = response.data
    assert version.version == 1
    assert version.change_type == "created"
    assert version.state == "DRAFT"
    assert version.content.title == task_create.title
    assert version.changed_by == author.id


async def test_history_is_gap_free_and_oldest_first(
    task_service, review_service, history_service, task_create, author, reviewer
):
    task = await create_task(task_service, task_create, author)
    await task_service.update_task(task.id, TaskUpdate(title="Fix the CI build"), author)
    await task_service.submit_task(task.id, author)
    await review_service.start_review(task.id, reviewer)
    await review_service.submit_review(task.id, ReviewCreate(decision="APPROVE"), reviewer)

    versions = (await history_service.get_task_history(task.id)).data

    assert [v.version for v in versions] == [1, 2, 3, 4, 5]
    assert [v.change_type for v in versions] == [
        "created", "updated", "submitted", "review_started", "review_approve",
    ]
    assert [v.state for v in versions] == ["DRAFT", "DRAFT", "SUBMITTED", "IN_REVIEW", "APPROVED"]
    assert versions[-1].changed_by == reviewer.id


async def test_history_of_unknown_task_is_not_found(history_service):
    response = await history_service.get_task_history(MISSING_TASK_ID)
    assert not response.success
    assert response.code == 404


async def test_history_rejects_malformed_id(history_service):
    response = await history_service.get_task_history("not-an-id")
    assert response.code == 400


async def test_recording_an_existing_version_fails(task_service, history_service, task_create, author):
    task = await create_task(task_service, task_create, author)
    with pytest.raises(DuplicateKeyError):
        await history_service.record_version(task, author.id, "updated")


async def test_get_version(task_service, history_service, task_create, author):
    task = await create_task(task_service, task_create, author)
    await task_service.update_task(task.id, TaskUpdate(instruction="New instruction"), author)

    response = await history_service.get_version(task.id, 1)
    assert response.data.content.instruction == task_create.instruction

    missing = await history_service.get_version(task.id, 7)
    assert missing.code == 404


async def test_diff_between_versions(task_service, history_service, task_create, author):
    task = await create_task(task_service, task_create, author)
    await task_service.update_task(task.id, TaskUpdate(title="Fix the CI build"), author)
    await task_service.update_task(task.id, TaskUpdate(difficulty="HARD"), author)

    diff = (await history_service.get_diff(task.id, 1, 3)).data

    assert [c.field for c in diff.changes] == ["title", "difficulty"]
    assert (diff.from_version, diff.to_version) == (1, 3)

    same = (await history_service.get_diff(task.id, 2, 2)).data
    assert same.is_empty


async def test_diff_with_missing_version_is_not_found(task_service, history_service, task_create, author):
    task = await create_task(task_service, task_create, author)
    response = await history_service.get_diff(task.id, 1, 2)
    assert response.code == 404


async def test_latest_before_resubmission_finds_content_edit(
    task_service, review_service, history_service, task_create, author, reviewer
):
    task = await create_task(task_service, task_create, author)
    await task_service.submit_task(task.id, author)
    await review_service.submit_review(task.id, ReviewCreate(decision="REQUEST_CHANGES", comment="More tests"), reviewer)
    await task_service.update_task(task.id, TaskUpdate(run_tests_sh="pytest -q"), author)
    await task_service.submit_task(task.id, author)

    response = await history_service.get_latest_before_resubmission(task.id)

    pair = response.data
    assert (pair.previous.version, pair.current.version) == (4, 5)
    assert pair.previous.state == "CHANGES_REQUESTED"
    assert pair.current.content.run_tests_sh == "pytest -q"
    assert (await history_service.has_content_changes(task.id)).data is True


async def test_latest_before_resubmission_without_content_edits(
    task_service, history_service, task_create, author
):
    task = await create_task(task_service, task_create, author)
    await task_service.submit_task(task.id, author)

    response = await history_service.get_latest_before_resubmission(task.id)

    assert response.success
    assert response.data is None
    assert response.message == "No previous version found"
    assert (await history_service.has_content_changes(task.id)).data is False
