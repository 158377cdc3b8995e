import asyncio

import pytest
from pymongo.errors import DuplicateKeyError

from reviewdesk.models import ReviewCreate, TaskUpdate
from reviewdesk.services.task_service import AUTHOR_ONLY

MISSING_TASK_ID = "64b7f0c2a1b2c3d4e5f60718"


@pytest.fixture
async def task(task_service, task_create, author):
    response = await task_service.create_task(task_create, author)
    assert response.success, response.error
    return response.data


async def test_create_task(task, author, db):
    assert task.state == "DRAFT"
    assert task.version == 1
    assert task.author_id == author.id

    log = await db.audit_logs.find_one({"entity_id": task.id})
    assert log["action"] == "TASK_CREATED"
    assert log["user_id"] == author.id


async def test_create_task_rejects_bad_tests_json(task_service, task_create, author):
    bad = task_create.model_copy(update={"tests_json": "{not json"})
    response = await task_service.create_task(bad, author)
    assert response.code == 400


async def test_get_task_visibility(task_service, task, author, other_author, reviewer):
    assert (await task_service.get_task(task.id, author)).success
    assert (await task_service.get_task(task.id, reviewer)).success
    assert (await task_service.get_task(task.id, other_author)).code == 403
    assert (await task_service.get_task(MISSING_TASK_ID, author)).code == 404
    assert (await task_service.get_task("nope", author)).code == 400


async def test_list_tasks_by_author(task_service, task_create, task, author, other_author):
    await task_service.create_task(task_create, other_author)

    tasks = (await task_service.list_tasks_by_author(author.id)).data

    assert [t.id for t in tasks] == [task.id]


async def test_update_bumps_version(task_service, task, author):
    response = await task_service.update_task(task.id, TaskUpdate(title="Renamed", task_yaml="a: 1"), author)

    assert response.success
    assert response.data.version == 2
    assert response.data.title == "Renamed"
    assert response.data.task_yaml == "a: 1"


async def test_update_can_clear_optional_script(task_service, task, author):
    response = await task_service.update_task(task.id, TaskUpdate(solution_sh=None), author)
    assert response.data.solution_sh is None


async def test_update_requires_fields(task_service, task, author):
    response = await task_service.update_task(task.id, TaskUpdate(), author)
    assert response.code == 400
    assert response.error == "No fields to update"


async def test_update_only_by_author(task_service, task, other_author):
    response = await task_service.update_task(task.id, TaskUpdate(title="Mine now"), other_author)
    assert response.code == 403
    assert response.error == AUTHOR_ONLY


async def test_update_with_stale_expected_version_conflicts(task_service, task, author):
    await task_service.update_task(task.id, TaskUpdate(title="First"), author)

    response = await task_service.update_task(task.id, TaskUpdate(title="Second", expected_version=1), author)

    assert response.code == 409


async def test_commit_with_stale_snapshot_conflicts(task_service, task, author):
    first = await task_service.commit_change(task, {"title": "A"}, author.id, "updated")
    second = await task_service.commit_change(task, {"title": "B"}, author.id, "updated")

    assert first.success
    assert second.code == 409
    current = await task_service.find_task(task.id)
    assert current.title == "A"
    assert current.version == 2


async def test_concurrent_updates_keep_history_consistent(task_service, task, author, db, hold_after_load):
    hold_after_load(task_service, 5)

    results = await asyncio.gather(*[
        task_service.update_task(task.id, TaskUpdate(title=f"Title {i}"), author)
        for i in range(5)
    ])

    assert sorted(r.code for r in results) == [200, 409, 409, 409, 409]
    winner = next(r.data for r in results if r.success)

    current = await task_service.find_task(task.id)
    versions = await db.task_versions.find({"task_id": task.id}).sort("version", 1).to_list(None)
    assert current.version == 2
    assert current.title == winner.title
    assert [v["version"] for v in versions] == [1, 2]
    assert versions[-1]["content"]["title"] == winner.title


@pytest.mark.parametrize(
    "error, code",
    [
        (RuntimeError("history write failed"), 500),
        (DuplicateKeyError("duplicate version"), 409),
    ],
)
async def test_failed_history_write_reverts_task(task_service, task, author, db, monkeypatch, error, code):
    original = task_service.history_service.record_version
    calls = []

    async def record_version(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            raise error
        return await original(*args, **kwargs)

    monkeypatch.setattr(task_service.history_service, "record_version", record_version)

    failed = await task_service.update_task(task.id, TaskUpdate(title="A"), author)
    assert failed.code == code

    reverted = await task_service.find_task(task.id)
    assert reverted.version == 1
    assert reverted.title == task.title
    assert reverted.state == task.state

    retried = await task_service.update_task(task.id, TaskUpdate(title="B"), author)
    assert retried.data.version == 2

    versions = await db.task_versions.find({"task_id": task.id}).sort("version", 1).to_list(None)
    assert [v["version"] for v in versions] == [1, 2]
    assert versions[-1]["content"]["title"] == "B"


async def test_cannot_edit_submitted_task(task_service, task, author):
    await task_service.submit_task(task.id, author)
    response = await task_service.update_task(task.id, TaskUpdate(title="Late edit"), author)
    assert response.code == 400


async def test_submit_task(task_service, task, author, db):
    response = await task_service.submit_task(task.id, author)

    assert response.data.state == "SUBMITTED"
    assert response.data.version == 2
    assert await db.audit_logs.count_documents({"action": "TASK_SUBMITTED", "entity_id": task.id}) == 1


async def test_cannot_submit_twice(task_service, task, author):
    await task_service.submit_task(task.id, author)
    response = await task_service.submit_task(task.id, author)
    assert response.code == 400


async def test_editing_changes_requested_task_returns_it_to_draft(
    task_service, review_service, task, author, reviewer
):
    await task_service.submit_task(task.id, author)
    await review_service.submit_review(task.id, ReviewCreate(decision="REQUEST_CHANGES"), reviewer)

    response = await task_service.update_task(task.id, TaskUpdate(instruction="Clearer"), author)

    assert response.data.state == "DRAFT"


async def test_resubmit_from_changes_requested(task_service, review_service, task, author, reviewer):
    await task_service.submit_task(task.id, author)
    await review_service.submit_review(task.id, ReviewCreate(decision="REQUEST_CHANGES"), reviewer)

    response = await task_service.submit_task(task.id, author)

    assert response.data.state == "SUBMITTED"
    assert response.data.reviewer_id is None


async def test_duplicate_task(task_service, task, author):
    response = await task_service.duplicate_task(task.id, author)

    copy = response.data
    assert response.code == 201
    assert copy.id != task.id
    assert copy.title == "Fix the build (Copy)"
    assert copy.state == "DRAFT"
    assert copy.version == 1
    assert copy.instruction == task.instruction


async def test_duplicate_truncates_long_titles(task_service, task_create, author):
    long_task = (await task_service.create_task(task_create.model_copy(update={"title": "x" * 200}), author)).data

    copy = (await task_service.duplicate_task(long_task.id, author)).data

    assert len(copy.title) == 200
    assert copy.title.endswith(" (Copy)")


async def test_delete_draft_task(task_service, task, author, db):
    response = await task_service.delete_task(task.id, author)

    assert response.data is True
    assert (await task_service.get_task(task.id, author)).code == 404
    # History survives the soft delete
    assert await db.task_versions.count_documents({"task_id": task.id}) == 1


async def test_cannot_delete_submitted_task(task_service, task, author):
    await task_service.submit_task(task.id, author)
    response = await task_service.delete_task(task.id, author)
    assert response.code == 400


async def test_reviewer_queue_filters(task_service, review_service, task_create, author, reviewer):
    pending = (await task_service.create_task(task_create, author)).data
    decided = (await task_service.create_task(task_create, author)).data
    await task_service.create_task(task_create, author)
    await task_service.submit_task(pending.id, author)
    await task_service.submit_task(decided.id, author)
    await review_service.submit_review(decided.id, ReviewCreate(decision="APPROVE"), reviewer)

    queue = (await task_service.list_reviewer_tasks(reviewer.id, "pending")).data
    history = (await task_service.list_reviewer_tasks(reviewer.id, "history")).data
    everything = (await task_service.list_reviewer_tasks(reviewer.id)).data

    assert [t.id for t in queue] == [pending.id]
    assert [t.id for t in history] == [decided.id]
    assert {t.id for t in everything} == {pending.id, decided.id}
