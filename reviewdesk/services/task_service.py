"""Task service for business logic."""

import logging
from typing import Any, Dict, List, Literal, Optional, cast
from datetime import datetime, timezone

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from reviewdesk.models.task import Task, TaskCreate, TaskDetail, TaskState, TaskUpdate, CONTENT_FIELDS
from reviewdesk.models.review import Review
from reviewdesk.models.version import ChangeType
from reviewdesk.models.audit import AuditAction
from reviewdesk.models.user import User
from reviewdesk.db.database import get_database, ReviewDatabase
from reviewdesk.core.response import ServiceResponse
from reviewdesk.core.validators import TaskValidator
from reviewdesk.core import workflow
from .history_service import HistoryService
from .audit_service import AuditService

logger = logging.getLogger(__name__)

AUTHOR_ONLY = "Forbidden: Only the author can perform this action"
COPY_SUFFIX = " (Copy)"
TITLE_MAX_LENGTH = 200

ReviewerFilter = Literal["pending", "history", "all"]


class TaskService:
    """Task CRUD and creator-side workflow transitions."""

    def __init__(self, database: Optional[ReviewDatabase] = None):
        self.db: ReviewDatabase = database if database is not None else cast(ReviewDatabase, get_database())
        self.validator = TaskValidator
        self.history_service = HistoryService(self.db)
        self.audit_service = AuditService(self.db)

    # ==================== Persistence helpers ====================

    async def find_task(self, task_id: str) -> Optional[Task]:
        """Load a live (not deleted) task, or None."""
        task_data = await self.db.tasks.find_one({
            "_id": ObjectId(task_id),
            "deleted_at": None,
        })
        if not task_data:
            return None
        return Task.from_mongo(task_data)

    async def get_reviews(self, task_id: str) -> List[Review]:
        cursor = self.db.reviews.find({"task_id": task_id}).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        return [Review.from_mongo(doc) async for doc in cursor]

    async def _insert_task(self, task: Task) -> None:
        document = task.model_dump(exclude={"id"})
        document["_id"] = ObjectId(task.id)
        await self.db.tasks.insert_one(document)
        await self.history_service.record_version(task, task.author_id, ChangeType.CREATED)

    async def commit_change(
        self,
        task: Task,
        changes: Dict[str, Any],
        changed_by: str,
        change_type: ChangeType,
    ) -> ServiceResponse[Task]:
        """Apply ``changes`` and append exactly one new version.

        The update only matches while the task is still at ``task.version``,
        so of two concurrent writers the slower one gets a conflict.
        """
        changes = {**changes, "updated_at": datetime.now(timezone.utc)}

        task_data = await self.db.tasks.find_one_and_update(
            {"_id": ObjectId(task.id), "version": task.version, "deleted_at": None},
            {"$set": changes, "$inc": {"version": 1}},
            return_document=ReturnDocument.AFTER,
        )
        if task_data is None:
            logger.warning(f"Version conflict on task {task.id} at version {task.version}")
            return ServiceResponse.conflict_error("Task was modified by another request, reload and retry")

        updated = Task.from_mongo(task_data)
        try:
            await self.history_service.record_version(updated, changed_by, change_type)
        except DuplicateKeyError:
            logger.error(f"Version {updated.version} of task {task.id} already recorded")
            await self._revert_change(task, changes)
            return ServiceResponse.conflict_error("Task version already recorded, reload and retry")
        except Exception:
            await self._revert_change(task, changes)
            raise

        return ServiceResponse.success_response(updated)

    async def _revert_change(self, task: Task, changes: Dict[str, Any]) -> None:
        """Undo a committed change whose version could not be recorded.

        Only matches while the task is still at the version the failed
        change produced.
        """
        previous = task.model_dump(include=set(changes))
        result = await self.db.tasks.update_one(
            {"_id": ObjectId(task.id), "version": task.version + 1},
            {"$set": previous, "$inc": {"version": -1}},
        )
        if result.modified_count == 0:
            logger.error(f"Could not revert task {task.id} to version {task.version}")
        else:
            logger.warning(f"Reverted task {task.id} to version {task.version} after failed history write")

    async def _load_own_task(self, task_id: str, user: User) -> ServiceResponse[Task]:
        if not self.validator.validate_object_id(task_id):
            return ServiceResponse.validation_error("Invalid task ID format")

        task = await self.find_task(task_id)
        if task is None:
            return ServiceResponse.not_found_error("Task")
        if task.author_id != user.id:
            return ServiceResponse.forbidden_error(AUTHOR_ONLY)
        return ServiceResponse.success_response(task)

    # ==================== Core CRUD Operations ====================

    async def create_task(self, task_create: TaskCreate, user: User) -> ServiceResponse[Task]:
        """Create a new task in DRAFT state."""
        task_data = task_create.model_dump()
        validation = self.validator.validate_task_input(task_data)
        if not validation.is_valid:
            return ServiceResponse.validation_error(validation.error_message, details=validation.errors)

        try:
            task = Task(**task_data, author_id=user.id, state=TaskState.DRAFT, version=1)
            await self._insert_task(task)

            await self.audit_service.log_action(
                AuditAction.TASK_CREATED, "task", task.id, user,
                metadata={"title": task.title, "state": task.state},
            )
            logger.info(f"Task {task.id} created by {user.id}")
            return ServiceResponse.success_response(task, "Task created successfully", code=201)

        except Exception:
            logger.exception("Failed to create task")
            return ServiceResponse.internal_error("Failed to create task")

    async def get_task(self, task_id: str, user: User) -> ServiceResponse[TaskDetail]:
        """Get a task with its reviews. Visible to its author and to reviewers."""
        if not self.validator.validate_object_id(task_id):
            return ServiceResponse.validation_error("Invalid task ID format")

        task = await self.find_task(task_id)
        if task is None:
            return ServiceResponse.not_found_error("Task")
        if task.author_id != user.id and not user.is_reviewer:
            return ServiceResponse.forbidden_error()

        reviews = await self.get_reviews(task_id)
        return ServiceResponse.success_response(TaskDetail(**task.model_dump(), reviews=reviews))

    async def list_tasks_by_author(self, author_id: str, limit: Optional[int] = None) -> ServiceResponse[List[Task]]:
        """Tasks written by one author, newest first."""
        cursor = self.db.tasks.find({"author_id": author_id, "deleted_at": None}).sort("created_at", DESCENDING)
        if limit:
            cursor = cursor.limit(limit)

        tasks = [Task.from_mongo(doc) async for doc in cursor]
        return ServiceResponse.success_response(tasks, f"Found {len(tasks)} tasks")

    async def update_task(self, task_id: str, updates: TaskUpdate, user: User) -> ServiceResponse[Task]:
        """Edit a DRAFT or CHANGES_REQUESTED task. Editing sends the latter back to DRAFT."""
        loaded = await self._load_own_task(task_id, user)
        if not loaded.success:
            return loaded
        current = loaded.data

        if not workflow.can_edit(current.state):
            return ServiceResponse.validation_error(
                f"Task cannot be edited in {current.state} state. "
                "Only DRAFT and CHANGES_REQUESTED tasks can be edited."
            )

        if updates.expected_version is not None and updates.expected_version != current.version:
            return ServiceResponse.conflict_error(
                f"Version conflict: task is at version {current.version}, edit was based on {updates.expected_version}"
            )

        changes = updates.content_changes()
        if not changes:
            return ServiceResponse.validation_error("No fields to update")

        validation = self.validator.validate_task_input(changes)
        if not validation.is_valid:
            return ServiceResponse.validation_error(validation.error_message, details=validation.errors)

        new_state = workflow.state_after_edit(current.state)
        changes["state"] = new_state.value

        try:
            response = await self.commit_change(current, changes, user.id, ChangeType.UPDATED)
            if not response.success:
                return response

            await self.audit_service.log_action(
                AuditAction.TASK_UPDATED, "task", task_id, user,
                metadata={
                    "updates": [field for field in changes if field in CONTENT_FIELDS],
                    "previous_state": current.state,
                    "current_state": new_state.value,
                },
            )
            response.message = "Task updated successfully"
            return response

        except Exception:
            logger.exception(f"Failed to update task {task_id}")
            return ServiceResponse.internal_error("Failed to update task")

    async def submit_task(self, task_id: str, user: User) -> ServiceResponse[Task]:
        """Submit a task for review."""
        loaded = await self._load_own_task(task_id, user)
        if not loaded.success:
            return loaded
        current = loaded.data

        if not workflow.can_submit(current.state):
            return ServiceResponse.validation_error(
                f"Task cannot be submitted from {current.state} state. "
                "Only DRAFT and CHANGES_REQUESTED tasks can be submitted."
            )

        validation = self.validator.validate_for_submission(current.model_dump())
        if not validation.is_valid:
            return ServiceResponse.validation_error("Required fields are missing", details=validation.errors)

        try:
            response = await self.commit_change(
                current,
                {"state": TaskState.SUBMITTED.value, "reviewer_id": None},
                user.id,
                ChangeType.SUBMITTED,
            )
            if not response.success:
                return response

            await self.audit_service.log_action(
                AuditAction.TASK_SUBMITTED, "task", task_id, user,
                metadata={"previous_state": current.state, "current_state": TaskState.SUBMITTED.value},
            )
            response.message = "Task submitted for review"
            return response

        except Exception:
            logger.exception(f"Failed to submit task {task_id}")
            return ServiceResponse.internal_error("Failed to submit task")

    async def duplicate_task(self, task_id: str, user: User) -> ServiceResponse[Task]:
        """Copy a task's content into a new DRAFT task with its own history."""
        loaded = await self._load_own_task(task_id, user)
        if not loaded.success:
            return loaded
        source = loaded.data

        content = source.content().model_dump()
        content["title"] = source.title[:TITLE_MAX_LENGTH - len(COPY_SUFFIX)] + COPY_SUFFIX

        try:
            task = Task(**content, author_id=user.id, state=TaskState.DRAFT, version=1)
            await self._insert_task(task)

            await self.audit_service.log_action(
                AuditAction.TASK_DUPLICATED, "task", task.id, user,
                metadata={"source_task_id": source.id, "title": task.title},
            )
            return ServiceResponse.success_response(task, "Task duplicated successfully", code=201)

        except Exception:
            logger.exception(f"Failed to duplicate task {task_id}")
            return ServiceResponse.internal_error("Failed to duplicate task")

    async def delete_task(self, task_id: str, user: User) -> ServiceResponse[bool]:
        """Soft delete a DRAFT or REJECTED task. Its history stays readable."""
        loaded = await self._load_own_task(task_id, user)
        if not loaded.success:
            return ServiceResponse.error_response(loaded.error, code=loaded.code)
        current = loaded.data

        if not workflow.can_delete(current.state):
            return ServiceResponse.validation_error(
                f"Task cannot be deleted in {current.state} state. Only DRAFT and REJECTED tasks can be deleted."
            )

        now = datetime.now(timezone.utc)
        result = await self.db.tasks.update_one(
            {"_id": ObjectId(task_id), "deleted_at": None},
            {"$set": {"deleted_at": now, "updated_at": now}},
        )
        if result.modified_count == 0:
            return ServiceResponse.not_found_error("Task")

        await self.audit_service.log_action(
            AuditAction.TASK_DELETED, "task", task_id, user,
            metadata={"title": current.title, "state": current.state},
        )
        return ServiceResponse.success_response(True, "Task deleted successfully")

    # ==================== Reviewer queues ====================

    async def list_reviewer_tasks(
        self,
        reviewer_id: str,
        scope: ReviewerFilter = "all",
        limit: Optional[int] = None,
    ) -> ServiceResponse[List[Task]]:
        """Tasks visible to a reviewer.

        pending: everything awaiting review, oldest first.
        history: decided tasks this reviewer reviewed or is assigned to.
        all: both, most recently updated first.
        """
        pending = {"state": {"$in": [s.value for s in workflow.REVIEWABLE_STATES]}}

        reviewed_ids = await self.db.reviews.distinct("task_id", {"reviewer_id": reviewer_id})
        history = {
            "state": {"$in": [s.value for s in workflow.DECIDED_STATES]},
            "$or": [
                {"_id": {"$in": [ObjectId(task_id) for task_id in reviewed_ids]}},
                {"reviewer_id": reviewer_id},
            ],
        }

        if scope == "pending":
            query, sort = pending, [("created_at", ASCENDING)]
        elif scope == "history":
            query, sort = history, [("updated_at", DESCENDING)]
        else:
            query, sort = {"$or": [pending, history]}, [("updated_at", DESCENDING)]

        cursor = self.db.tasks.find({**query, "deleted_at": None}).sort(sort)
        if limit:
            cursor = cursor.limit(limit)

        tasks = [Task.from_mongo(doc) async for doc in cursor]
        return ServiceResponse.success_response(tasks, f"Found {len(tasks)} tasks")
