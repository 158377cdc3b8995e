"""History service for versioned task snapshots."""

import asyncio
import logging
from typing import List, Optional, cast
from datetime import datetime, timezone

from bson import ObjectId
from pymongo import ASCENDING

from reviewdesk.models.task import Task
from reviewdesk.models.version import ChangeType, ResubmissionPair, TaskDiff, TaskVersion
from reviewdesk.db.database import get_database, ReviewDatabase
from reviewdesk.core.response import ServiceResponse
from reviewdesk.core.validators import TaskValidator
from .diff_engine import compute_diff, find_latest_content_change

logger = logging.getLogger(__name__)


class HistoryService:
    """Append-only log of task versions, plus diffs over it."""

    def __init__(self, database: Optional[ReviewDatabase] = None):
        self.db: ReviewDatabase = database if database is not None else cast(ReviewDatabase, get_database())
        self.validator = TaskValidator

    async def record_version(self, task: Task, changed_by: str, change_type: ChangeType) -> TaskVersion:
        """Append a snapshot of ``task`` at ``task.version``.

        Raises ``pymongo.errors.DuplicateKeyError`` when that version number
        is already taken.
        """
        version = TaskVersion(
            task_id=task.id,
            version=task.version,
            state=task.state,
            content=task.content(),
            changed_by=changed_by,
            change_type=change_type,
            timestamp=datetime.now(timezone.utc),
        )

        document = version.model_dump(exclude={"id"})
        document["_id"] = ObjectId(version.id)
        await self.db.task_versions.insert_one(document)

        logger.debug(f"Recorded version {version.version} of task {task.id} ({change_type})")
        return version

    async def _load_history(self, task_id: str) -> List[TaskVersion]:
        cursor = self.db.task_versions.find({"task_id": task_id}).sort("version", ASCENDING)

        versions = []
        async for version_data in cursor:
            versions.append(TaskVersion.from_mongo(version_data))
        return versions

    async def get_task_history(self, task_id: str) -> ServiceResponse[List[TaskVersion]]:
        """All versions of a task, oldest first."""
        if not self.validator.validate_object_id(task_id):
            return ServiceResponse.validation_error("Invalid task ID format")

        try:
            versions = await self._load_history(task_id)
        except Exception:
            logger.exception(f"Failed to load history of task {task_id}")
            return ServiceResponse.internal_error("Failed to load task history")

        if not versions:
            return ServiceResponse.not_found_error("Task history")
        return ServiceResponse.success_response(versions, f"Found {len(versions)} versions")

    async def _find_version(self, task_id: str, version: int) -> Optional[TaskVersion]:
        version_data = await self.db.task_versions.find_one({
            "task_id": task_id,
            "version": version,
        })
        if version_data:
            return TaskVersion.from_mongo(version_data)
        return None

    async def get_version(self, task_id: str, version: int) -> ServiceResponse[TaskVersion]:
        """A specific version of a task."""
        if not self.validator.validate_object_id(task_id):
            return ServiceResponse.validation_error("Invalid task ID format")

        task_version = await self._find_version(task_id, version)
        if task_version is None:
            return ServiceResponse.not_found_error("Task version")
        return ServiceResponse.success_response(task_version)

    async def get_diff(self, task_id: str, from_version: int, to_version: int) -> ServiceResponse[TaskDiff]:
        """Diff between two versions, comparing the two snapshots directly."""
        if not self.validator.validate_object_id(task_id):
            return ServiceResponse.validation_error("Invalid task ID format")

        old, new = await asyncio.gather(
            self._find_version(task_id, from_version),
            self._find_version(task_id, to_version),
        )
        if old is None or new is None:
            return ServiceResponse.not_found_error("Task version")

        return ServiceResponse.success_response(compute_diff(old, new))

    async def get_latest_before_resubmission(self, task_id: str) -> ServiceResponse[Optional[ResubmissionPair]]:
        """Nearest pair of adjacent versions with a real content edit.

        ``data`` is None when the task was only ever state-transitioned.
        """
        if not self.validator.validate_object_id(task_id):
            return ServiceResponse.validation_error("Invalid task ID format")

        versions = await self._load_history(task_id)
        pair = find_latest_content_change(versions)
        if pair is None:
            return ServiceResponse.success_response(None, "No previous version found")
        return ServiceResponse.success_response(pair)

    async def has_content_changes(self, task_id: str) -> ServiceResponse[bool]:
        response = await self.get_latest_before_resubmission(task_id)
        if not response.success:
            return ServiceResponse.error_response(response.error, code=response.code)
        return ServiceResponse.success_response(response.data is not None)
