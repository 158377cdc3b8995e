"""Review service for reviewer-side workflow transitions."""

import logging
from typing import Optional, cast

from bson import ObjectId
from pydantic import BaseModel

from reviewdesk.models.task import Task, TaskDetail, TaskState
from reviewdesk.models.review import Review, ReviewCreate, ReviewDecision
from reviewdesk.models.version import ChangeType
from reviewdesk.models.audit import AuditAction
from reviewdesk.models.user import User
from reviewdesk.db.database import get_database, ReviewDatabase
from reviewdesk.core.response import ServiceResponse
from reviewdesk.core import workflow
from .task_service import TaskService

logger = logging.getLogger(__name__)

DECISION_AUDIT_ACTIONS = {
    ReviewDecision.APPROVE: AuditAction.TASK_APPROVED,
    ReviewDecision.REJECT: AuditAction.TASK_REJECTED,
    ReviewDecision.REQUEST_CHANGES: AuditAction.TASK_CHANGES_REQUESTED,
}

DECISION_MESSAGES = {
    ReviewDecision.APPROVE: "Task approved",
    ReviewDecision.REJECT: "Task rejected",
    ReviewDecision.REQUEST_CHANGES: "Changes requested",
}


class ReviewResult(BaseModel):
    task: Task
    review: Review
    message: Optional[str] = None


class ReviewService:
    """Start reviews and record decisions."""

    def __init__(self, database: Optional[ReviewDatabase] = None, task_service: Optional[TaskService] = None):
        self.db: ReviewDatabase = database if database is not None else cast(ReviewDatabase, get_database())
        self.task_service = task_service if task_service is not None else TaskService(self.db)
        self.audit_service = self.task_service.audit_service

    async def _load_task(self, task_id: str) -> ServiceResponse[Task]:
        if not self.task_service.validator.validate_object_id(task_id):
            return ServiceResponse.validation_error("Invalid task ID format")
        task = await self.task_service.find_task(task_id)
        if task is None:
            return ServiceResponse.not_found_error("Task")
        return ServiceResponse.success_response(task)

    async def _begin_review(self, task: Task, reviewer: User) -> ServiceResponse[Task]:
        response = await self.task_service.commit_change(
            task,
            {"state": TaskState.IN_REVIEW.value, "reviewer_id": reviewer.id},
            reviewer.id,
            ChangeType.REVIEW_STARTED,
        )
        if response.success:
            await self.audit_service.log_action(
                AuditAction.REVIEW_STARTED, "task", task.id, reviewer,
                metadata={"previous_state": task.state, "current_state": TaskState.IN_REVIEW.value},
            )
        return response

    async def start_review(self, task_id: str, reviewer: User) -> ServiceResponse[Task]:
        """SUBMITTED -> IN_REVIEW, assigning the reviewer."""
        loaded = await self._load_task(task_id)
        if not loaded.success:
            return loaded
        task = loaded.data

        if task.state != TaskState.SUBMITTED:
            return ServiceResponse.validation_error(
                f"Task must be in SUBMITTED state to start review. Current state: {task.state}"
            )

        response = await self._begin_review(task, reviewer)
        if response.success:
            response.message = "Review started"
        return response

    async def submit_review(self, task_id: str, review_create: ReviewCreate, reviewer: User) -> ServiceResponse[ReviewResult]:
        """Record a decision on a SUBMITTED or IN_REVIEW task.

        A SUBMITTED task is started first, which records its own version.
        """
        loaded = await self._load_task(task_id)
        if not loaded.success:
            return ServiceResponse.error_response(loaded.error, code=loaded.code)
        task = loaded.data

        if not workflow.is_reviewable(task.state):
            return ServiceResponse.validation_error(
                f"Task is not in a reviewable state. Current state: {task.state}"
            )
        if task.state == TaskState.IN_REVIEW and task.reviewer_id != reviewer.id:
            return ServiceResponse.forbidden_error("This task is being reviewed by another reviewer")

        decision = ReviewDecision(review_create.decision)
        new_state = workflow.state_from_decision(decision)

        try:
            if task.state == TaskState.SUBMITTED:
                started = await self._begin_review(task, reviewer)
                if not started.success:
                    return ServiceResponse.error_response(started.error, code=started.code)
                task = started.data

            if not workflow.is_valid_transition(task.state, new_state):
                return ServiceResponse.validation_error(
                    f"Invalid state transition from {task.state} to {new_state.value}"
                )

            review = Review(
                task_id=task.id,
                reviewer_id=reviewer.id,
                decision=decision,
                comment=review_create.comment or None,
            )

            committed = await self.task_service.commit_change(
                task,
                {"state": new_state.value, "reviewer_id": reviewer.id},
                reviewer.id,
                ChangeType.for_decision(decision.value),
            )
            if not committed.success:
                return ServiceResponse.error_response(committed.error, code=committed.code)

            # Stored only once the decision is committed to the task
            document = review.model_dump(exclude={"id"})
            document["_id"] = ObjectId(review.id)
            await self.db.reviews.insert_one(document)

            await self.audit_service.log_action(
                AuditAction.REVIEW_SUBMITTED, "review", review.id, reviewer,
                metadata={"task_id": task.id, "decision": decision.value, "has_comment": bool(review.comment)},
            )
            await self.audit_service.log_action(
                DECISION_AUDIT_ACTIONS[decision], "task", task.id, reviewer,
                metadata={
                    "previous_state": task.state,
                    "current_state": new_state.value,
                    "review_id": review.id,
                },
            )

            message = DECISION_MESSAGES[decision]
            logger.info(f"Task {task.id}: {message.lower()} by {reviewer.id}")
            return ServiceResponse.success_response(
                ReviewResult(task=committed.data, review=review, message=message),
                message,
            )

        except Exception:
            logger.exception(f"Failed to submit review for task {task_id}")
            return ServiceResponse.internal_error("Failed to submit review")

    async def get_task_for_review(self, task_id: str, reviewer: User) -> ServiceResponse[TaskDetail]:
        """A task a reviewer may look at: reviewable, or one they reviewed or are assigned to."""
        loaded = await self._load_task(task_id)
        if not loaded.success:
            return ServiceResponse.error_response(loaded.error, code=loaded.code)
        task = loaded.data

        reviews = await self.task_service.get_reviews(task_id)
        has_reviewed = any(review.reviewer_id == reviewer.id for review in reviews)
        is_assigned = task.reviewer_id == reviewer.id and task.state in [s.value for s in workflow.DECIDED_STATES]

        if not workflow.is_reviewable(task.state) and not has_reviewed and not is_assigned:
            return ServiceResponse.validation_error(
                f"Task is not in a reviewable state and you haven't reviewed it. Current state: {task.state}"
            )

        return ServiceResponse.success_response(TaskDetail(**task.model_dump(), reviews=reviews))
