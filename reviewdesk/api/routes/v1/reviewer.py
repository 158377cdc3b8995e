"""Reviewer endpoints. Every route requires the REVIEWER role."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from reviewdesk.models import ReviewCreate, Task, TaskDetail
from reviewdesk.services.task_service import TaskService
from reviewdesk.services.review_service import ReviewResult, ReviewService
from reviewdesk.api.dependencies import CurrentReviewer, get_review_service, get_task_service
from reviewdesk.api.utils import handle_service_response

router = APIRouter()


@router.get("/tasks", response_model=List[Task])
async def list_reviewer_tasks(
    reviewer: CurrentReviewer,
    filter: str = Query("all", pattern="^(pending|history|all)$", description="pending, history or all"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    task_service: TaskService = Depends(get_task_service),
):
    """Review queue and review history of the current reviewer."""
    response = await task_service.list_reviewer_tasks(reviewer.id, filter, limit)
    return handle_service_response(response)


@router.get("/tasks/{task_id}", response_model=TaskDetail)
async def get_task_for_review(
    task_id: str,
    reviewer: CurrentReviewer,
    review_service: ReviewService = Depends(get_review_service),
):
    response = await review_service.get_task_for_review(task_id, reviewer)
    return handle_service_response(response)


@router.post("/tasks/{task_id}/start", response_model=Task)
async def start_review(
    task_id: str,
    reviewer: CurrentReviewer,
    review_service: ReviewService = Depends(get_review_service),
):
    """Claim a SUBMITTED task for review."""
    response = await review_service.start_review(task_id, reviewer)
    return handle_service_response(response)


@router.post("/tasks/{task_id}/review", response_model=ReviewResult)
async def submit_review(
    task_id: str,
    review: ReviewCreate,
    reviewer: CurrentReviewer,
    review_service: ReviewService = Depends(get_review_service),
):
    """Approve, reject or request changes."""
    response = await review_service.submit_review(task_id, review, reviewer)
    return handle_service_response(response)
