"""Task endpoints for creators."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from reviewdesk.models import Task, TaskCreate, TaskDetail, TaskUpdate
from reviewdesk.services.task_service import TaskService
from reviewdesk.api.dependencies import CurrentUser, get_task_service
from reviewdesk.api.utils import handle_service_response

router = APIRouter()


@router.get("", response_model=List[Task])
async def list_tasks(
    user: CurrentUser,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    task_service: TaskService = Depends(get_task_service),
):
    """Tasks written by the current user, newest first."""
    response = await task_service.list_tasks_by_author(user.id, limit)
    return handle_service_response(response)


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user: CurrentUser,
    task_service: TaskService = Depends(get_task_service),
):
    """Create a new task in DRAFT state."""
    response = await task_service.create_task(task, user)
    return handle_service_response(response)


@router.get("/{task_id}", response_model=TaskDetail)
async def get_task(
    task_id: str,
    user: CurrentUser,
    task_service: TaskService = Depends(get_task_service),
):
    response = await task_service.get_task(task_id, user)
    return handle_service_response(response)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    task: TaskUpdate,
    user: CurrentUser,
    task_service: TaskService = Depends(get_task_service),
):
    """Update a task. ``expected_version`` enables optimistic locking."""
    response = await task_service.update_task(task_id, task, user)
    return handle_service_response(response)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    user: CurrentUser,
    task_service: TaskService = Depends(get_task_service),
):
    """Delete a task (soft delete)."""
    response = await task_service.delete_task(task_id, user)
    handle_service_response(response)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{task_id}/submit", response_model=Task)
async def submit_task(
    task_id: str,
    user: CurrentUser,
    task_service: TaskService = Depends(get_task_service),
):
    response = await task_service.submit_task(task_id, user)
    return handle_service_response(response)


@router.post("/{task_id}/duplicate", response_model=Task, status_code=status.HTTP_201_CREATED)
async def duplicate_task(
    task_id: str,
    user: CurrentUser,
    task_service: TaskService = Depends(get_task_service),
):
    response = await task_service.duplicate_task(task_id, user)
    return handle_service_response(response)
