"""Audit and task history endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from reviewdesk.models import (
    AuditAction,
    AuditLogPage,
    ContentChangesResponse,
    DiffResponse,
    EntityLogs,
    TaskHistory,
    TaskVersion,
)
from reviewdesk.services.audit_service import AuditService
from reviewdesk.services.history_service import HistoryService
from reviewdesk.services.diff_engine import compute_diff
from reviewdesk.api.dependencies import CurrentUser, get_audit_service, get_history_service
from reviewdesk.api.utils import handle_service_response

router = APIRouter()


@router.get("/logs", response_model=AuditLogPage)
async def get_audit_logs(
    user: CurrentUser,
    entity_type: Optional[str] = Query(None),
    entity_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    action: Optional[AuditAction] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    audit_service: AuditService = Depends(get_audit_service),
):
    """Audit logs with optional filtering, newest first."""
    return await audit_service.get_logs(entity_type, entity_id, user_id, action, limit, offset)


@router.get("/entity/{entity_type}/{entity_id}", response_model=EntityLogs)
async def get_entity_logs(
    entity_type: str,
    entity_id: str,
    user: CurrentUser,
    audit_service: AuditService = Depends(get_audit_service),
):
    return EntityLogs(logs=await audit_service.get_entity_logs(entity_type, entity_id))


@router.get("/task/{task_id}/history", response_model=TaskHistory)
async def get_task_history(
    task_id: str,
    user: CurrentUser,
    history_service: HistoryService = Depends(get_history_service),
):
    """Every version of a task, oldest first."""
    response = await history_service.get_task_history(task_id)
    return TaskHistory(history=handle_service_response(response))


@router.get("/task/{task_id}/versions/{version}", response_model=TaskVersion)
async def get_task_version(
    task_id: str,
    version: int,
    user: CurrentUser,
    history_service: HistoryService = Depends(get_history_service),
):
    response = await history_service.get_version(task_id, version)
    return handle_service_response(response)


@router.get("/task/{task_id}/diff", response_model=DiffResponse)
async def get_task_diff(
    task_id: str,
    user: CurrentUser,
    from_version: int = Query(..., alias="fromVersion", ge=1),
    to_version: int = Query(..., alias="toVersion", ge=1),
    history_service: HistoryService = Depends(get_history_service),
):
    """Field-level diff between two versions."""
    response = await history_service.get_diff(task_id, from_version, to_version)
    if response.code == 404:
        return DiffResponse(message="One or both versions not found")
    return DiffResponse(diff=handle_service_response(response))


@router.get("/task/{task_id}/latest-diff", response_model=DiffResponse)
async def get_latest_diff(
    task_id: str,
    user: CurrentUser,
    history_service: HistoryService = Depends(get_history_service),
):
    """Diff of the most recent content change, skipping pure state transitions."""
    response = await history_service.get_latest_before_resubmission(task_id)
    pair = handle_service_response(response)
    if pair is None:
        return DiffResponse(message=response.message)
    return DiffResponse(diff=compute_diff(pair.previous, pair.current))


@router.get("/task/{task_id}/has-changes", response_model=ContentChangesResponse)
async def has_content_changes(
    task_id: str,
    user: CurrentUser,
    history_service: HistoryService = Depends(get_history_service),
):
    response = await history_service.has_content_changes(task_id)
    return ContentChangesResponse(task_id=task_id, has_content_changes=handle_service_response(response))
