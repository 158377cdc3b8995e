"""Audit logging models."""

from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, Field
from bson import ObjectId

from .base import DocumentBase


class AuditAction(str, Enum):
    """Audited actions."""
    TASK_CREATED = "TASK_CREATED"
    TASK_UPDATED = "TASK_UPDATED"
    TASK_SUBMITTED = "TASK_SUBMITTED"
    TASK_DELETED = "TASK_DELETED"
    TASK_DUPLICATED = "TASK_DUPLICATED"
    TASK_APPROVED = "TASK_APPROVED"
    TASK_REJECTED = "TASK_REJECTED"
    TASK_CHANGES_REQUESTED = "TASK_CHANGES_REQUESTED"
    REVIEW_STARTED = "REVIEW_STARTED"
    REVIEW_SUBMITTED = "REVIEW_SUBMITTED"


class AuditLogCreate(DocumentBase):
    """Audit log creation model."""
    
    action: AuditAction = Field(..., description="Action performed")
    entity_type: str = Field(..., description="Target entity type: task, review")
    entity_id: str = Field(..., description="Target entity ID")
    user_id: str = Field(..., description="Acting user ID")
    user_name: Optional[str] = Field(None, description="Acting user name")
    user_email: Optional[str] = Field(None, description="Acting user email")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Action payload")
    ip_address: Optional[str] = Field(None, description="Client IP")
    user_agent: Optional[str] = Field(None, description="Client user agent")


class AuditLog(AuditLogCreate):
    """Audit log model as stored in database."""
    
    id: str = Field(default_factory=lambda: str(ObjectId()), validation_alias=AliasChoices("_id", "id"))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AuditLogPage(BaseModel):
    """Paginated audit log query result."""

    logs: List[AuditLog]
    total: int
    limit: int
    offset: int


class EntityLogs(BaseModel):
    """Audit trail of one entity."""

    logs: List[AuditLog]
