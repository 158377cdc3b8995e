"""Task versioning models."""

from typing import Any, List, Literal, Optional
from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, computed_field
from bson import ObjectId

from .base import DocumentBase
from .task import TaskContent, TaskState


class ChangeType(str, Enum):
    """Mutation that produced a version."""
    CREATED = "created"
    UPDATED = "updated"
    SUBMITTED = "submitted"
    REVIEW_STARTED = "review_started"
    REVIEW_APPROVE = "review_approve"
    REVIEW_REJECT = "review_reject"
    REVIEW_REQUEST_CHANGES = "review_request_changes"

    @classmethod
    def for_decision(cls, decision: str) -> "ChangeType":
        return cls(f"review_{decision.lower()}")


class TaskVersion(DocumentBase):
    """Immutable snapshot of a task at one version."""
    
    id: str = Field(default_factory=lambda: str(ObjectId()), validation_alias=AliasChoices("_id", "id"))
    task_id: str = Field(..., description="Task ID")
    version: int = Field(..., ge=1, description="Version number, gap-free from 1")
    state: TaskState = Field(..., description="Workflow state at this version")
    content: TaskContent = Field(..., description="Full task content snapshot")
    changed_by: str = Field(..., description="User who made the change")
    change_type: ChangeType = Field(..., description="Mutation that produced this version")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class FieldChange(BaseModel):
    """A single content field that differs between two versions."""
    field: str
    old_value: Any = None
    new_value: Any = None
    type: Literal["added", "removed", "modified"]


class TaskDiff(BaseModel):
    """Field-level differences between two versions of a task."""
    task_id: str
    from_version: int
    to_version: int
    from_state: TaskState
    to_state: TaskState
    changes: List[FieldChange] = Field(default_factory=list)
    changed_by: str
    changed_at: datetime

    @computed_field
    @property
    def is_empty(self) -> bool:
        return not self.changes


class ResubmissionPair(BaseModel):
    """Nearest adjacent pair of versions with a content change."""
    previous: TaskVersion
    current: TaskVersion


class DiffResponse(BaseModel):
    """Diff endpoint payload; ``diff`` is null when no diff is available."""
    diff: Optional[TaskDiff] = None
    message: Optional[str] = None


class ContentChangesResponse(BaseModel):
    task_id: str
    has_content_changes: bool


class TaskHistory(BaseModel):
    """All versions of a task, oldest first."""
    history: List[TaskVersion]
