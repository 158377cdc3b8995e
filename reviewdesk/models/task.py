"""Task data models."""

from typing import List, Optional, Tuple
from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from bson import ObjectId

from .base import DocumentBase
from .review import Review


class TaskState(str, Enum):
    """Task workflow state."""
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"


class Difficulty(str, Enum):
    """Task difficulty level."""
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class TaskContent(BaseModel):
    """Authored content of a task.

    Field declaration order is the order diffs are reported in.
    """

    title: str = Field(..., min_length=1, max_length=200, description="Task title")
    instruction: str = Field(..., min_length=1, max_length=10000, description="Instruction given to the agent")
    difficulty: Difficulty = Field(..., description="Difficulty level")
    categories: str = Field(..., min_length=1, max_length=200, description="Comma separated categories")
    max_agent_timeout_sec: int = Field(300, ge=1, le=3600, description="Agent timeout in seconds")
    max_test_timeout_sec: int = Field(60, ge=1, le=600, description="Test timeout in seconds")
    task_yaml: Optional[str] = Field(None, description="task.yaml contents")
    docker_compose_yaml: Optional[str] = Field(None, description="docker-compose.yaml contents")
    solution_sh: Optional[str] = Field(None, description="solution.sh contents")
    run_tests_sh: Optional[str] = Field(None, description="run-tests.sh contents")
    tests_json: Optional[str] = Field(None, description="Test definitions as JSON")

    model_config = ConfigDict(use_enum_values=True)


CONTENT_FIELDS: Tuple[str, ...] = tuple(TaskContent.model_fields)
CLEARABLE_FIELDS = frozenset(
    field for field, info in TaskContent.model_fields.items() if not info.is_required() and info.default is None
)


class TaskCreate(TaskContent):
    """Task creation model."""


class TaskUpdate(BaseModel):
    """Task update model. Only the provided fields are changed."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    instruction: Optional[str] = Field(None, min_length=1, max_length=10000)
    difficulty: Optional[Difficulty] = None
    categories: Optional[str] = Field(None, min_length=1, max_length=200)
    max_agent_timeout_sec: Optional[int] = Field(None, ge=1, le=3600)
    max_test_timeout_sec: Optional[int] = Field(None, ge=1, le=600)
    task_yaml: Optional[str] = None
    docker_compose_yaml: Optional[str] = None
    solution_sh: Optional[str] = None
    run_tests_sh: Optional[str] = None
    tests_json: Optional[str] = None
    expected_version: Optional[int] = Field(None, ge=1, description="Optimistic lock: version the edit was based on")

    model_config = ConfigDict(use_enum_values=True)

    def content_changes(self) -> dict:
        """Content fields explicitly set on this update.

        Explicit nulls only clear the optional script fields.
        """
        changes = self.model_dump(exclude_unset=True, exclude={"expected_version"})
        return {
            field: value for field, value in changes.items()
            if value is not None or field in CLEARABLE_FIELDS
        }


class Task(TaskContent, DocumentBase):
    """Task model as stored in database."""
    
    id: str = Field(default_factory=lambda: str(ObjectId()), validation_alias=AliasChoices("_id", "id"))
    state: TaskState = Field(default=TaskState.DRAFT, description="Workflow state")
    author_id: str = Field(..., description="Author user ID")
    reviewer_id: Optional[str] = Field(None, description="Assigned reviewer user ID")
    version: int = Field(default=1, ge=1, description="Current version number")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: Optional[datetime] = Field(None, description="Soft delete time")

    model_config = ConfigDict(validate_by_name=True, use_enum_values=True)

    def content(self) -> TaskContent:
        return TaskContent(**self.model_dump(include=set(CONTENT_FIELDS)))


class TaskDetail(Task):
    """Task with its reviews, newest first."""

    reviews: List[Review] = Field(default_factory=list)
