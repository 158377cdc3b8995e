"""Review models."""

from typing import Optional
from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, BaseModel, Field
from bson import ObjectId

from .base import DocumentBase


class ReviewDecision(str, Enum):
    """Reviewer decision."""
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REQUEST_CHANGES = "REQUEST_CHANGES"


class ReviewCreate(BaseModel):
    """Review submission payload."""
    decision: ReviewDecision = Field(..., description="Review decision")
    comment: Optional[str] = Field(None, max_length=2000, description="Feedback for the author")


class Review(DocumentBase):
    """Review model as stored in database."""

    id: str = Field(default_factory=lambda: str(ObjectId()), validation_alias=AliasChoices("_id", "id"))
    task_id: str = Field(..., description="Reviewed task ID")
    reviewer_id: str = Field(..., description="Reviewer user ID")
    decision: ReviewDecision
    comment: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
