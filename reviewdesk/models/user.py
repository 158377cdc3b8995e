"""User models."""

from typing import Optional
from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, Field

from .base import DocumentBase


class UserRole(str, Enum):
    CREATOR = "CREATOR"
    REVIEWER = "REVIEWER"


class User(DocumentBase):
    """User synced from the identity provider."""

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"), description="Identity provider user ID")
    email: str
    name: Optional[str] = None
    role: UserRole = UserRole.CREATOR
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_reviewer(self) -> bool:
        return self.role == UserRole.REVIEWER
