"""Data models for the review service."""

from .task import Task, TaskContent, TaskCreate, TaskUpdate, TaskDetail, TaskState, Difficulty, CONTENT_FIELDS
from .version import TaskVersion, TaskHistory, TaskDiff, FieldChange, ResubmissionPair, DiffResponse, ContentChangesResponse, ChangeType
from .review import Review, ReviewCreate, ReviewDecision
from .audit import AuditLog, EntityLogs, AuditLogCreate, AuditLogPage, AuditAction
from .user import User, UserRole

__all__ = [
    "Task",
    "TaskContent",
    "TaskCreate", 
    "TaskUpdate",
    "TaskDetail",
    "TaskState",
    "Difficulty",
    "CONTENT_FIELDS",
    "TaskVersion",
    "TaskHistory",
    "TaskDiff",
    "FieldChange",
    "ResubmissionPair",
    "DiffResponse",
    "ContentChangesResponse",
    "ChangeType",
    "Review",
    "ReviewCreate",
    "ReviewDecision",
    "AuditLog",
    "EntityLogs",
    "AuditLogCreate",
    "AuditLogPage",
    "AuditAction",
    "User",
    "UserRole",
]
