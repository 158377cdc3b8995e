"""Audit log service."""

import logging
from typing import Any, Dict, List, Optional, cast

from bson import ObjectId
from pymongo import DESCENDING

from reviewdesk.core.config import settings
from reviewdesk.db.database import get_database, ReviewDatabase
from reviewdesk.models.audit import AuditAction, AuditLog, AuditLogCreate, AuditLogPage
from reviewdesk.models.user import User

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


class AuditService:
    """Creates and queries audit log entries."""

    def __init__(self, database: Optional[ReviewDatabase] = None):
        self.db: ReviewDatabase = database if database is not None else cast(ReviewDatabase, get_database())

    async def log(self, entry: AuditLogCreate) -> AuditLog:
        """Append an audit log entry."""
        audit_log = AuditLog(**entry.model_dump())
        document = audit_log.model_dump(exclude={"id"})
        document["_id"] = ObjectId(audit_log.id)
        await self.db.audit_logs.insert_one(document)
        return audit_log

    async def log_action(
        self,
        action: AuditAction,
        entity_type: str,
        entity_id: str,
        user: User,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        """Shortcut for entries made on behalf of a synced user."""
        return await self.log(AuditLogCreate(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user.id,
            user_name=user.name,
            user_email=user.email,
            metadata=metadata or {},
        ))

    async def get_logs(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        user_id: Optional[str] = None,
        action: Optional[AuditAction] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> AuditLogPage:
        """Audit logs with optional filtering, newest first."""
        limit = limit or settings.AUDIT_LOG_PAGE_SIZE

        query: Dict[str, Any] = {}
        if entity_type:
            query["entity_type"] = entity_type
        if entity_id:
            query["entity_id"] = entity_id
        if user_id:
            query["user_id"] = user_id
        if action:
            query["action"] = AuditAction(action).value

        cursor = self.db.audit_logs.find(query).sort(NEWEST_FIRST).skip(offset).limit(limit)
        logs = [AuditLog.from_mongo(doc) async for doc in cursor]
        total = await self.db.audit_logs.count_documents(query)

        return AuditLogPage(logs=logs, total=total, limit=limit, offset=offset)

    async def get_entity_logs(self, entity_type: str, entity_id: str) -> List[AuditLog]:
        """All audit logs for one entity, newest first."""
        cursor = self.db.audit_logs.find({
            "entity_type": entity_type,
            "entity_id": entity_id,
        }).sort(NEWEST_FIRST)
        return [AuditLog.from_mongo(doc) async for doc in cursor]

    async def get_user_logs(self, user_id: str, limit: Optional[int] = None) -> List[AuditLog]:
        """Most recent audit logs written by one user."""
        cursor = self.db.audit_logs.find({"user_id": user_id}).sort(NEWEST_FIRST).limit(
            limit or settings.AUDIT_LOG_PAGE_SIZE
        )
        return [AuditLog.from_mongo(doc) async for doc in cursor]
