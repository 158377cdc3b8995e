"""Database connection and utilities for Motor."""

from typing import Optional, Protocol, cast
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorDatabase,
    AsyncIOMotorCollection,
)
from pymongo import ASCENDING, DESCENDING
import logging

from reviewdesk.core.config import settings

logger = logging.getLogger(__name__)


class ReviewDatabase(Protocol):
    """Structural typing for the collections used by the services."""

    tasks: AsyncIOMotorCollection
    task_versions: AsyncIOMotorCollection
    reviews: AsyncIOMotorCollection
    audit_logs: AsyncIOMotorCollection
    users: AsyncIOMotorCollection


class DatabaseManager:
    """Database connection manager."""
    
    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
    
    async def connect_to_mongo(self):
        """Connect to MongoDB."""
        logger.info(f"Connecting to MongoDB at {settings.MONGO_URI}")
        self.client = AsyncIOMotorClient(settings.MONGO_URI)
        self.database = self.client[settings.DATABASE_NAME]
        
        try:
            await self.client.admin.command('ping')
            logger.info("Successfully connected to MongoDB")
        except Exception as e:
            logger.error(f"Error connecting to MongoDB: {e}")
            raise
    
    async def close_mongo_connection(self):
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("Disconnected from MongoDB")
    
    def get_database(self) -> AsyncIOMotorDatabase:
        """Get the database instance."""
        if self.database is None:
            raise RuntimeError("Database not connected")
        return self.database


db_manager = DatabaseManager()


async def connect_to_mongo():
    await db_manager.connect_to_mongo()


async def close_mongo_connection():
    await db_manager.close_mongo_connection()


def get_database() -> AsyncIOMotorDatabase:
    """Get the database instance."""
    return db_manager.get_database()


async def get_async_database() -> AsyncIOMotorDatabase:
    """Get database with auto-connect (for FastAPI routes)."""
    if db_manager.database is None:
        await db_manager.connect_to_mongo()
    return db_manager.database


async def init_collections(database: Optional[AsyncIOMotorDatabase] = None):
    """Initialize collections with indexes."""
    db = cast(ReviewDatabase, database if database is not None else get_database())
    
    await db.tasks.create_index([("author_id", ASCENDING), ("created_at", DESCENDING)])
    await db.tasks.create_index([("state", ASCENDING), ("updated_at", DESCENDING)])
    
    # One snapshot per (task, version); a concurrent writer that reuses a number fails here
    await db.task_versions.create_index(
        [("task_id", ASCENDING), ("version", ASCENDING)],
        unique=True,
        name="task_versions_task_version_unique",
    )
    
    await db.reviews.create_index([("task_id", ASCENDING), ("created_at", DESCENDING)])
    await db.reviews.create_index([("reviewer_id", ASCENDING)])
    
    await db.audit_logs.create_index([("entity_type", ASCENDING), ("entity_id", ASCENDING)])
    await db.audit_logs.create_index([("user_id", ASCENDING)])
    await db.audit_logs.create_index([("action", ASCENDING)])
    await db.audit_logs.create_index([("created_at", DESCENDING)])
    
    logger.info("Database collections and indexes initialized")
