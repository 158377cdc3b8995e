"""Application startup and shutdown events."""

import logging

from fastapi import FastAPI

from reviewdesk.core.config import settings
from reviewdesk.db.database import close_mongo_connection, connect_to_mongo, init_collections

logger = logging.getLogger(__name__)


async def startup_event(app: FastAPI) -> None:
    """Application startup event."""
    logger.info(f"Starting {settings.APP_NAME}...")
    
    await connect_to_mongo()
    await init_collections()
    
    logger.info(f"Running {settings.APP_NAME} on {settings.HOST}:{settings.PORT}")
    logger.info(f"MongoDB: {settings.MONGO_URI}")
    logger.info(f"Database: {settings.DATABASE_NAME}")


async def shutdown_event(app: FastAPI) -> None:
    """Application shutdown event."""
    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_mongo_connection()
