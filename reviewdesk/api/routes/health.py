"""Health check endpoint."""

import logging

from fastapi import APIRouter

from reviewdesk.core.config import settings
from reviewdesk.db.database import db_manager

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """Health check endpoint - verifies database connectivity."""
    try:
        if db_manager.database is None:
            await db_manager.connect_to_mongo()
        await db_manager.client.admin.command('ping')

        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "database": "connected",
        }
    except Exception as e:
        logger.warning(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "service": settings.APP_NAME,
            "database": "disconnected",
            "error": str(e),
        }
