"""Application configuration."""

import os
from typing import List
from pydantic_settings import BaseSettings
from pydantic import ConfigDict


class Settings(BaseSettings):
    """Application settings."""
    
    # App settings
    APP_NAME: str = "Review Desk"
    VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "4000"))
    LOG_LEVEL: str = "INFO"
    
    # CORS
    ALLOWED_HOSTS: List[str] = ["http://localhost:3000"]
    
    # MongoDB
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "reviewdesk")
    
    # Users synced with the reviewer role
    REVIEWER_IDS: List[str] = []
    
    # Audit log settings
    AUDIT_LOG_PAGE_SIZE: int = 50
    API_PREFIX: str = "/api"

    model_config = ConfigDict(env_file=".env")


settings = Settings()
