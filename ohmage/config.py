"""
Application configuration
"""
import os
from typing import Optional


class Settings:
    """Application settings, read from the environment"""
    
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL", "")
    DATABASE_SSLMODE: Optional[str] = os.getenv("DATABASE_SSLMODE")
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", "10"))
    DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", "20"))
    
    # Domain modules log through the logging module
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    
    # Upload limits
    MAX_SURVEY_UPLOAD: int = int(os.getenv("MAX_SURVEY_UPLOAD", "100"))
    MAX_MOBILITY_UPLOAD: int = int(os.getenv("MAX_MOBILITY_UPLOAD", "1000"))
    
    # CORS settings
    CORS_ORIGINS: list = ["*"]  # Mobile clients and dashboards
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list = ["*"]
    CORS_ALLOW_HEADERS: list = ["*"]


settings = Settings()
