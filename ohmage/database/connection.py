"""
Database connection management
"""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from fastapi import HTTPException

from ohmage.config import settings
from ohmage.utils.url_builder import build_async_url, ssl_required


# Global database objects
engine: Optional[AsyncEngine] = None
async_session: Optional[sessionmaker] = None


def init_database(database_url: Optional[str] = None) -> bool:
    """
    Create the async engine and session factory
    
    Args:
        database_url: Overrides DATABASE_URL from the settings
    
    Returns:
        True if initialization successful, False otherwise
    """
    global engine, async_session
    
    database_url = database_url or settings.DATABASE_URL
    if not database_url:
        print("Warning: DATABASE_URL not set, uploads and queries will be unavailable")
        return False
    
    try:
        connect_args = {
            "server_settings": {"application_name": "ohmage"},
            "command_timeout": 60,
            "timeout": 20,
        }
        if ssl_required(database_url, settings.DATABASE_SSLMODE):
            connect_args["ssl"] = True
        
        engine = create_async_engine(
            build_async_url(database_url),
            pool_pre_ping=True,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_recycle=3600,
            pool_timeout=30,
            connect_args=connect_args,
            echo=False,
        )
        async_session = sessionmaker(
            bind=engine,
            expire_on_commit=False,
            class_=AsyncSession
        )
        
        print("Database engine initialized successfully")
        return True
        
    except Exception as e:
        print(f"Warning: Failed to initialize database engine: {e}")
        import traceback
        traceback.print_exc()
        engine = None
        async_session = None
        return False


async def dispose_database() -> None:
    """Close every pooled connection (application shutdown)"""
    global engine, async_session
    if engine is not None:
        await engine.dispose()
        print("Database engine disposed")
    engine = None
    async_session = None


def is_initialized() -> bool:
    """
    Check if database is initialized
    
    Returns:
        True if initialized, False otherwise
    """
    return engine is not None and async_session is not None


def require_session() -> sessionmaker:
    """
    Session maker for a request that needs the database
    
    Raises:
        HTTPException: 503 if the database is not configured
    """
    if not is_initialized() or async_session is None:
        raise HTTPException(status_code=503, detail="Database not configured")
    return async_session
