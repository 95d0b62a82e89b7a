"""
User service - maps Firebase identities to ohmage users
"""
from typing import Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ohmage.database.queries import execute_with_retry


class UserService:
    """Service for user-related operations"""
    
    @staticmethod
    async def get_or_create_user(session: AsyncSession, firebase_uid: str, email: Optional[str] = None) -> str:
        """
        Get or create the user for a verified token
        
        Args:
            session: Database session
            firebase_uid: The token's uid claim
            email: The token's email claim, stored as the user's name
            
        Returns:
            User ID (UUID as string)
        """
        result = await execute_with_retry(
            session,
            text("""
                INSERT INTO users (firebase_uid, email)
                VALUES (:uid, :email)
                ON CONFLICT (firebase_uid) DO UPDATE
                    SET email = COALESCE(EXCLUDED.email, users.email)
                RETURNING id
            """).bindparams(uid=firebase_uid, email=email)
        )
        return str(result.first()[0])
