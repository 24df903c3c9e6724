"""
User Repository

Data access layer for User model.
All user-related database operations.

This is also the credential store the password-reset flow talks to:
``get_by_email`` and ``update_password_hash`` are exact-match lookups on
the unique email column.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from app.repositories.base import BaseRepository
from app.models import User, ROLE_USER


def normalize_email(email: str) -> str:
    """Canonical form used for storing and looking up emails."""
    return (email or "").strip().lower()


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    # =================
    # Get by email
    # =================
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address."""
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    # =================
    # List regular users
    # =================
    async def list_by_role(
        self,
        role: str = ROLE_USER,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        """Get users with the given role, oldest first."""
        result = await self.db.execute(
            select(User)
            .where(User.role == role)
            .order_by(User.id.asc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    # =================
    # Create user
    # =================
    async def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        profile: str,
        role: str = ROLE_USER,
    ) -> User:
        """Create a new user."""
        return await self.create(
            email=normalize_email(email),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            profile=profile,
            role=role,
        )

    # =================
    # Update password hash
    # =================
    async def update_password_hash(self, email: str, password_hash: str) -> bool:
        """
        Store a new password hash for the account with this email.

        Returns:
            True if a row was updated, False if no account matched

        Raises:
            SQLAlchemyError: if the write or commit fails
        """
        try:
            result = await self.db.execute(
                update(User)
                .where(User.email == normalize_email(email))
                .values(password_hash=password_hash)
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return (result.rowcount or 0) > 0
