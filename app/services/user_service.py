"""
User Service

Profile edits (by the owner or an admin) and account deletion.

Both paths go through the media lifecycle: the previous profile
picture is read from the locked row being updated and only removed
after the new value is committed.
"""

import logging
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AccountNotFoundError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    MissingFieldsError,
)
from app.core.security import ensure_password_strength, get_password_hash, verify_password
from app.models import User, ROLE_USER
from app.repositories.user_repo import UserRepository, normalize_email
from app.services.media_service import MediaService, profile_slot

logger = logging.getLogger(__name__)


class UserService:
    """Business logic for account management."""

    def __init__(self, db: AsyncSession, media: Optional[MediaService] = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.media = media or MediaService()

    async def list_users(self, skip: int = 0, limit: int = 100) -> List[User]:
        """Regular (non-admin) accounts, oldest first."""
        return await self.user_repo.list_by_role(ROLE_USER, skip=skip, limit=limit)

    # ============================================================
    # Update
    # ============================================================
    async def update_user(
        self,
        user_id: int,
        first_name: str,
        last_name: str,
        email: Optional[str] = None,
        new_password: Optional[str] = None,
        current_password: Optional[str] = None,
        require_current_password: bool = False,
        profile: Optional[UploadFile] = None,
    ) -> User:
        """
        Update names, optionally email, password and profile picture.

        Args:
            require_current_password: self-service edits must prove the
                old password before setting a new one; admin edits don't

        Raises:
            MissingFieldsError, WeakPasswordError, InvalidCredentialsError,
            AccountNotFoundError, EmailAlreadyRegisteredError, InvalidUploadError
        """
        if not (first_name and first_name.strip() and last_name and last_name.strip()):
            raise MissingFieldsError()
        if email is not None and not email.strip():
            raise MissingFieldsError()
        if new_password:
            ensure_password_strength(new_password)

        slot = profile_slot()
        uploaded = await self.media.store_upload(slot, profile)

        try:
            user = await self.user_repo.get_by_id_for_update(user_id)
            if user is None:
                raise AccountNotFoundError("User not found")

            if new_password and require_current_password:
                if not current_password or not verify_password(current_password, user.password_hash):
                    raise InvalidCredentialsError("Current password is incorrect")

            previous_profile = user.profile

            user.first_name = first_name.strip()
            user.last_name = last_name.strip()
            if email is not None:
                user.email = normalize_email(email)
            if new_password:
                user.password_hash = get_password_hash(new_password)
            if uploaded:
                user.profile = uploaded

            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            await self.media.discard_upload(slot, uploaded)
            raise EmailAlreadyRegisteredError()
        except Exception:
            await self.db.rollback()
            await self.media.discard_upload(slot, uploaded)
            raise

        await self.media.replace(slot, previous_profile, uploaded)
        await self.db.refresh(user)

        logger.info(f"User {user_id} updated")
        return user

    # ============================================================
    # Delete
    # ============================================================
    async def delete_user(self, user_id: int) -> None:
        """
        Delete an account, then its profile picture.

        Raises:
            AccountNotFoundError
        """
        user = await self.user_repo.get_by_id_for_update(user_id)
        if user is None:
            raise AccountNotFoundError("User not found")

        profile = user.profile
        await self.db.delete(user)
        await self.db.commit()

        await self.media.delete_all(profile_slot(), profile)
        logger.info(f"User {user_id} deleted")
