import logging
from typing import Optional

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User, ROLE_USER
from app.repositories.user_repo import UserRepository
from app.schemas.auth import TokenResponse, UserResponse, TokenRefreshResponse
from app.core.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    MissingFieldsError,
)
from app.core.security import (
    ensure_password_strength,
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    verify_access_token,
    verify_refresh_token,
)
from app.services.media_service import MediaService, profile_slot
from app.core.config import settings

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service class for authentication operations.
    """
    def __init__(self, db: AsyncSession, media: Optional[MediaService] = None):
        """
        Args:
            db: AsyncSession instance
            media: Asset lifecycle helper (only needed for registration)
        """
        self.db = db
        self.user_repo = UserRepository(db)
        self._media = media

    @property
    def media(self) -> MediaService:
        if self._media is None:
            self._media = MediaService()
        return self._media

    # ============================================================
    # User Registration
    # ============================================================
    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        profile: Optional[UploadFile] = None,
    ) -> User:
        """
        Register a new user with an optional profile picture.

        Raises:
            MissingFieldsError: a required field is empty
            WeakPasswordError: password too short
            EmailAlreadyRegisteredError: email already in use
            InvalidUploadError: profile picture is not an image
        """
        if not all(v and v.strip() for v in (first_name, last_name, email, password)):
            raise MissingFieldsError()

        ensure_password_strength(password)

        if await self.user_repo.get_by_email(email):
            raise EmailAlreadyRegisteredError()

        slot = profile_slot()
        uploaded = await self.media.store_upload(slot, profile)

        try:
            user = await self.user_repo.create_user(
                email=email,
                password_hash=get_password_hash(password),
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                profile=uploaded or slot.placeholder,
                role=ROLE_USER,
            )
        except IntegrityError:
            # Lost a race with another registration for this email
            await self.db.rollback()
            await self.media.discard_upload(slot, uploaded)
            raise EmailAlreadyRegisteredError()
        except Exception:
            await self.db.rollback()
            await self.media.discard_upload(slot, uploaded)
            raise

        logger.info(f"User registered: {user.email} (id={user.id})")
        return user

    # ============================================================
    # User Login
    # ============================================================
    async def login(self, email: str, password: str) -> TokenResponse:
        """
        Authenticate user and return tokens.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """
        user = await self.user_repo.get_by_email(email)

        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        return self._create_token_response(user)

    # ============================================================
    # Token Refresh
    # ============================================================
    async def refresh_token(self, refresh_token: str) -> TokenRefreshResponse:
        """
        Create new access token from refresh token.

        Raises:
            InvalidCredentialsError: If refresh token is invalid
        """
        subject = verify_refresh_token(refresh_token)

        try:
            user_id = int(subject)
        except (TypeError, ValueError):
            raise InvalidCredentialsError("Invalid or expired refresh token")

        user = await self.user_repo.get_by_id(user_id)

        if not user:
            raise InvalidCredentialsError("User not found")

        return TokenRefreshResponse(
            access_token=create_access_token(subject=str(user.id)),
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        )

    # ============================================================
    # Get Current User
    # ============================================================
    async def get_current_user(self, token: str) -> User:
        """
        Get user from access token.

        Raises:
            ValueError: If token is invalid
        """
        subject = verify_access_token(token)

        if not subject:
            raise ValueError("Invalid or expired token")

        try:
            user_id = int(subject)
        except (TypeError, ValueError):
            raise ValueError("Invalid token subject")

        user = await self.user_repo.get_by_id(user_id)

        if not user:
            raise ValueError("User not found")

        return user

    # ============================================================
    # Helper Methods
    # ============================================================
    def _create_token_response(self, user: User) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(subject=str(user.id)),
            refresh_token=create_refresh_token(subject=str(user.id)),
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserResponse.model_validate(user),
        )
