from fastapi import HTTPException, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from app.db.database import get_db
from app.models import User
from app.repositories.user_repo import UserRepository
from app.services.auth_service import AuthService
from app.services.challenge_registry import ChallengeRegistry, get_challenge_registry
from app.services.media_service import MediaService
from app.services.movie_service import MovieService
from app.services.notification_service import Notifier, get_notifier
from app.services.password_reset_service import PasswordResetService
from app.services.user_service import UserService
from app.storage import StorageBackend, get_storage

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI
security = HTTPBearer()


# =====================================================
# Service factories
# =====================================================
def get_media_service(storage: StorageBackend = Depends(get_storage)) -> MediaService:
    return MediaService(storage)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    media: MediaService = Depends(get_media_service),
) -> AuthService:
    return AuthService(db, media)


def get_user_service(
    db: AsyncSession = Depends(get_db),
    media: MediaService = Depends(get_media_service),
) -> UserService:
    return UserService(db, media)


def get_movie_service(
    db: AsyncSession = Depends(get_db),
    media: MediaService = Depends(get_media_service),
) -> MovieService:
    return MovieService(db, media)


def get_password_reset_service(
    db: AsyncSession = Depends(get_db),
    registry: ChallengeRegistry = Depends(get_challenge_registry),
    notifier: Notifier = Depends(get_notifier),
) -> PasswordResetService:
    return PasswordResetService(UserRepository(db), registry, notifier)


# =====================================================
# Get Current user
# =====================================================
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Dependency that validates JWT token and returns current user.

    Raises:
        HTTPException 401: If token is invalid or missing
    """
    try:
        return await auth_service.get_current_user(credentials.credentials)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"}
        )


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Dependency that ensures the caller is an admin.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return current_user
