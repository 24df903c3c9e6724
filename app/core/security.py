from datetime import datetime, timezone, timedelta
from typing import Any, Union, Optional, Dict
import base64
import hashlib
import logging
import uuid

from jose import JWTError, jwt

# Use bcrypt directly to avoid passlib/bcrypt version conflicts
import bcrypt

# =====================================================
# Application Settings
# =====================================================
from app.core.config import settings
from app.core.exceptions import WeakPasswordError

logger = logging.getLogger(__name__)

BCRYPT_MAX_BYTES = 72


# =====================================================
# Password Hashing Context
# =====================================================
class PasswordContext:
    """
    Password hashing and verification utility.

    Every call to ``hash`` draws a fresh salt, so hashing the same
    plaintext twice gives two different strings. ``verify`` relies on
    bcrypt's constant-time comparison and never raises: a malformed
    stored hash is simply a mismatch.
    """

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds

    @staticmethod
    def _secret(password: str) -> bytes:
        """
        Bytes handed to bcrypt.

        bcrypt only accepts 72 bytes without NUL, so longer passwords (or
        ones containing NUL) are reduced to the base64 of their SHA-256
        digest (44 bytes). Everything else goes through unchanged.
        """
        secret = password.encode("utf-8")
        if len(secret) > BCRYPT_MAX_BYTES or b"\x00" in secret:
            secret = base64.b64encode(hashlib.sha256(secret).digest())
        return secret

    def hash(self, password: str) -> str:
        """
        Hash a plain-text password using bcrypt.
        """
        if not password:
            raise ValueError("Password cannot be empty")
        rounds = self.rounds or settings.BCRYPT_ROUNDS
        return bcrypt.hashpw(
            self._secret(password),
            bcrypt.gensalt(rounds=rounds)
        ).decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a plain-text password against a bcrypt hash.
        """
        if not plain_password or not hashed_password:
            return False
        try:
            return bcrypt.checkpw(
                self._secret(plain_password),
                hashed_password.encode("utf-8")
            )
        except (ValueError, TypeError):
            # Not a bcrypt hash at all (legacy row, truncated column, ...)
            logger.warning("Stored password hash is malformed")
            return False


# Password context instance
pwd_context = PasswordContext()


# =====================================================
# Token Type Constants
# =====================================================
TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"


# =====================================================
# JWT Creation Functions
# =====================================================
def _create_token(
    subject: Union[str, Any],
    token_type: str,
    expires_delta: timedelta
) -> str:
    now = datetime.now(timezone.utc)

    to_encode = {
        "exp": now + expires_delta,
        "sub": str(subject),
        "type": token_type,
        "iat": now,
        "jti": str(uuid.uuid4())
    }

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.
    """
    return _create_token(
        subject,
        TOKEN_TYPE_ACCESS,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )


def create_refresh_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT refresh token.
    """
    return _create_token(
        subject,
        TOKEN_TYPE_REFRESH,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )


# =====================================================
# Token Verification Functions
# =====================================================
def verify_token(
    token: str,
    token_type: str = TOKEN_TYPE_ACCESS
) -> Optional[Dict[str, Any]]:
    """
    Verify a JWT token and return its payload if valid.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )

        if payload.get("type") != token_type:
            return None

        return payload

    except JWTError:
        return None


def verify_access_token(token: str) -> Optional[str]:
    """
    Verify access token and return the subject.
    """
    payload = verify_token(token, TOKEN_TYPE_ACCESS)
    return payload.get("sub") if payload else None


def verify_refresh_token(token: str) -> Optional[str]:
    """
    Verify refresh token and return the subject.
    """
    payload = verify_token(token, TOKEN_TYPE_REFRESH)
    return payload.get("sub") if payload else None


# =====================================================
# Password Utility Functions
# =====================================================
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hashed value.
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password.
    """
    return pwd_context.hash(password)


def ensure_password_strength(password: str) -> None:
    """
    Reject passwords shorter than PASSWORD_MIN_LENGTH.

    Raises:
        WeakPasswordError
    """
    minimum = settings.PASSWORD_MIN_LENGTH
    if len(password or "") < minimum:
        raise WeakPasswordError(f"Password must be at least {minimum} characters")
