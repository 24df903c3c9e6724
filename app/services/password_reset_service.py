"""
Password Reset Service

Forgot-password flow built on one-time codes.

1. ``request_reset``: the account must exist. A fresh code is minted
   (superseding any pending one) and handed to the notifier.
2. ``reset_password``: the code is checked, the new password is
   checked, then the code is consumed and the new hash is stored.

Consuming and storing are one logical step. If storing fails the code
stays spent and the user has to ask for a new one. Nothing here
retries.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.exceptions import (
    AccountNotFoundError,
    MissingFieldsError,
    NotifierUnavailableError,
    PersistenceError,
)
from app.core.security import PasswordContext, ensure_password_strength, pwd_context
from app.repositories.user_repo import UserRepository
from app.services.challenge_registry import ChallengeRegistry
from app.services.notification_service import Notifier

logger = logging.getLogger(__name__)


@dataclass
class ResetRequestResult:
    """Acknowledgement of a forgot-password request."""
    message: str
    expires_in_minutes: int
    # Only filled in when PASSWORD_RESET_ECHO_CODE is enabled
    code: Optional[str] = None


class PasswordResetService:
    """
    Orchestrates issuance, delivery, verification and consumption of
    reset codes.
    """

    def __init__(
        self,
        accounts: UserRepository,
        registry: ChallengeRegistry,
        notifier: Notifier,
        hasher: PasswordContext = pwd_context,
    ):
        self.accounts = accounts
        self.registry = registry
        self.notifier = notifier
        self.hasher = hasher

    # ============================================================
    # Request a code
    # ============================================================
    async def request_reset(self, email: str) -> ResetRequestResult:
        """
        Issue a reset code for ``email`` and deliver it.

        Raises:
            MissingFieldsError: email is empty
            AccountNotFoundError: no account uses this email
            NotifierUnavailableError: the code could not be delivered
        """
        if not email or not email.strip():
            raise MissingFieldsError("Please enter your email")

        account = await self.accounts.get_by_email(email)
        if account is None:
            raise AccountNotFoundError()

        if not self.notifier.is_ready():
            # Leave any code already delivered untouched
            logger.warning("Notifier not ready, no reset code issued")
            raise NotifierUnavailableError()

        challenge = self.registry.issue(account.email)
        minutes = settings.PASSWORD_RESET_CODE_EXPIRE_MINUTES

        if not await self._deliver(account.email, challenge.code, minutes):
            # Nobody received this code, don't leave it live
            self.registry.discard(account.email, challenge.code)
            raise NotifierUnavailableError()

        return ResetRequestResult(
            message="A reset code has been sent to your email",
            expires_in_minutes=minutes,
            code=challenge.code if settings.PASSWORD_RESET_ECHO_CODE else None,
        )

    async def _deliver(self, target: str, code: str, minutes: int) -> bool:
        try:
            delivered = await asyncio.wait_for(
                self.notifier.deliver(target, code, minutes),
                timeout=settings.NOTIFIER_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Notifier timed out after {settings.NOTIFIER_TIMEOUT_SECONDS}s"
            )
            return False
        except OSError as e:
            logger.error(f"Notifier failed: {e}")
            return False

        if not delivered:
            logger.warning(f"Notifier could not deliver reset code to {target}")
        return bool(delivered)

    # ============================================================
    # Check a code without using it
    # ============================================================
    def verify_code(self, email: str, code: str) -> bool:
        """
        Validate a code without consuming it.

        Raises:
            MissingFieldsError, NoChallengeError, ChallengeExpiredError,
            CodeMismatchError
        """
        if not email or not code:
            raise MissingFieldsError()
        self.registry.check(email, code)
        return True

    # ============================================================
    # Reset the password
    # ============================================================
    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        """
        Replace the account password using a pending reset code.

        The code is validated first. The password is validated next, so
        a weak password does not use up the code. The code is consumed
        before the new hash is written.

        Raises:
            MissingFieldsError, NoChallengeError, ChallengeExpiredError,
            CodeMismatchError, WeakPasswordError, PersistenceError
        """
        if not email or not code or not new_password:
            raise MissingFieldsError()

        self.registry.check(email, code)
        ensure_password_strength(new_password)

        # Atomic: a concurrent reset with the same code gets NoChallengeError
        challenge = self.registry.verify_and_consume(email, code)

        new_hash = self.hasher.hash(new_password)

        try:
            updated = await self.accounts.update_password_hash(challenge.email, new_hash)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store new password for {challenge.email}: {e}")
            raise PersistenceError() from e

        if not updated:
            logger.error(f"Account {challenge.email} disappeared during password reset")
            raise PersistenceError()

        logger.info(f"Password reset completed for {challenge.email}")
