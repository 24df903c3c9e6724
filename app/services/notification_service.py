"""
Notification Service

Delivers password reset codes through a side channel.

Backends:
- ``smtp``: sends an email through ``app.utils.email``
- ``log``: writes the code to the application log (development only)

The reset flow wraps every delivery in a timeout and treats a timeout,
an unready notifier or a failed send as "notifier unavailable".
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from app.core.config import settings
from app.utils.email import is_smtp_configured, send_password_reset_code

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Side channel used to hand a reset code to the account owner."""

    @abstractmethod
    def is_ready(self) -> bool:
        """Whether a delivery can be attempted right now."""

    @abstractmethod
    async def deliver(self, target: str, code: str, expires_in_minutes: int) -> bool:
        """
        Deliver ``code`` to ``target``.

        Returns:
            True when the message was handed off, False otherwise
        """


class SmtpNotifier(Notifier):
    """
    Emails the code to the account address.

    The send runs on a worker thread. When the reset flow gives up on a
    slow send, the thread is not interrupted and the mail may still
    arrive; the code it carries has already been discarded and is
    rejected.
    """

    def is_ready(self) -> bool:
        return is_smtp_configured()

    async def deliver(self, target: str, code: str, expires_in_minutes: int) -> bool:
        # smtplib is blocking
        return await asyncio.to_thread(
            send_password_reset_code,
            email=target,
            code=code,
            expires_in_minutes=expires_in_minutes,
        )


class LogNotifier(Notifier):
    """Development notifier: the code ends up in the server log."""

    def is_ready(self) -> bool:
        return True

    async def deliver(self, target: str, code: str, expires_in_minutes: int) -> bool:
        logger.warning(
            f"[dev notifier] reset code for {target}: {code} "
            f"(valid {expires_in_minutes} min)"
        )
        return True


# ============================================================
# Factory
# ============================================================

_notifier_instance: Optional[Notifier] = None


def get_notifier() -> Notifier:
    """Return the configured notifier (singleton)."""
    global _notifier_instance

    if _notifier_instance is None:
        backend = settings.NOTIFIER_BACKEND.lower()
        if backend == "smtp":
            _notifier_instance = SmtpNotifier()
        elif backend == "log":
            _notifier_instance = LogNotifier()
        else:
            raise ValueError(
                f"Unknown notifier backend: {backend}. Valid options: smtp, log"
            )
        logger.info(f"Notifier backend: {backend}")

    return _notifier_instance
