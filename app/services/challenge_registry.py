"""
Password Reset Challenge Registry

Holds the one pending reset code per email address.

Lifecycle of a key::

    NONE -> PENDING -> (CONSUMED | EXPIRED | SUPERSEDED) -> NONE

- ``issue`` mints a fresh 6-digit code and overwrites whatever was
  pending for that email. The previous code stops working at once.
- ``verify_and_consume`` succeeds exactly once for the right code
  before expiry. A wrong code leaves the challenge in place. An
  expired challenge is dropped and reported as expired one time (even
  when housekeeping evicted it first), and after that there is simply
  no challenge.

The registry is an injectable strategy (see ``get_challenge_registry``).
The shipped backend keeps everything in process memory, so a restart
invalidates all outstanding codes.
"""

import logging
import secrets
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple

from app.core.config import settings
from app.core.exceptions import (
    ChallengeExpiredError,
    CodeMismatchError,
    NoChallengeError,
)
from app.repositories.user_repo import normalize_email

logger = logging.getLogger(__name__)

CODE_LENGTH = 6

# How many replaced codes are remembered per email
MAX_SUPERSEDED_CODES = 10

# How long an evicted, expired challenge keeps answering "expired"
EXPIRED_MARKER_TTL = timedelta(hours=24)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_reset_code() -> str:
    """Generate a uniformly random 6-digit code, zero padded."""
    return ''.join(str(secrets.randbelow(10)) for _ in range(CODE_LENGTH))


@dataclass(frozen=True)
class ResetChallenge:
    """A pending reset code for one email."""
    email: str
    code: str
    issued_at: datetime
    expires_at: datetime
    # Codes this challenge replaced; submitting one reports "no challenge"
    superseded_codes: Tuple[str, ...] = ()

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class ChallengeRegistry(ABC):
    """
    Interface every challenge registry backend implements.

    Failures are raised as ``NoChallengeError``, ``ChallengeExpiredError``
    or ``CodeMismatchError``; success returns normally.
    """

    @abstractmethod
    def issue(self, email: str) -> ResetChallenge:
        """Mint a challenge for ``email``, superseding any pending one."""

    @abstractmethod
    def check(self, email: str, code: str) -> ResetChallenge:
        """Validate ``code`` without consuming it."""

    @abstractmethod
    def verify_and_consume(self, email: str, code: str) -> ResetChallenge:
        """Validate ``code`` and remove the challenge on success."""

    @abstractmethod
    def discard(self, email: str, code: Optional[str] = None) -> bool:
        """
        Drop the pending challenge for ``email``.

        With ``code`` given, only a challenge carrying that code is
        dropped, so a newer issuance is left alone.
        """

    def purge_expired(self) -> int:
        """Remove expired challenges. Returns how many were removed."""
        return 0


class InMemoryChallengeRegistry(ChallengeRegistry):
    """
    Process-local registry.

    A single lock guards the whole map. Reset traffic is low, so there
    is no need for per-key locks, and issue/consume on the same email
    can never interleave.
    """

    def __init__(
        self,
        ttl: Optional[timedelta] = None,
        clock: Clock = utc_now,
        code_factory: Callable[[], str] = generate_reset_code,
        expired_marker_ttl: timedelta = EXPIRED_MARKER_TTL,
    ):
        self.ttl = ttl or timedelta(minutes=settings.PASSWORD_RESET_CODE_EXPIRE_MINUTES)
        self._clock = clock
        self._code_factory = code_factory
        self._challenges: Dict[str, ResetChallenge] = {}
        # email -> expiry of a challenge that was purged before anyone asked
        self._expired: Dict[str, datetime] = {}
        self._expired_marker_ttl = expired_marker_ttl
        self._lock = threading.Lock()

    # =================
    # Issue
    # =================
    def issue(self, email: str) -> ResetChallenge:
        key = normalize_email(email)
        now = self._clock()
        code = self._code_factory()

        with self._lock:
            self._purge_expired_locked(now)
            self._expired.pop(key, None)
            superseded = self._challenges.get(key)

            replaced: Tuple[str, ...] = ()
            if superseded is not None:
                replaced = superseded.superseded_codes + (superseded.code,)
                replaced = tuple(c for c in replaced if c != code)[-MAX_SUPERSEDED_CODES:]

            challenge = ResetChallenge(
                email=key,
                code=code,
                issued_at=now,
                expires_at=now + self.ttl,
                superseded_codes=replaced,
            )
            self._challenges[key] = challenge

        if superseded is not None:
            logger.info(f"Reset challenge superseded for {key}")
        logger.info(f"Reset challenge issued for {key}, expires at {challenge.expires_at.isoformat()}")
        return challenge

    # =================
    # Check (non-consuming)
    # =================
    def check(self, email: str, code: str) -> ResetChallenge:
        key = normalize_email(email)
        with self._lock:
            return self._validate_locked(key, code)

    # =================
    # Verify and consume
    # =================
    def verify_and_consume(self, email: str, code: str) -> ResetChallenge:
        key = normalize_email(email)
        with self._lock:
            challenge = self._validate_locked(key, code)
            del self._challenges[key]

        logger.info(f"Reset challenge consumed for {key}")
        return challenge

    # =================
    # Discard
    # =================
    def discard(self, email: str, code: Optional[str] = None) -> bool:
        key = normalize_email(email)
        with self._lock:
            current = self._challenges.get(key)
            if current is None or (code is not None and current.code != code):
                return False
            del self._challenges[key]
            return True

    # =================
    # Housekeeping
    # =================
    def purge_expired(self) -> int:
        with self._lock:
            return self._purge_expired_locked(self._clock())

    def pending_count(self) -> int:
        with self._lock:
            return len(self._challenges)

    def _purge_expired_locked(self, now: datetime) -> int:
        """
        Evict expired challenges, leaving a marker so the owner's next
        lookup still reports "expired" rather than "no challenge".
        """
        expired = [k for k, c in self._challenges.items() if c.is_expired(now)]
        for key in expired:
            self._expired[key] = self._challenges.pop(key).expires_at

        horizon = now - self._expired_marker_ttl
        for key in [k for k, at in self._expired.items() if at < horizon]:
            del self._expired[key]

        return len(expired)

    def _validate_locked(self, key: str, code: str) -> ResetChallenge:
        """Must be called with ``self._lock`` held."""
        challenge = self._challenges.get(key)
        if challenge is None:
            if self._expired.pop(key, None) is not None:
                logger.info(f"Reset challenge expired for {key}")
                raise ChallengeExpiredError()
            raise NoChallengeError()

        if challenge.is_expired(self._clock()):
            del self._challenges[key]
            logger.info(f"Reset challenge expired for {key}")
            raise ChallengeExpiredError()

        submitted = str(code or "").strip().encode("utf-8")
        if not secrets.compare_digest(challenge.code.encode("utf-8"), submitted):
            # A replaced code is dead, not a typo of the live one
            if any(secrets.compare_digest(old.encode("utf-8"), submitted)
                   for old in challenge.superseded_codes):
                raise NoChallengeError("This code was replaced by a newer one, use the latest code")
            raise CodeMismatchError()

        return challenge


# ============================================================
# Factory
# ============================================================

_registry_instance: Optional[ChallengeRegistry] = None


def get_challenge_registry() -> ChallengeRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry_instance

    if _registry_instance is None:
        _registry_instance = InMemoryChallengeRegistry()

    return _registry_instance
