from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.core.exceptions import (
    AccountNotFoundError,
    ChallengeExpiredError,
    CodeMismatchError,
    MissingFieldsError,
    NoChallengeError,
    NotifierUnavailableError,
    PersistenceError,
    WeakPasswordError,
)
from app.core.security import verify_password
from app.repositories.user_repo import UserRepository
from app.services.challenge_registry import InMemoryChallengeRegistry
from app.services.password_reset_service import PasswordResetService


class FailingUserRepository(UserRepository):
    async def update_password_hash(self, email, password_hash):
        raise OperationalError("UPDATE users", {}, Exception("database is locked"))


@pytest.fixture
def service(db_session, registry, notifier):
    return PasswordResetService(UserRepository(db_session), registry, notifier)


async def stored_hash(db_session, email="a@x.com"):
    user = await UserRepository(db_session).get_by_email(email)
    await db_session.refresh(user)
    return user.password_hash


# ============================================================
# Request
# ============================================================

async def test_request_delivers_code(service, notifier, registry, user):
    result = await service.request_reset("a@x.com")

    assert notifier.sent == [("a@x.com", result.code, settings.PASSWORD_RESET_CODE_EXPIRE_MINUTES)]
    assert result.expires_in_minutes == settings.PASSWORD_RESET_CODE_EXPIRE_MINUTES
    assert registry.pending_count() == 1


async def test_request_for_unknown_account(service, notifier, registry):
    with pytest.raises(AccountNotFoundError):
        await service.request_reset("nobody@x.com")

    assert notifier.sent == []
    assert registry.pending_count() == 0


async def test_request_with_empty_email(service):
    with pytest.raises(MissingFieldsError):
        await service.request_reset("  ")


async def test_request_code_hidden_when_echo_disabled(service, user, monkeypatch):
    monkeypatch.setattr(settings, "PASSWORD_RESET_ECHO_CODE", False)

    result = await service.request_reset("a@x.com")

    assert result.code is None


async def test_notifier_not_ready_leaves_no_code(service, notifier, registry, user):
    notifier.ready = False

    with pytest.raises(NotifierUnavailableError):
        await service.request_reset("a@x.com")

    assert registry.pending_count() == 0


async def test_notifier_failure_leaves_no_code(service, notifier, registry, user):
    notifier.result = False

    with pytest.raises(NotifierUnavailableError):
        await service.request_reset("a@x.com")

    assert registry.pending_count() == 0


async def test_notifier_timeout(service, notifier, registry, user, monkeypatch):
    monkeypatch.setattr(settings, "NOTIFIER_TIMEOUT_SECONDS", 0.05)
    notifier.delay = 1.0

    with pytest.raises(NotifierUnavailableError):
        await service.request_reset("a@x.com")

    assert registry.pending_count() == 0


async def test_second_request_supersedes_first(db_session, clock, notifier, user):
    codes = iter(["111111", "222222"])
    registry = InMemoryChallengeRegistry(
        ttl=timedelta(minutes=5), clock=clock, code_factory=lambda: next(codes)
    )
    service = PasswordResetService(UserRepository(db_session), registry, notifier)

    await service.request_reset("a@x.com")
    await service.request_reset("a@x.com")

    with pytest.raises(NoChallengeError):
        await service.reset_password("a@x.com", "111111", "newpass1")
    await service.reset_password("a@x.com", "222222", "newpass1")


# ============================================================
# Reset
# ============================================================

async def test_reset_replaces_password(service, notifier, db_session, user):
    await service.request_reset("a@x.com")

    await service.reset_password("a@x.com", notifier.last_code, "newpass1")

    new_hash = await stored_hash(db_session)
    assert verify_password("newpass1", new_hash)
    assert not verify_password("oldpass1", new_hash)


async def test_code_cannot_be_replayed(service, notifier, user):
    await service.request_reset("a@x.com")
    code = notifier.last_code

    await service.reset_password("a@x.com", code, "newpass1")

    with pytest.raises(NoChallengeError):
        await service.reset_password("a@x.com", code, "otherpass")


async def test_expired_code(db_session, clock, notifier, user):
    registry = InMemoryChallengeRegistry(
        ttl=timedelta(minutes=5), clock=clock, code_factory=lambda: "482913"
    )
    service = PasswordResetService(UserRepository(db_session), registry, notifier)

    await service.request_reset("a@x.com")
    clock.advance(minutes=6)

    with pytest.raises(ChallengeExpiredError):
        await service.reset_password("a@x.com", "482913", "newpass1")
    with pytest.raises(NoChallengeError):
        await service.reset_password("a@x.com", "482913", "newpass1")

    assert verify_password("oldpass1", await stored_hash(db_session))


async def test_wrong_code_then_right_code(service, notifier, db_session, user):
    await service.request_reset("a@x.com")
    code = notifier.last_code
    wrong = "000000" if code != "000000" else "111111"

    with pytest.raises(CodeMismatchError):
        await service.reset_password("a@x.com", wrong, "newpass1")
    assert verify_password("oldpass1", await stored_hash(db_session))

    await service.reset_password("a@x.com", code, "newpass1")
    assert verify_password("newpass1", await stored_hash(db_session))


async def test_weak_password_keeps_code_usable(service, notifier, db_session, user):
    await service.request_reset("a@x.com")
    code = notifier.last_code

    with pytest.raises(WeakPasswordError):
        await service.reset_password("a@x.com", code, "abc")
    assert verify_password("oldpass1", await stored_hash(db_session))

    await service.reset_password("a@x.com", code, "abcdef")
    assert verify_password("abcdef", await stored_hash(db_session))


async def test_bad_code_reported_before_weak_password(service, user):
    with pytest.raises(NoChallengeError):
        await service.reset_password("a@x.com", "123456", "abc")


@pytest.mark.parametrize("email,code,password", [
    ("", "123456", "newpass1"),
    ("a@x.com", "", "newpass1"),
    ("a@x.com", "123456", ""),
])
async def test_reset_missing_fields(service, email, code, password):
    with pytest.raises(MissingFieldsError):
        await service.reset_password(email, code, password)


async def test_persistence_failure_spends_code(db_session, registry, notifier, user):
    service = PasswordResetService(FailingUserRepository(db_session), registry, notifier)
    await service.request_reset("a@x.com")
    code = notifier.last_code

    with pytest.raises(PersistenceError):
        await service.reset_password("a@x.com", code, "newpass1")

    with pytest.raises(NoChallengeError):
        registry.check("a@x.com", code)


async def test_verify_code_does_not_consume(service, notifier, user):
    await service.request_reset("a@x.com")
    code = notifier.last_code

    assert service.verify_code("a@x.com", code) is True
    await service.reset_password("a@x.com", code, "newpass1")


async def test_reset_accepts_password_longer_than_bcrypt_limit(service, notifier, db_session, user):
    await service.request_reset("a@x.com")
    long_password = "long-passphrase-" * 6

    await service.reset_password("a@x.com", notifier.last_code, long_password)

    assert verify_password(long_password, await stored_hash(db_session))


async def test_outage_keeps_previously_delivered_code(service, notifier, registry, user):
    await service.request_reset("a@x.com")
    delivered = notifier.last_code
    notifier.ready = False

    with pytest.raises(NotifierUnavailableError):
        await service.request_reset("a@x.com")

    assert len(notifier.sent) == 1
    registry.check("a@x.com", delivered)


async def test_code_from_timed_out_delivery_is_dead(db_session, clock, notifier, user, monkeypatch):
    monkeypatch.setattr(settings, "NOTIFIER_TIMEOUT_SECONDS", 0.05)
    registry = InMemoryChallengeRegistry(
        ttl=timedelta(minutes=5), clock=clock, code_factory=lambda: "482913"
    )
    service = PasswordResetService(UserRepository(db_session), registry, notifier)
    notifier.delay = 1.0

    with pytest.raises(NotifierUnavailableError):
        await service.request_reset("a@x.com")

    # A mail that still arrives late carries a code that no longer works
    with pytest.raises(NoChallengeError):
        await service.reset_password("a@x.com", "482913", "newpass1")
