import asyncio
import os
import tempfile
from datetime import datetime, timedelta, timezone

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("NOTIFIER_BACKEND", "log")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="movie-stream-uploads-"))
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token, get_password_hash
from app.db.database import Base, get_db
from app.main import app
from app.models import ROLE_ADMIN, ROLE_USER, User
from app.repositories.user_repo import UserRepository
from app.services.challenge_registry import InMemoryChallengeRegistry, get_challenge_registry
from app.services.media_service import MediaService
from app.services.notification_service import Notifier, get_notifier
from app.storage import LocalStorage, get_storage

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01" + b"\x00" * 64
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00" * 64


class FakeClock:
    """Controllable replacement for the registry clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier(Notifier):
    """Notifier double that remembers what it was asked to send."""

    def __init__(self):
        self.ready = True
        self.result = True
        self.delay = 0.0
        self.sent = []

    def is_ready(self) -> bool:
        return self.ready

    async def deliver(self, target: str, code: str, expires_in_minutes: int) -> bool:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.sent.append((target, code, expires_in_minutes))
        return self.result

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


# ============================================================
# Database
# ============================================================

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ============================================================
# Collaborators
# ============================================================

@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "uploads"))


@pytest.fixture
def media(storage):
    return MediaService(storage)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def registry(clock):
    return InMemoryChallengeRegistry(ttl=timedelta(minutes=5), clock=clock)


@pytest.fixture
def notifier():
    return RecordingNotifier()


# ============================================================
# HTTP client
# ============================================================

@pytest.fixture
async def client(session_factory, storage, registry, notifier):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_challenge_registry] = lambda: registry
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================
# Helpers
# ============================================================

async def create_user(
    session,
    email: str = "a@x.com",
    password: str = "oldpass1",
    role: str = ROLE_USER,
    profile: str = "default.png",
) -> User:
    return await UserRepository(session).create_user(
        email=email,
        password_hash=get_password_hash(password),
        first_name="Ann",
        last_name="Lee",
        profile=profile,
        role=role,
    )


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
async def user(db_session):
    return await create_user(db_session)


@pytest.fixture
async def admin(db_session):
    return await create_user(db_session, email="admin@x.com", password="adminpass", role=ROLE_ADMIN)
