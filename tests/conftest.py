"""
Pytest fixtures for Scrims tests.

Environment is set before any scrims module is imported so the module-level
engine and settings point at a throwaway SQLite file.
"""

import asyncio
import os
import tempfile
import uuid
from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, Iterable, List, Optional, Sequence, Tuple

_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp.name}"
os.environ["JWT_KEY"] = "test-signing-key-for-scrims-tests-only"
os.environ["JWT_ISSUER"] = "ScrimsTest"
os.environ["IDENTITY_SERVICE_BACKOFF"] = "0"

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scrims.config import get_settings

get_settings.cache_clear()

from scrims.database import install_sqlite_pragmas
from scrims.kernel.errors import DuplicateRecordError
from scrims.kernel.identity.identity_service import IdentityService
from scrims.kernel.identity.jwt import TokenIssuer
from scrims.kernel.identity.password import PasswordHasher
from scrims.kernel.models import Base, Team, User
from scrims.kernel.teams.identity_client import IdentityServiceUnavailable
from scrims.kernel.teams.team_service import TeamService


TEST_SECRET = "test-secret-key-for-testing-only"
TEST_ISSUER = "ScrimsTest"


# In-memory stores. Reads optionally yield to the event loop after looking
# up, so concurrent callers can all pass a check before any of them writes.

class InMemoryIdentityStore:
    def __init__(self, yield_after_read: bool = False):
        self.users: Dict[uuid.UUID, User] = {}
        self.yield_after_read = yield_after_read
        self.duplicate_rejections = 0

    async def _read(self, result):
        if self.yield_after_read:
            await asyncio.sleep(0)
        return result

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self._read(self.users.get(user_id))

    async def get_by_username(self, username: str) -> Optional[User]:
        found = next((u for u in self.users.values() if u.username == username), None)
        return await self._read(found)

    async def get_by_email(self, email: str) -> Optional[User]:
        found = next((u for u in self.users.values() if u.email == email), None)
        return await self._read(found)

    async def create(self, user: User) -> User:
        # Unique constraints, as the database would enforce them
        for existing in self.users.values():
            if existing.username == user.username or existing.email == user.email:
                self.duplicate_rejections += 1
                raise DuplicateRecordError("User with this username or email already exists.")
        now = datetime.now(timezone.utc)
        user.id = user.id or uuid.uuid4()
        user.created_at = now
        user.updated_at = now
        self.users[user.id] = user
        return user

    async def update(self, user: User) -> User:
        user.updated_at = datetime.now(timezone.utc)
        self.users[user.id] = user
        return user

    async def search_by_username(self, query: str) -> Sequence[User]:
        return [u for u in self.users.values() if query in u.username]

    async def list_all(self) -> Sequence[User]:
        return list(self.users.values())


class InMemoryTeamStore:
    def __init__(self, yield_after_read: bool = False):
        self.teams: Dict[uuid.UUID, Team] = {}
        self.yield_after_read = yield_after_read
        self.duplicate_rejections = 0

    async def get_by_id(self, team_id: uuid.UUID) -> Optional[Team]:
        return self.teams.get(team_id)

    async def get_by_name(self, name: str) -> Optional[Team]:
        found = next((t for t in self.teams.values() if t.name == name), None)
        if self.yield_after_read:
            await asyncio.sleep(0)
        return found

    async def create(self, team: Team) -> Team:
        if any(t.name == team.name for t in self.teams.values()):
            self.duplicate_rejections += 1
            raise DuplicateRecordError("A team with this name already exists.")
        now = datetime.now(timezone.utc)
        team.created_at = now
        team.updated_at = now
        self.teams[team.id] = team
        return team

    async def list(
        self,
        page: int,
        page_size: int,
        name: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Tuple[Sequence[Team], int]:
        matches = [
            t for t in self.teams.values()
            if (name is None or name in t.name) and (tag is None or tag in t.tag)
        ]
        matches.sort(key=lambda t: t.created_at, reverse=True)
        start = (page - 1) * page_size
        return matches[start:start + page_size], len(matches)

    def seed(self, name: str, tag: str, created_at: datetime, owner_id: Optional[uuid.UUID] = None) -> Team:
        team = Team.create(name, tag, "", owner_id or uuid.uuid4())
        team.created_at = created_at
        team.updated_at = created_at
        self.teams[team.id] = team
        return team


class StubIdentityValidator:
    """Answers exists() from a fixed set of ids, or fails like a dead network."""

    def __init__(self, known: Iterable[uuid.UUID] = (), unavailable: bool = False):
        self.known = set(known)
        self.unavailable = unavailable
        self.calls: List[uuid.UUID] = []

    async def exists(self, user_id: uuid.UUID) -> bool:
        self.calls.append(user_id)
        if self.unavailable:
            raise IdentityServiceUnavailable("Identity service unreachable: connection refused")
        return user_id in self.known


# Fixtures

@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher()


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret_key=TEST_SECRET, issuer=TEST_ISSUER)


@pytest.fixture
def identity_store() -> InMemoryIdentityStore:
    return InMemoryIdentityStore()


@pytest.fixture
def identity_service(identity_store, hasher, token_issuer) -> IdentityService:
    return IdentityService(store=identity_store, hasher=hasher, token_issuer=token_issuer)


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def team_store() -> InMemoryTeamStore:
    return InMemoryTeamStore()


@pytest.fixture
def identity_validator(owner_id) -> StubIdentityValidator:
    return StubIdentityValidator(known={owner_id})


@pytest.fixture
def team_service(team_store, identity_validator) -> TeamService:
    return TeamService(store=team_store, identity_validator=identity_validator)


@pytest.fixture
def racing_identity_store() -> InMemoryIdentityStore:
    return InMemoryIdentityStore(yield_after_read=True)


@pytest.fixture
def racing_team_store() -> InMemoryTeamStore:
    return InMemoryTeamStore(yield_after_read=True)


@pytest.fixture
def unreachable_validator() -> StubIdentityValidator:
    return StubIdentityValidator(unavailable=True)


@pytest.fixture
def base_time() -> datetime:
    return datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db_engine():
    """A fresh SQLite database file per test."""
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp.name}",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    install_sqlite_pragmas(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()
    os.unlink(tmp.name)


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_maker() as session:
        yield session
        await session.rollback()
