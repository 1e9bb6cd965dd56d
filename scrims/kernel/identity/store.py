"""
Persistence for users.

IdentityStore is the capability the identity service depends on;
SqlAlchemyIdentityStore is the database-backed implementation.
"""

import uuid
from typing import Optional, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scrims.kernel.errors import DuplicateRecordError
from scrims.kernel.models.base import utcnow
from scrims.kernel.models.user import User


class IdentityStore(Protocol):
    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]: ...

    async def get_by_username(self, username: str) -> Optional[User]: ...

    async def get_by_email(self, email: str) -> Optional[User]: ...

    async def create(self, user: User) -> User: ...

    async def update(self, user: User) -> User: ...

    async def search_by_username(self, query: str) -> Sequence[User]: ...

    async def list_all(self) -> Sequence[User]: ...


class SqlAlchemyIdentityStore:
    """IdentityStore over an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        """
        Insert a user.

        Raises:
            DuplicateRecordError: username or email already taken at the
                database level
        """
        now = utcnow()
        user.created_at = now
        user.updated_at = now
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateRecordError("User with this username or email already exists.") from e
        return user

    async def update(self, user: User) -> User:
        user.updated_at = utcnow()
        await self.session.flush()
        return user

    async def search_by_username(self, query: str) -> Sequence[User]:
        """Users whose username contains query (case-sensitive)."""
        result = await self.session.execute(
            select(User).where(User.username.contains(query, autoescape=True))
        )
        return result.scalars().all()

    async def list_all(self) -> Sequence[User]:
        result = await self.session.execute(select(User))
        return result.scalars().all()
