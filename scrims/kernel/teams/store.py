"""
Persistence for teams.
"""

import uuid
from typing import Optional, Protocol, Sequence, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scrims.kernel.errors import DuplicateRecordError
from scrims.kernel.models.base import utcnow
from scrims.kernel.models.team import Team


class TeamStore(Protocol):
    async def get_by_id(self, team_id: uuid.UUID) -> Optional[Team]: ...

    async def get_by_name(self, name: str) -> Optional[Team]: ...

    async def create(self, team: Team) -> Team: ...

    async def list(
        self,
        page: int,
        page_size: int,
        name: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Tuple[Sequence[Team], int]: ...


class SqlAlchemyTeamStore:
    """TeamStore over an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, team_id: uuid.UUID) -> Optional[Team]:
        return await self.session.get(Team, team_id)

    async def get_by_name(self, name: str) -> Optional[Team]:
        result = await self.session.execute(select(Team).where(Team.name == name))
        return result.scalar_one_or_none()

    async def create(self, team: Team) -> Team:
        """
        Insert a team.

        Raises:
            DuplicateRecordError: the name is already taken at the database level
        """
        now = utcnow()
        team.created_at = now
        team.updated_at = now
        self.session.add(team)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateRecordError("A team with this name already exists.") from e
        return team

    async def list(
        self,
        page: int,
        page_size: int,
        name: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Tuple[Sequence[Team], int]:
        """
        One page of teams, newest first.

        name and tag are substring filters, combined with AND when both are
        given. The returned total counts every match, not just the page.
        """
        conditions = []
        if name:
            conditions.append(Team.name.contains(name, autoescape=True))
        if tag:
            conditions.append(Team.tag.contains(tag, autoescape=True))
        where = and_(*conditions) if conditions else None

        count_query = select(func.count()).select_from(Team)
        query = select(Team).order_by(Team.created_at.desc(), Team.id)
        if where is not None:
            count_query = count_query.where(where)
            query = query.where(where)

        total = (await self.session.execute(count_query)).scalar_one()

        query = query.offset((page - 1) * page_size).limit(page_size)
        result = await self.session.execute(query)
        return result.scalars().all(), total
