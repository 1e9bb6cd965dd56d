"""
Team service: creation, lookup and listing.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional

from scrims.kernel.errors import (
    DuplicateRecordError,
    Ok,
    Outcome,
    already_exists,
    internal,
    invalid_argument,
    not_found,
)
from scrims.kernel.models.team import Team
from scrims.kernel.teams.identity_client import IdentityServiceUnavailable, IdentityValidator
from scrims.kernel.teams.store import TeamStore
from scrims.logging_config import get_logger

logger = get_logger(__name__)

NAME_MIN_LENGTH = 6
NAME_MAX_LENGTH = 60
TAG_LENGTH = 3


@dataclass(frozen=True)
class TeamPage:
    items: List[Team]
    total_count: int
    page: int
    page_size: int


class TeamService:
    """
    Service for team operations.

    create_team validates in a fixed order and stops at the first failure:
    name length, tag length, owner existence (remote call), name uniqueness.
    A request with a bad name and an unknown owner therefore reports the name.
    """

    def __init__(self, store: TeamStore, identity_validator: IdentityValidator):
        self.store = store
        self.identity_validator = identity_validator

    async def create_team(
        self,
        name: Optional[str],
        tag: Optional[str],
        description: Optional[str],
        owner_id: uuid.UUID,
    ) -> Outcome[Team]:
        """
        Create a team owned by owner_id.

        The owner becomes the team's only member. The owner check is
        best-effort: nothing stops the owner from being deleted between the
        check and the insert.

        Returns:
            Ok(Team), or INVALID_ARGUMENT / NOT_FOUND (owner) /
            ALREADY_EXISTS (name) / INTERNAL (identity service unreachable)
        """
        name = name or ""
        tag = tag or ""

        if not name.strip() or not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            return invalid_argument(
                f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters."
            )
        if not tag.strip() or len(tag) != TAG_LENGTH:
            return invalid_argument(f"Tag must be exactly {TAG_LENGTH} characters.")

        try:
            owner_exists = await self.identity_validator.exists(owner_id)
        except IdentityServiceUnavailable as e:
            logger.error("Owner check failed: %s", e, extra={"owner_id": str(owner_id)})
            return internal(str(e))
        if not owner_exists:
            return not_found("Owner does not exist.")

        if await self.store.get_by_name(name) is not None:
            return already_exists("A team with this name already exists.")

        team = Team.create(name, tag, description or "", owner_id)
        try:
            team = await self.store.create(team)
        except DuplicateRecordError as e:
            return already_exists(str(e))

        logger.info(
            "Team created",
            extra={"team_id": str(team.id), "owner_id": str(owner_id)},
        )
        return Ok(team)

    async def get_by_id(self, team_id: Optional[uuid.UUID]) -> Outcome[Team]:
        """Get a team by ID."""
        if team_id is None or team_id == uuid.UUID(int=0):
            return invalid_argument("Team ID cannot be empty.")

        team = await self.store.get_by_id(team_id)
        if team is None:
            return not_found("Team not found.")
        return Ok(team)

    async def list_teams(
        self,
        page: int = 1,
        page_size: int = 10,
        name: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Outcome[TeamPage]:
        """One page of teams, newest first, filtered by name/tag substrings."""
        if page < 1 or page_size < 1:
            return invalid_argument("Page and page size must be positive.")

        name = name if name and name.strip() else None
        tag = tag if tag and tag.strip() else None

        items, total = await self.store.list(page, page_size, name=name, tag=tag)
        return Ok(TeamPage(
            items=list(items),
            total_count=total,
            page=page,
            page_size=page_size,
        ))
