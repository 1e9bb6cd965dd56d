"""
Team endpoints (team service).
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Query, status

from scrims.api.deps import CurrentClaims, TeamServiceDep
from scrims.api.errors import unwrap
from scrims.schemas.team import (
    CreateTeamRequest,
    CreateTeamResponse,
    PagedTeamsResponse,
    TeamResponse,
)

router = APIRouter()


@router.post("/create", response_model=CreateTeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    data: CreateTeamRequest,
    claims: CurrentClaims,
    service: TeamServiceDep,
):
    """
    Create a team owned by the caller.

    The owner is checked against the identity service before the team is
    stored: 404 if the caller's user no longer exists, 409 if the name is taken.
    """
    team = unwrap(await service.create_team(
        name=data.name,
        tag=data.tag,
        description=data.description,
        owner_id=claims.user_id,
    ))
    return CreateTeamResponse.model_validate(team)


@router.get("", response_model=PagedTeamsResponse)
async def list_teams(
    service: TeamServiceDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, alias="pageSize"),
    name: Optional[str] = None,
    tag: Optional[str] = None,
):
    """Teams newest first, optionally filtered by name and/or tag substring."""
    result = unwrap(await service.list_teams(page, page_size, name=name, tag=tag))
    return PagedTeamsResponse(
        items=[TeamResponse.model_validate(t) for t in result.items],
        total_count=result.total_count,
        page=result.page,
        page_size=result.page_size,
    )


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(team_id: uuid.UUID, service: TeamServiceDep):
    team = unwrap(await service.get_by_id(team_id))
    return TeamResponse.model_validate(team)
