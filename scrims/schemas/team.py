"""
Team schemas.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import Field

from scrims.schemas.common import CamelModel


class CreateTeamRequest(CamelModel):
    """Team creation request. The owner comes from the bearer token."""

    name: str = Field(..., min_length=6, max_length=60)
    tag: str = Field(..., min_length=3, max_length=3)
    description: str = ""


class CreateTeamResponse(CamelModel):
    id: uuid.UUID
    name: str
    tag: str
    description: str
    owner_id: uuid.UUID
    created_at: datetime


class TeamResponse(CreateTeamResponse):
    updated_at: datetime


class PagedTeamsResponse(CamelModel):
    items: List[TeamResponse]
    total_count: int
    page: int
    page_size: int
