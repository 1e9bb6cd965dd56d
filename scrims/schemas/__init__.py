"""
Pydantic schemas for request/response validation.
"""

from scrims.schemas.common import CamelModel, HealthResponse, SuccessResponse
from scrims.schemas.user import (
    LoginRequest,
    LoginResponse,
    UpdatePasswordRequest,
    UserRegisterRequest,
    UserRegisterResponse,
    UserResponse,
)
from scrims.schemas.team import (
    CreateTeamRequest,
    CreateTeamResponse,
    PagedTeamsResponse,
    TeamResponse,
)

__all__ = [
    "CamelModel",
    "HealthResponse",
    "SuccessResponse",
    "LoginRequest",
    "LoginResponse",
    "UpdatePasswordRequest",
    "UserRegisterRequest",
    "UserRegisterResponse",
    "UserResponse",
    "CreateTeamRequest",
    "CreateTeamResponse",
    "PagedTeamsResponse",
    "TeamResponse",
]
