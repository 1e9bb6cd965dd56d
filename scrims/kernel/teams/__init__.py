"""
Teams - team creation gated by the identity service.
"""

from scrims.kernel.teams.identity_client import (
    IdentityServiceClient,
    IdentityServiceUnavailable,
    IdentityValidator,
)
from scrims.kernel.teams.store import SqlAlchemyTeamStore, TeamStore
from scrims.kernel.teams.team_service import TeamPage, TeamService

__all__ = [
    "IdentityServiceClient",
    "IdentityServiceUnavailable",
    "IdentityValidator",
    "SqlAlchemyTeamStore",
    "TeamStore",
    "TeamPage",
    "TeamService",
]
