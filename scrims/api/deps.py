"""
FastAPI dependencies for authentication, database sessions and services.

Services receive their stores and clients here; nothing below the API layer
looks anything up on its own.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from scrims.database import get_db
from scrims.kernel.identity.identity_service import IdentityService
from scrims.kernel.identity.jwt import TokenClaims, TokenIssuer, get_token_issuer
from scrims.kernel.identity.password import PasswordHasher
from scrims.kernel.identity.store import SqlAlchemyIdentityStore
from scrims.kernel.teams.identity_client import IdentityServiceClient, IdentityValidator
from scrims.kernel.teams.store import SqlAlchemyTeamStore
from scrims.kernel.teams.team_service import TeamService


security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]
Issuer = Annotated[TokenIssuer, Depends(get_token_issuer)]


async def get_current_claims(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    issuer: Issuer,
) -> TokenClaims:
    """Claims of the bearer token, or 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = issuer.verify(credentials.credentials)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


CurrentClaims = Annotated[TokenClaims, Depends(get_current_claims)]


def get_identity_service(db: DbSession, issuer: Issuer) -> IdentityService:
    return IdentityService(
        store=SqlAlchemyIdentityStore(db),
        hasher=PasswordHasher(),
        token_issuer=issuer,
    )


def get_identity_validator() -> IdentityValidator:
    return IdentityServiceClient()


def get_team_service(
    db: DbSession,
    validator: Annotated[IdentityValidator, Depends(get_identity_validator)],
) -> TeamService:
    return TeamService(store=SqlAlchemyTeamStore(db), identity_validator=validator)


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
TeamServiceDep = Annotated[TeamService, Depends(get_team_service)]
