"""
User endpoints (identity service).
"""

import uuid
from typing import List

from fastapi import APIRouter, Query, status

from scrims.api.deps import CurrentClaims, IdentityServiceDep
from scrims.api.errors import unwrap
from scrims.schemas.common import SuccessResponse
from scrims.schemas.user import (
    LoginRequest,
    LoginResponse,
    UpdatePasswordRequest,
    UserRegisterRequest,
    UserRegisterResponse,
    UserResponse,
)

router = APIRouter()


@router.post("/register", response_model=UserRegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserRegisterRequest, service: IdentityServiceDep):
    """Register a new user account."""
    user = unwrap(await service.create_user(
        username=data.username,
        email=data.email,
        password=data.password,
    ))
    return UserRegisterResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, service: IdentityServiceDep):
    """Authenticate and return a session token valid for seven days."""
    result = unwrap(await service.login(data.email, data.password))
    return LoginResponse.model_validate(result)


@router.get("", response_model=List[UserResponse])
async def list_users(service: IdentityServiceDep):
    users = unwrap(await service.list_users())
    return [UserResponse.model_validate(u) for u in users]


@router.get("/search", response_model=List[UserResponse])
async def search_users(service: IdentityServiceDep, username: str = Query("")):
    """Users whose username contains the query string."""
    users = unwrap(await service.search_by_username(username))
    return [UserResponse.model_validate(u) for u in users]


@router.get("/me", response_model=UserResponse)
async def get_authenticated_user(claims: CurrentClaims, service: IdentityServiceDep):
    """Profile of the token's subject."""
    user = unwrap(await service.get_by_id(claims.user_id))
    return UserResponse.model_validate(user)


@router.put("/me/password", response_model=SuccessResponse)
async def update_password(
    data: UpdatePasswordRequest,
    claims: CurrentClaims,
    service: IdentityServiceDep,
):
    """
    Change the caller's password.

    Tokens issued before the change remain valid until they expire.
    """
    unwrap(await service.update_password(
        claims.user_id,
        data.current_password,
        data.new_password,
    ))
    return SuccessResponse(message="Password updated successfully.")


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: uuid.UUID, service: IdentityServiceDep):
    """Look up a user. The team service uses this as its owner-existence check."""
    user = unwrap(await service.get_by_id(user_id))
    return UserResponse.model_validate(user)
