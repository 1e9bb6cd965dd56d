"""
User and authentication schemas.
"""

import uuid
from datetime import datetime

from pydantic import EmailStr, Field

from scrims.schemas.common import CamelModel


class UserRegisterRequest(CamelModel):
    """User registration request."""

    username: str = Field(..., min_length=6, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRegisterResponse(CamelModel):
    id: uuid.UUID
    username: str
    email: str
    created_at: datetime


class LoginRequest(CamelModel):
    """User login request."""

    email: EmailStr
    password: str


class LoginResponse(CamelModel):
    token: str
    expires_at: datetime
    id: uuid.UUID
    username: str
    email: str


class UserResponse(CamelModel):
    """Public user profile."""

    id: uuid.UUID
    username: str
    email: str
    created_at: datetime
    updated_at: datetime


class UpdatePasswordRequest(CamelModel):
    """Password change request."""

    current_password: str
    new_password: str
