"""
Identity Core - Authentication and user management.
"""

from scrims.kernel.identity.password import PasswordHasher, verify_password, hash_password
from scrims.kernel.identity.jwt import (
    IssuedToken,
    TokenClaims,
    TokenIssuer,
    get_token_issuer,
)
from scrims.kernel.identity.store import IdentityStore, SqlAlchemyIdentityStore
from scrims.kernel.identity.identity_service import IdentityService, LoginResult

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "IssuedToken",
    "TokenClaims",
    "TokenIssuer",
    "get_token_issuer",
    "IdentityStore",
    "SqlAlchemyIdentityStore",
    "IdentityService",
    "LoginResult",
]
