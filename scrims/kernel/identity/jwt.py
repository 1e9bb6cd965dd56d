"""
JWT session tokens.

The identity service issues tokens at login; both services verify them on
bearer-authenticated routes. There is no refresh or revocation: a token
stays valid until its expiry.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from scrims.config import get_settings
from scrims.kernel.errors import ConfigurationError
from scrims.kernel.models.user import User

TOKEN_LIFETIME = timedelta(days=7)


class TokenClaims(BaseModel):
    """Claims carried by a session token."""

    sub: str  # User ID
    username: str
    email: str
    iss: str
    exp: datetime
    iat: datetime

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.sub)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenIssuer:
    """
    Creates and verifies signed session tokens.

    Key, issuer and algorithm default to the configured settings. A missing
    signing key is a configuration error raised at construction time, so a
    misconfigured service fails at startup rather than on the first login.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        issuer: Optional[str] = None,
        algorithm: Optional[str] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.jwt_key
        self.issuer = issuer or settings.jwt_issuer
        self.algorithm = algorithm or settings.jwt_algorithm
        if not self.secret_key:
            raise ConfigurationError("JWT key is not configured.")

    def issue(self, user: User, now: Optional[datetime] = None) -> IssuedToken:
        """
        Create a token for a user.

        Args:
            user: The authenticated user
            now: Issuance time (defaults to the current UTC time)

        Returns:
            IssuedToken with the encoded token and its expiry
        """
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + TOKEN_LIFETIME

        payload = {
            "sub": str(user.id),
            "username": user.username,
            "email": user.email,
            "iss": self.issuer,
            "iat": issued_at,
            "exp": expires_at,
        }

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def verify(self, token: str) -> Optional[TokenClaims]:
        """
        Decode a token.

        Returns:
            TokenClaims if the signature, issuer and expiry check out,
            None otherwise
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require_exp": True, "require_sub": True, "require_iss": True},
            )
            uuid.UUID(payload["sub"])
            return TokenClaims(
                sub=payload["sub"],
                username=payload["username"],
                email=payload["email"],
                iss=payload["iss"],
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            )
        except (JWTError, KeyError, TypeError, ValueError, ValidationError):
            return None


_token_issuer: Optional[TokenIssuer] = None


def get_token_issuer() -> TokenIssuer:
    """Get or create the process-wide token issuer."""
    global _token_issuer
    if _token_issuer is None:
        _token_issuer = TokenIssuer()
    return _token_issuer


def reset_token_issuer() -> None:
    """Forget the cached issuer (settings changed)."""
    global _token_issuer
    _token_issuer = None
