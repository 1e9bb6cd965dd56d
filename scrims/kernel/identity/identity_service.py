"""
Identity service for user management operations.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool

from scrims.kernel.errors import (
    DuplicateRecordError,
    Ok,
    Outcome,
    already_exists,
    invalid_argument,
    invalid_credentials,
    not_found,
)
from scrims.kernel.identity.jwt import TokenIssuer
from scrims.kernel.identity.password import PasswordHasher
from scrims.kernel.identity.store import IdentityStore
from scrims.kernel.models.user import User
from scrims.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    """Token bundle returned by a successful login."""

    token: str
    expires_at: datetime
    id: uuid.UUID
    username: str
    email: str


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _missing_id(value: Optional[uuid.UUID]) -> bool:
    return value is None or value == uuid.UUID(int=0)


class IdentityService:
    """
    Service for user identity operations.

    Handles registration, login, lookup, search and password rotation.
    Every operation returns an Outcome; nothing is cached between calls.

    Uniqueness of username and email is checked by reading before writing.
    Two concurrent registrations can both pass the check; the store's unique
    constraints reject the second insert, which is reported the same way.

    Hashing and verification run in the threadpool; PBKDF2 would otherwise
    hold the event loop for the length of each call.
    """

    def __init__(
        self,
        store: IdentityStore,
        hasher: PasswordHasher,
        token_issuer: TokenIssuer,
    ):
        self.store = store
        self.hasher = hasher
        self.token_issuer = token_issuer

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
    ) -> Outcome[User]:
        """
        Register a new user.

        Args:
            username: Unique username
            email: Unique email address
            password: Plain text password

        Returns:
            Ok(User) with id and timestamps assigned by the store, or
            INVALID_ARGUMENT / ALREADY_EXISTS
        """
        if _blank(username) or _blank(email):
            return invalid_argument("Username and email are required.")

        if await self.store.get_by_username(username) is not None:
            return already_exists("User with this username already exists.")

        if await self.store.get_by_email(email) is not None:
            return already_exists("User with this email already exists.")

        user = User(
            username=username,
            email=email,
            password_hash=await run_in_threadpool(self.hasher.hash, password),
        )

        try:
            user = await self.store.create(user)
        except DuplicateRecordError as e:
            logger.info("Registration lost a uniqueness race: %s", e)
            return already_exists(str(e))

        logger.info("User registered", extra={"user_id": str(user.id)})
        return Ok(user)

    async def login(self, email: str, password: str) -> Outcome[LoginResult]:
        """
        Authenticate a user by email and password.

        Returns:
            Ok(LoginResult) carrying a signed token valid for seven days, or
            NOT_FOUND (unknown email) / INVALID_CREDENTIALS (wrong password)
        """
        user = await self.store.get_by_email(email)
        if user is None:
            return not_found("User not found.")

        if not await run_in_threadpool(self.hasher.verify, password, user.password_hash):
            logger.info("Rejected login", extra={"user_id": str(user.id)})
            return invalid_credentials("Invalid password.")

        issued = self.token_issuer.issue(user)
        return Ok(LoginResult(
            token=issued.token,
            expires_at=issued.expires_at,
            id=user.id,
            username=user.username,
            email=user.email,
        ))

    async def get_by_id(self, user_id: Optional[uuid.UUID]) -> Outcome[User]:
        """Get a user by ID."""
        if _missing_id(user_id):
            return invalid_argument("Invalid user ID.")

        user = await self.store.get_by_id(user_id)
        if user is None:
            return not_found("User not found.")
        return Ok(user)

    async def search_by_username(self, query: str) -> Outcome[List[User]]:
        """
        Find users whose username contains query.

        Matching is substring containment, not prefix matching, and is
        case-sensitive. Results are in the store's natural order.
        """
        if _blank(query):
            return invalid_argument("Username is required.")

        return Ok(list(await self.store.search_by_username(query)))

    async def list_users(self) -> Outcome[List[User]]:
        """All registered users."""
        return Ok(list(await self.store.list_all()))

    async def update_password(
        self,
        user_id: Optional[uuid.UUID],
        current_password: str,
        new_password: str,
    ) -> Outcome[bool]:
        """
        Change a user's password after re-checking the current one.

        Tokens issued before the change stay valid until they expire.

        Returns:
            Ok(True), or INVALID_ARGUMENT / NOT_FOUND / INVALID_CREDENTIALS
        """
        if _missing_id(user_id):
            return invalid_argument("Invalid user ID.")
        if _blank(current_password) or _blank(new_password):
            return invalid_argument("Current and new passwords are required.")

        user = await self.store.get_by_id(user_id)
        if user is None:
            return not_found("User not found.")

        if not await run_in_threadpool(self.hasher.verify, current_password, user.password_hash):
            return invalid_credentials("Invalid current password.")

        user.password_hash = await run_in_threadpool(self.hasher.hash, new_password)
        await self.store.update(user)

        logger.info("Password updated", extra={"user_id": str(user.id)})
        return Ok(True)
