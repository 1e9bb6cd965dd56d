"""
Owner-existence check against the identity service.

Calls GET {identity_service_url}/user/{id}. Any 2xx means the user exists,
any other response means it does not. 5xx responses and transport errors
are retried with exponential backoff; every attempt has a timeout.

A transport failure that survives the retries is NOT reported as "user does
not exist": it raises IdentityServiceUnavailable so the caller can tell an
outage apart from a missing owner.

The answer is a point-in-time check. The user may be gone by the time the
caller acts on it.
"""

import asyncio
import uuid
from typing import Optional, Protocol

import httpx

from scrims.config import get_settings
from scrims.logging_config import get_logger, request_id_headers

logger = get_logger(__name__)


class IdentityServiceUnavailable(Exception):
    """The identity service could not be reached."""


class IdentityValidator(Protocol):
    async def exists(self, user_id: uuid.UUID) -> bool: ...


class IdentityServiceClient:
    """HTTP client for the identity service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.identity_service_url).rstrip("/")
        self.timeout = settings.identity_service_timeout if timeout is None else timeout
        self.retries = settings.identity_service_retries if retries is None else retries
        self.backoff = settings.identity_service_backoff if backoff is None else backoff
        self.transport = transport

    def _delay(self, attempt: int) -> float:
        return self.backoff * (2 ** attempt)

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        """GET with retry on 5xx and transport errors. Returns the last response."""
        last_exc: Optional[httpx.TransportError] = None
        for attempt in range(self.retries + 1):
            final = attempt == self.retries
            try:
                response = await client.get(url)
            except httpx.TransportError as e:
                last_exc = e
                logger.warning(
                    "Identity service request failed (attempt %d): %s",
                    attempt + 1, e,
                )
                if not final:
                    await asyncio.sleep(self._delay(attempt))
                continue
            if response.status_code >= 500 and not final:
                await asyncio.sleep(self._delay(attempt))
                continue
            return response
        raise IdentityServiceUnavailable(f"Identity service unreachable: {last_exc}") from last_exc

    async def exists(self, user_id: uuid.UUID) -> bool:
        """
        Check whether a user id is known to the identity service.

        Raises:
            IdentityServiceUnavailable: no response after all attempts
        """
        url = f"{self.base_url}/user/{user_id}"
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers=request_id_headers(),
        ) as client:
            response = await self._get(client, url)

        if response.is_success:
            return True
        logger.info(
            "Owner lookup returned %d",
            response.status_code,
            extra={"user_id": str(user_id)},
        )
        return False
