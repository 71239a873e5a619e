"""Client for the authentication session endpoints."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from medibot.config import settings
from medibot.exceptions import TransientNetworkError
from medibot.schemas.session import SessionContext, SessionUser
from medibot.services.transport import build_client

logger = logging.getLogger(__name__)


class AuthClient:
    """Reads the current session and signs the user out."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self.client = client or build_client()

    async def close(self):
        """Close the HTTP client."""
        if self._owns_client:
            await self.client.aclose()

    async def session_status(self) -> SessionContext:
        """
        Resolve the current session.

        An empty body, ``null``, or a 401/403 means unauthenticated; a body
        with a ``user`` object means authenticated.
        """
        try:
            response = await self.client.get(settings.session_path)
        except httpx.HTTPError as e:
            raise TransientNetworkError("Session check failed", detail=repr(e)) from e

        if response.status_code in (401, 403):
            return SessionContext.anonymous()
        if not response.is_success:
            raise TransientNetworkError(
                "Session check failed",
                detail=f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            logger.warning("Session response is not JSON, treating as signed out")
            return SessionContext.anonymous()

        user = body.get("user") if isinstance(body, dict) else None
        if not isinstance(user, dict):
            return SessionContext.anonymous()
        try:
            return SessionContext.signed_in(SessionUser.model_validate(user))
        except ValidationError as e:
            logger.warning("Malformed session user, treating as signed out: %s", e)
            return SessionContext.anonymous()

    async def sign_out(self) -> None:
        try:
            response = await self.client.post(settings.signout_path)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TransientNetworkError("Sign-out failed", detail=repr(e)) from e


# Singleton instance
auth_client = AuthClient()
