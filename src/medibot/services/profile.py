"""Client for the user profile service."""

import logging
from typing import Optional

import httpx

from medibot.config import settings
from medibot.exceptions import TransientNetworkError, ValidationFailure
from medibot.schemas.prescription import ProfileData
from medibot.services.transport import build_client, error_details

logger = logging.getLogger(__name__)


class ProfileClient:
    """Pushes profile edits to the backend."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self.client = client or build_client()

    async def close(self):
        """Close the HTTP client."""
        if self._owns_client:
            await self.client.aclose()

    async def update_profile(self, data: ProfileData) -> None:
        """Send the full profile as one PUT request."""
        try:
            response = await self.client.put(
                settings.profile_path, json=data.to_payload()
            )
        except httpx.HTTPError as e:
            raise TransientNetworkError(
                settings.profile_failure_message, detail=repr(e)
            ) from e

        if not response.is_success:
            details = error_details(response)
            if details:
                raise ValidationFailure(details, detail=f"HTTP {response.status_code}")
            raise TransientNetworkError(
                settings.profile_failure_message,
                detail=f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        logger.debug("Profile updated (HTTP %s)", response.status_code)


# Singleton instance
profile_client = ProfileClient()
