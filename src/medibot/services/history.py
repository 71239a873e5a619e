"""Client for the prescription history service."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from medibot.config import settings
from medibot.exceptions import TransientNetworkError, ValidationFailure
from medibot.schemas.prescription import HistoryEntry
from medibot.services.transport import build_client

logger = logging.getLogger(__name__)


class HistoryClient:
    """Lists the analyses archived for the signed-in user."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self.client = client or build_client()

    async def close(self):
        """Close the HTTP client."""
        if self._owns_client:
            await self.client.aclose()

    async def list_history(self) -> Optional[list[HistoryEntry]]:
        """
        Fetch the archived analyses.

        Returns None when the service omits the ``history`` field (no data),
        otherwise the entries in service order. Individual entries that fail
        validation are skipped.
        """
        try:
            response = await self.client.get(settings.history_path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientNetworkError(
                "Could not load history",
                detail=str(e),
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransientNetworkError("Could not load history", detail=repr(e)) from e

        try:
            body = response.json()
        except ValueError as e:
            raise ValidationFailure("History response is not JSON", detail=str(e)) from e

        if not isinstance(body, dict):
            raise ValidationFailure(
                "History response is not an object", detail=type(body).__name__
            )

        raw_entries = body.get("history")
        if raw_entries is None:
            return None
        if not isinstance(raw_entries, list):
            raise ValidationFailure(
                "History field is not a list", detail=type(raw_entries).__name__
            )

        entries = []
        for raw in raw_entries:
            try:
                entries.append(HistoryEntry.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed history entry: %s", e)
        return entries


# Singleton instance
history_client = HistoryClient()
