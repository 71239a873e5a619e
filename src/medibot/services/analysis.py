"""Client for the prescription image analysis service."""

import logging
from typing import Optional

import httpx

from medibot.config import settings
from medibot.exceptions import TransientNetworkError, ValidationFailure
from medibot.schemas.prescription import AnalysisResult
from medibot.services.transport import build_client, error_details

logger = logging.getLogger(__name__)


class AnalysisClient:
    """Uploads prescription photos and returns the extracted medicines."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self.client = client or build_client(settings.analysis_timeout)

    async def close(self):
        """Close the HTTP client."""
        if self._owns_client:
            await self.client.aclose()

    async def analyze(
        self,
        image: bytes,
        filename: str = "prescription.jpg",
        content_type: str = "image/jpeg",
    ) -> AnalysisResult:
        """
        Send one image to the analysis service.

        Raises:
            ValidationFailure: the service rejected the image (its ``details``
                text becomes the message) or answered with a malformed body.
            TransientNetworkError: the service was unreachable or failed
                without saying why.
        """
        files = {"image": (filename, image, content_type)}
        try:
            response = await self.client.post(
                settings.analysis_path,
                files=files,
                timeout=settings.analysis_timeout,
            )
        except httpx.HTTPError as e:
            raise TransientNetworkError(
                settings.unreadable_failure_message, detail=repr(e)
            ) from e

        if not response.is_success:
            details = error_details(response)
            if details:
                raise ValidationFailure(
                    details, detail=f"HTTP {response.status_code}"
                )
            raise TransientNetworkError(
                settings.generic_failure_message,
                detail=f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return AnalysisResult.model_validate(response.json())
        except ValueError as e:
            # undecodable JSON and pydantic ValidationError alike
            raise ValidationFailure(
                settings.unreadable_failure_message, detail=str(e)
            ) from e


# Singleton instance
analysis_client = AnalysisClient()
