"""Shared HTTP plumbing for the backend collaborator clients."""

import logging
from typing import Optional

import httpx

from medibot.config import settings

logger = logging.getLogger(__name__)


def build_client(timeout: Optional[float] = None) -> httpx.AsyncClient:
    """Create an async client bound to the configured backend."""
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=timeout if timeout is not None else settings.request_timeout,
    )


def error_details(response: httpx.Response) -> Optional[str]:
    """
    Pull the collaborator-supplied ``details`` string out of an error body.

    Returns None when the body is not JSON, is not an object, or carries no
    non-empty ``details`` string.
    """
    try:
        body = response.json()
    except ValueError:
        logger.debug("Error body from %s is not JSON", response.request.url)
        return None
    if not isinstance(body, dict):
        return None
    details = body.get("details")
    if isinstance(details, str) and details.strip():
        return details
    return None
