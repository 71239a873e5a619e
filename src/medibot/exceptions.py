"""Error taxonomy shared by the collaborator clients and state components."""

from typing import Optional


class MediBotError(Exception):
    """Base class for all MediBot client errors."""

    def __init__(self, message: str, *, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        # Underlying cause; logged, never shown to the user
        self.detail = detail


class TransientNetworkError(MediBotError):
    """A collaborator could not be reached or answered with a bare failure."""

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, detail=detail)
        self.status_code = status_code


class ValidationFailure(MediBotError):
    """A collaborator rejected the input or returned a malformed payload."""


class SessionRequiredError(MediBotError):
    """An action was attempted without an authenticated session."""
