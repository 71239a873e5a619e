"""Pydantic schemas for the authenticated session and view selection."""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


SessionStatus = Literal["loading", "unauthenticated", "authenticated"]


class ViewState(str, Enum):
    """Top-level screens; exactly one is visible."""

    SCAN = "scan"
    HISTORY = "history"
    PROFILE = "profile"
    SETTINGS = "settings"


class SessionUser(BaseModel):
    """Identity fields the auth service exposes for the signed-in user."""

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[str] = None
    medical_history: Optional[str] = Field(None, alias="medicalHistory")

    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)


class SessionContext(BaseModel):
    """
    Session state injected into the view controller.

    ``user`` is only meaningful while ``status`` is ``authenticated``.
    """

    status: SessionStatus = "loading"
    user: Optional[SessionUser] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_authenticated(self) -> bool:
        return self.status == "authenticated"

    @classmethod
    def loading(cls) -> "SessionContext":
        return cls(status="loading")

    @classmethod
    def anonymous(cls) -> "SessionContext":
        return cls(status="unauthenticated")

    @classmethod
    def signed_in(cls, user: Optional[SessionUser] = None) -> "SessionContext":
        return cls(status="authenticated", user=user or SessionUser())
