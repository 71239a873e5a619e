"""Draft copy of the patient profile, synced only on explicit save."""

import logging
from dataclasses import dataclass
from typing import Optional

from medibot.config import settings
from medibot.exceptions import MediBotError
from medibot.schemas.prescription import ProfileData
from medibot.schemas.session import SessionUser
from medibot.services.profile import ProfileClient

logger = logging.getLogger(__name__)

_FIELD_ALIASES = {
    "age": "age",
    "medical_history": "medical_history",
    "medicalHistory": "medical_history",
}


@dataclass(frozen=True)
class SaveOutcome:
    ok: bool
    message: str


class ProfileEditor:
    """
    Local, unvalidated edits of the profile form.

    The editor lives as long as the profile view is on screen; edits that
    are not saved before the view is left are dropped with it.
    """

    def __init__(self, client: ProfileClient, initial: Optional[ProfileData] = None):
        self.client = client
        self.data = initial.model_copy() if initial is not None else ProfileData()
        self.saving = False
        self.last_outcome: Optional[SaveOutcome] = None
        self._live = True

    @classmethod
    def from_session(cls, client: ProfileClient, user: Optional[SessionUser]) -> "ProfileEditor":
        if user is None:
            return cls(client)
        return cls(
            client,
            ProfileData(age=user.age or "", medical_history=user.medical_history or ""),
        )

    @property
    def is_live(self) -> bool:
        return self._live

    def discard(self) -> None:
        self._live = False

    def set_field(self, name: str, value: str) -> None:
        field = _FIELD_ALIASES.get(name)
        if field is None:
            raise ValueError(f"Unknown profile field: {name}")
        setattr(self.data, field, value)

    def update(self, **fields: str) -> None:
        for name, value in fields.items():
            self.set_field(name, value)

    async def save(self) -> SaveOutcome:
        """
        Send the current draft. Never raises for collaborator failures;
        the outcome says whether the backend accepted it.
        """
        snapshot = self.data.model_copy()
        self.saving = True
        try:
            await self.client.update_profile(snapshot)
        except MediBotError as e:
            logger.warning("Profile sync failed: %s (%s)", e.message, e.detail)
            outcome = SaveOutcome(ok=False, message=e.message)
        else:
            logger.info("Profile synced")
            outcome = SaveOutcome(ok=True, message=settings.profile_ack_message)

        if self._live:
            self.saving = False
            self.last_outcome = outcome
        else:
            logger.debug("Profile editor discarded before save completed")
        return outcome
