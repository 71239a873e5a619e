"""Pydantic schemas for prescription analysis payloads."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Medicine Schemas
# ============================================================================

class MedicineRecord(BaseModel):
    """One medicine as extracted from a prescription."""

    name: str
    dosage: Optional[str] = None
    schedule_hints: Optional[str] = Field(None, alias="scheduleHints")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class AnalysisResult(BaseModel):
    """Structured output of one analysis; either absent or complete."""

    medicines: list[MedicineRecord]

    model_config = ConfigDict(frozen=True)

    @property
    def names(self) -> list[str]:
        return [m.name for m in self.medicines]


# ============================================================================
# History Schemas
# ============================================================================

class HistoryEntry(BaseModel):
    """Archived analysis result, owned by the backend and read-only here."""

    id: str
    created_at: datetime = Field(..., alias="createdAt")
    medicines: list[MedicineRecord] = []

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        # Backends hand out both numeric and string ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(medicines=list(self.medicines))


# ============================================================================
# Profile Schemas
# ============================================================================

class ProfileData(BaseModel):
    """Editable patient profile fields. Empty strings are allowed."""

    age: str = ""
    medical_history: str = Field("", alias="medicalHistory")

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


# ============================================================================
# Schedule Schemas
# ============================================================================

class ScheduleRow(BaseModel):
    """One line of the digital schedule."""

    medicine: str
    dosage: Optional[str] = None
    morning: bool = False
    afternoon: bool = False
    night: bool = False
    as_needed: bool = False
    instructions: Optional[str] = None
