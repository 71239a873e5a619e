"""Turn free-text schedule hints into Morning / Afternoon / Night slots."""

import re
from typing import Iterable, Optional

from medibot.schemas.prescription import MedicineRecord, ScheduleRow

# "1-0-1" style dose grids; a four-part grid folds its evening slot into night
_DOSE_GRID = re.compile(r"\b(\d)\s*-\s*(\d)\s*-\s*(\d)(?:\s*-\s*(\d))?\b")

_AS_NEEDED = re.compile(r"\b(prn|sos|as needed|when needed|if needed)\b")

_SLOT_WORDS = {
    "morning": re.compile(r"\b(morning|breakfast|am|mane)\b"),
    "afternoon": re.compile(r"\b(afternoon|noon|lunch|midday)\b"),
    "night": re.compile(r"\b(night|evening|bedtime|dinner|pm|hs|nocte)\b"),
}

# Checked in order; first match wins
_FREQUENCIES = [
    (re.compile(r"\b(four times|4 times|qid|qds)\b"), (True, True, True)),
    (re.compile(r"\b(thrice|three times|3 times|tds|tid)\b"), (True, True, True)),
    (re.compile(r"\b(twice|two times|2 times|bd|bid)\b"), (True, False, True)),
    (re.compile(r"\b(once|one time|1 time|od|qd|daily)\b"), (True, False, False)),
]


def parse_hints(hints: Optional[str]) -> tuple[bool, bool, bool, bool]:
    """
    Return ``(morning, afternoon, night, as_needed)`` for one hint string.

    Explicit dose grids win over time-of-day words, which win over bare
    frequencies. Unknown hints produce no slots.
    """
    if not hints:
        return False, False, False, False
    text = hints.lower()
    as_needed = bool(_AS_NEEDED.search(text))

    grid = _DOSE_GRID.search(text)
    if grid:
        morning, afternoon, evening, night = (
            int(g) > 0 if g is not None else False for g in grid.groups()
        )
        if grid.group(4) is None:
            # three-part grid: morning-afternoon-night
            night = evening
        else:
            night = evening or night
        return morning, afternoon, night, as_needed

    words = tuple(bool(pattern.search(text)) for pattern in _SLOT_WORDS.values())
    if any(words):
        return words + (as_needed,)

    for pattern, slots in _FREQUENCIES:
        if pattern.search(text):
            return slots + (as_needed,)

    return False, False, False, as_needed


def schedule_for(medicines: Iterable[MedicineRecord]) -> list[ScheduleRow]:
    """One schedule row per medicine, in prescription order."""
    rows = []
    for medicine in medicines:
        morning, afternoon, night, as_needed = parse_hints(medicine.schedule_hints)
        rows.append(ScheduleRow(
            medicine=medicine.name,
            dosage=medicine.dosage,
            morning=morning,
            afternoon=afternoon,
            night=night,
            as_needed=as_needed,
            instructions=medicine.schedule_hints,
        ))
    return rows
