"""View models rendered from the stores."""

from dataclasses import dataclass
from typing import Iterable, Optional

from medibot.schemas.prescription import AnalysisResult, HistoryEntry, MedicineRecord, ScheduleRow
from medibot.state.active_context import ActiveContextStore
from medibot.views.schedule import schedule_for


class ContextPanel:
    """
    The "Health Context" column: medicine details plus the digital schedule.

    Re-projects synchronously whenever the active context is set.
    """

    def __init__(self, store: ActiveContextStore):
        self.result: Optional[AnalysisResult] = None
        self.schedule: list[ScheduleRow] = []
        self.renders = 0
        self._render(store.get())
        self._unsubscribe = store.subscribe(self._render)

    def _render(self, result: Optional[AnalysisResult]) -> None:
        self.result = result
        self.schedule = schedule_for(result.medicines) if result is not None else []
        self.renders += 1

    @property
    def is_empty(self) -> bool:
        return self.result is None

    @property
    def medicines(self) -> list[MedicineRecord]:
        return list(self.result.medicines) if self.result is not None else []

    def close(self) -> None:
        self._unsubscribe()


@dataclass(frozen=True)
class HistoryCard:
    entry_id: str
    date_label: str
    medicine_names: tuple[str, ...]


def format_entry_date(entry: HistoryEntry) -> str:
    """e.g. ``October 19, 2026``"""
    created = entry.created_at
    return f"{created:%B} {created.day}, {created.year}"


def history_cards(entries: Iterable[HistoryEntry]) -> list[HistoryCard]:
    """Cards for the history vault, in the order given."""
    return [
        HistoryCard(
            entry_id=entry.id,
            date_label=format_entry_date(entry),
            medicine_names=tuple(m.name for m in entry.medicines),
        )
        for entry in entries
    ]
