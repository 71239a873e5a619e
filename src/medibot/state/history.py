"""Session-scoped cache of archived prescription analyses."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from medibot.exceptions import MediBotError
from medibot.schemas.prescription import AnalysisResult, HistoryEntry
from medibot.schemas.session import ViewState
from medibot.services.history import HistoryClient
from medibot.state.active_context import ActiveContextStore

logger = logging.getLogger(__name__)


def _newest_first_key(entry: HistoryEntry) -> datetime:
    created = entry.created_at
    if created.tzinfo is None:
        # Naive timestamps from the backend are UTC
        created = created.replace(tzinfo=timezone.utc)
    return created


class HistoryCache:
    """
    Holds the user's history for the lifetime of one authenticated session.

    The cache is filled by ``load()`` and then replayed from memory. A failed
    load keeps whatever was there before. ``reset()`` ends the session: it
    empties the cache and makes any load still in flight a no-op when it
    lands.
    """

    def __init__(
        self,
        client: HistoryClient,
        context: ActiveContextStore,
        navigate: Optional[Callable[[ViewState], None]] = None,
    ):
        self.client = client
        self.context = context
        self._navigate = navigate
        self._entries: tuple[HistoryEntry, ...] = ()
        self.loaded = False
        self.loading = False
        self.last_error: Optional[str] = None
        self._generation = 0
        self._request_seq = 0

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        """Entries ordered by ``created_at``, most recent first."""
        return self._entries

    async def load(self) -> tuple[HistoryEntry, ...]:
        self._request_seq += 1
        request = self._request_seq
        generation = self._generation
        self.loading = True
        try:
            fetched = await self.client.list_history()
        except MediBotError as e:
            if self._is_stale(generation, request):
                return self._entries
            self.loading = False
            self.last_error = e.message
            logger.warning("Failed to fetch history: %s (%s)", e.message, e.detail)
            return self._entries

        if self._is_stale(generation, request):
            logger.info("Discarding history that arrived after the session changed")
            return self._entries

        self.loading = False
        self.last_error = None
        self.loaded = True
        if fetched is None:
            logger.debug("History service returned no data, keeping %d entries", len(self._entries))
        else:
            self._entries = tuple(sorted(fetched, key=_newest_first_key, reverse=True))
            logger.info("Loaded %d history entries", len(self._entries))
        return self._entries

    async def refresh(self) -> tuple[HistoryEntry, ...]:
        """Manual reload. Never triggered automatically."""
        return await self.load()

    def reset(self) -> None:
        self._generation += 1
        self._entries = ()
        self.loaded = False
        self.loading = False
        self.last_error = None

    def select(self, entry: HistoryEntry) -> AnalysisResult:
        """Replay an archived entry into the active context and go to scan."""
        result = entry.to_result()
        self.context.set(result)
        if self._navigate is not None:
            self._navigate(ViewState.SCAN)
        return result

    def _is_stale(self, generation: int, request: int) -> bool:
        return generation != self._generation or request != self._request_seq
