"""The single in-memory cell holding the analysis currently on screen."""

import logging
from typing import Callable, Optional

from medibot.schemas.prescription import AnalysisResult

logger = logging.getLogger(__name__)

Subscriber = Callable[[Optional[AnalysisResult]], None]


class ActiveContextStore:
    """
    Holds at most one AnalysisResult.

    ``set`` always replaces the whole value; nothing here ever merges two
    results. Subscribers are called synchronously, in subscription order,
    after every ``set``.
    """

    def __init__(self):
        self._result: Optional[AnalysisResult] = None
        self._subscribers: list[Subscriber] = []

    def get(self) -> Optional[AnalysisResult]:
        return self._result

    def set(self, result: Optional[AnalysisResult]) -> None:
        self._result = result
        logger.debug(
            "Active context %s",
            "cleared" if result is None else f"set ({len(result.medicines)} medicines)",
        )
        for callback in list(self._subscribers):
            try:
                callback(result)
            except Exception:
                # A broken view must not blank the others
                logger.exception("Active context subscriber failed")

    def clear(self) -> None:
        self.set(None)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a view; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
