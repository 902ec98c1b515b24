"""Append-only history of grading events."""

from __future__ import annotations

import logging
from datetime import date

from .clock import local_date
from .models import MalformedRecordError, ReviewLogEntry
from .paths import REVIEW_HISTORY_KEY
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


def parse_entries(blob) -> list[ReviewLogEntry]:
    """Parse a persisted ``reviewHistory`` blob.

    Raises:
        MalformedRecordError: If the blob is not a list of valid entries.
    """
    if not isinstance(blob, list):
        raise MalformedRecordError(f"expected a list of reviews, got {type(blob).__name__}")
    return [ReviewLogEntry.from_dict(item) for item in blob]


class ReviewLog:
    """Owns the review history; every mutation is persisted before returning."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._entries: list[ReviewLogEntry] = []

    def load(self) -> list[ReviewLogEntry]:
        blob = self.store.get(REVIEW_HISTORY_KEY)
        if blob is None:
            self._entries = []
            return self.entries

        try:
            self._entries = parse_entries(blob)
        except MalformedRecordError as e:
            logger.warning("Ignoring malformed '%s' blob: %s", REVIEW_HISTORY_KEY, e)
            self._entries = []
        return self.entries

    def append(self, entry: ReviewLogEntry) -> None:
        self._entries.append(entry)
        self.save()

    def clear(self) -> None:
        self._entries = []
        self.save()

    def count_on(self, day: date) -> int:
        """Number of entries logged on the given local calendar day."""
        return sum(1 for entry in self._entries if local_date(entry.timestamp) == day)

    def count_today(self, now: int) -> int:
        """Number of entries on the same local calendar day as ``now``.

        This is a calendar-date comparison, not a rolling 24 hour window.
        """
        return self.count_on(local_date(now))

    def recent(self, count: int = 10) -> list[ReviewLogEntry]:
        """The most recent entries, oldest first."""
        if count <= 0:
            return []
        return self._entries[-count:]

    def save(self) -> None:
        self.store.set(REVIEW_HISTORY_KEY, [entry.to_dict() for entry in self._entries])

    @property
    def entries(self) -> list[ReviewLogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
