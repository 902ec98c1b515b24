"""The spaced-repetition engine: one instance per study session."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping

from .card_store import CardStore
from .clock import system_now
from .config import Config
from .models import Card, ResponseQuality, ReviewLogEntry, Stats
from .review_log import ReviewLog
from .scheduler import apply_grade, due_cards
from .stats import compute_stats
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


class SpacedRepetitionEngine:
    """Owns a deck, its review history and the current selection.

    Construction loads both collections from ``store`` and selects the
    first due card. Callers must not interleave calls; nothing here is
    thread-safe.

    Args:
        initial_cards: The deck definition. Used when nothing valid is
            persisted yet, and as the template for ``reset_all``.
        store: Key-value backend for the ``flashcards`` and
            ``reviewHistory`` blobs.
        clock: Returns the current instant in epoch milliseconds.
        config: Scheduling configuration (daily new-card limit etc.).
    """

    def __init__(
        self,
        initial_cards: Iterable[Card | Mapping],
        store: KeyValueStore,
        clock: Callable[[], int] = system_now,
        config: Config | None = None,
    ):
        self.initial_cards = list(initial_cards)
        self.clock = clock
        self.config = config or Config()
        self.card_store = CardStore(store, clock)
        self.log = ReviewLog(store)
        self._current_id: str | None = None

        self.card_store.load(self.initial_cards)
        self.log.load()
        self.select_next()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def due_queue(self) -> list[Card]:
        """Every card presentable right now, in presentation order."""
        return due_cards(
            self.card_store.cards,
            self.log,
            self.clock(),
            self.config.new_cards_per_day,
        )

    def select_next(self) -> Card | None:
        """Pick the next card to present and remember it as current."""
        queue = self.due_queue()
        card = queue[0] if queue else None
        self._current_id = card.id if card else None
        if card is None:
            logger.debug("No cards due")
        else:
            logger.debug("Selected card %s (%s, %d due)", card.id, card.state.value, len(queue))
        return card

    @property
    def current_card(self) -> Card | None:
        if self._current_id is None:
            return None
        return self.card_store.get(self._current_id)

    # ------------------------------------------------------------------
    # Grading
    # ------------------------------------------------------------------

    def record_response(self, quality: ResponseQuality | int | str) -> Card | None:
        """Grade the current card and advance to the next one.

        Returns:
            The updated card, or None if no card was selected (nothing
            is changed in that case).

        Raises:
            ValueError: If ``quality`` is not a valid response quality.
        """
        quality = ResponseQuality.parse(quality)
        card = self.current_card
        if card is None:
            logger.debug("record_response(%s) with no current card", quality.name)
            return None

        updated, entry = apply_grade(card, quality, self.clock())
        self.card_store.replace(updated)
        self.log.append(entry)
        logger.info(
            "Card %s graded %s: interval %d -> %d, %s -> %s",
            card.id,
            quality.name,
            entry.old_interval,
            entry.new_interval,
            card.state.value,
            updated.state.value,
        )

        self.select_next()
        return updated

    def know(self) -> Card | None:
        """Shortcut for a GOOD grade."""
        return self.record_response(ResponseQuality.GOOD)

    def dont_know(self) -> Card | None:
        """Shortcut for an AGAIN grade."""
        return self.record_response(ResponseQuality.AGAIN)

    # ------------------------------------------------------------------
    # Reset & stats
    # ------------------------------------------------------------------

    def reset_all(self) -> None:
        """Discard all progress: pristine cards, empty log, fresh selection."""
        self._current_id = None
        self.card_store.reset_all(self.initial_cards)
        self.log.clear()
        logger.info("Reset %d card(s) and cleared review history", len(self.card_store))
        self.select_next()

    def get_stats(self) -> Stats:
        return compute_stats(
            self.card_store.cards,
            self.log.entries,
            self.clock(),
            self.config.mastered_interval_days,
        )

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def cards(self) -> list[Card]:
        return self.card_store.cards

    @property
    def review_log(self) -> list[ReviewLogEntry]:
        return self.log.entries
