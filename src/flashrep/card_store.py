"""Authoritative card collection with write-through persistence."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping

from .clock import system_now
from .models import DEFAULT_EASE, MINIMUM_EASE, Card, CardState, MalformedRecordError
from .paths import CARDS_KEY
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


def normalize_card(raw: Card | Mapping, now: int) -> Card:
    """Build a card with every scheduling field present.

    Missing or falsy scheduling fields fall back to their defaults, so a
    bare ``{"id", "front", "back"}`` record becomes a new card due at ``now``.

    Raises:
        MalformedRecordError: If the record has no ``id``.
    """
    if isinstance(raw, Card):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping) or not raw.get("id"):
        raise MalformedRecordError(f"initial card needs an id: {raw!r}")

    state = raw.get("state") or CardState.NEW
    try:
        state = CardState(state)
    except ValueError:
        raise MalformedRecordError(f"unknown card state {state!r}") from None

    return Card(
        id=str(raw["id"]),
        front=raw.get("front", ""),
        back=raw.get("back", ""),
        interval=max(0, int(raw.get("interval") or 0)),
        ease=max(MINIMUM_EASE, float(raw.get("ease") or DEFAULT_EASE)),
        state=state,
        due=int(raw.get("due") or now),
        reviews=int(raw.get("reviews") or 0),
        lapses=int(raw.get("lapses") or 0),
        last_review=raw.get("lastReview", raw.get("last_review")) or None,
    )


def pristine_card(card: Card, now: int) -> Card:
    """Copy of ``card`` with all learning progress discarded."""
    return Card(id=card.id, front=card.front, back=card.back, due=now)


def parse_cards(blob) -> list[Card]:
    """Parse a persisted ``flashcards`` blob.

    Raises:
        MalformedRecordError: If the blob is not a list of valid cards
            with unique ids.
    """
    if not isinstance(blob, list):
        raise MalformedRecordError(f"expected a list of cards, got {type(blob).__name__}")
    cards = [Card.from_dict(item) for item in blob]
    ids = [card.id for card in cards]
    if len(set(ids)) != len(ids):
        raise MalformedRecordError("duplicate card ids")
    return cards


class CardStore:
    """Owns the card collection; every mutation is persisted before returning."""

    def __init__(self, store: KeyValueStore, clock: Callable[[], int] = system_now):
        self.store = store
        self.clock = clock
        self._cards: list[Card] = []

    def load(self, initial_cards: Iterable[Card | Mapping]) -> list[Card]:
        """Load the persisted collection, falling back to the normalized initial cards.

        A well-formed persisted collection wins outright; there is no
        per-field merge with the initial cards.
        """
        now = self.clock()
        normalized = [normalize_card(card, now) for card in initial_cards]

        blob = self.store.get(CARDS_KEY)
        if blob is None:
            self._cards = normalized
            return self.cards

        try:
            self._cards = parse_cards(blob)
            logger.debug("Loaded %d persisted card(s)", len(self._cards))
        except MalformedRecordError as e:
            logger.warning("Ignoring malformed '%s' blob: %s", CARDS_KEY, e)
            self._cards = normalized
        return self.cards

    def get(self, card_id: str) -> Card | None:
        for card in self._cards:
            if card.id == card_id:
                return card
        return None

    def replace(self, card: Card) -> bool:
        """Overwrite the card with the same id and persist.

        Returns:
            False (and writes nothing) if no card has that id.
        """
        for i, existing in enumerate(self._cards):
            if existing.id == card.id:
                self._cards[i] = card
                self.save()
                return True
        logger.debug("replace() ignored unknown card id %r", card.id)
        return False

    def reset_all(self, initial_cards: Iterable[Card | Mapping]) -> list[Card]:
        """Restore every initial card to its pristine state and persist."""
        now = self.clock()
        self._cards = [pristine_card(normalize_card(card, now), now) for card in initial_cards]
        self.save()
        return self.cards

    def save(self) -> None:
        self.store.set(CARDS_KEY, [card.to_dict() for card in self._cards])

    @property
    def cards(self) -> list[Card]:
        return list(self._cards)

    def __len__(self) -> int:
        return len(self._cards)
