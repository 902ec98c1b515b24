"""Data models for flashrep."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum

DEFAULT_EASE = 2.5
MINIMUM_EASE = 1.3


class MalformedRecordError(ValueError):
    """Raised when a stored or supplied record cannot be parsed."""


class CardState(str, Enum):
    """Learning state of a card."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


class ResponseQuality(IntEnum):
    """How well the user recalled a card."""

    AGAIN = 0
    HARD = 1
    GOOD = 2
    EASY = 3

    @classmethod
    def parse(cls, value) -> ResponseQuality:
        """Coerce a quality, its integer value or its name (any case)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown response quality: {value!r}") from None
        if isinstance(value, bool):
            raise ValueError(f"Unknown response quality: {value!r}")
        return cls(value)


def _require(data: dict, key: str):
    if key not in data:
        raise MalformedRecordError(f"missing field '{key}'")
    return data[key]


def _as_number(data: dict, key: str) -> int | float:
    value = _require(data, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedRecordError(f"field '{key}' must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise MalformedRecordError(f"field '{key}' must be finite, got {value!r}")
    return value


def _as_int(data: dict, key: str) -> int:
    value = _as_number(data, key)
    if isinstance(value, float) and not value.is_integer():
        raise MalformedRecordError(f"field '{key}' must be a whole number, got {value!r}")
    return int(value)


def _as_float(data: dict, key: str) -> float:
    value = _as_number(data, key)
    try:
        return float(value)
    except OverflowError:
        raise MalformedRecordError(f"field '{key}' is out of range") from None


@dataclass
class Card:
    """A learnable unit and its scheduling parameters.

    ``due`` and ``last_review`` are epoch milliseconds; ``interval`` is in days.
    """

    id: str
    front: str
    back: str
    interval: int = 0
    ease: float = DEFAULT_EASE
    state: CardState = CardState.NEW
    due: int = 0
    reviews: int = 0
    lapses: int = 0
    last_review: int | None = None

    def is_due(self, now: int) -> bool:
        return self.due <= now

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "front": self.front,
            "back": self.back,
            "interval": self.interval,
            "ease": self.ease,
            "state": self.state.value,
            "due": self.due,
            "reviews": self.reviews,
            "lapses": self.lapses,
            "lastReview": self.last_review,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Card:
        """Parse a persisted card record.

        Raises:
            MalformedRecordError: If a field is missing or has the wrong shape.
        """
        if not isinstance(data, dict):
            raise MalformedRecordError(f"card record must be an object, got {type(data).__name__}")

        try:
            state = CardState(_require(data, "state"))
        except ValueError:
            raise MalformedRecordError(f"unknown card state {data.get('state')!r}") from None

        interval = _as_int(data, "interval")
        ease = _as_float(data, "ease")
        if interval < 0:
            raise MalformedRecordError(f"negative interval {interval}")
        if ease < MINIMUM_EASE:
            raise MalformedRecordError(f"ease {ease} below minimum {MINIMUM_EASE}")

        last_review = data.get("lastReview")
        if last_review is not None:
            last_review = _as_int(data, "lastReview")

        return cls(
            id=str(_require(data, "id")),
            front=_require(data, "front"),
            back=_require(data, "back"),
            interval=interval,
            ease=ease,
            state=state,
            due=_as_int(data, "due"),
            reviews=_as_int(data, "reviews"),
            lapses=_as_int(data, "lapses"),
            last_review=last_review,
        )


@dataclass(frozen=True)
class ReviewLogEntry:
    """One immutable grading event."""

    id: str
    card_id: str
    timestamp: int
    response_quality: ResponseQuality
    old_interval: int
    new_interval: int
    old_ease: float
    new_ease: float

    @property
    def is_correct(self) -> bool:
        return self.response_quality > ResponseQuality.AGAIN

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cardId": self.card_id,
            "timestamp": self.timestamp,
            "responseQuality": int(self.response_quality),
            "oldInterval": self.old_interval,
            "newInterval": self.new_interval,
            "oldEase": self.old_ease,
            "newEase": self.new_ease,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ReviewLogEntry:
        if not isinstance(data, dict):
            raise MalformedRecordError(f"review record must be an object, got {type(data).__name__}")

        raw_quality = _as_int(data, "responseQuality")
        try:
            quality = ResponseQuality(raw_quality)
        except ValueError:
            raise MalformedRecordError(f"unknown response quality {raw_quality!r}") from None

        return cls(
            id=str(_require(data, "id")),
            card_id=str(_require(data, "cardId")),
            timestamp=_as_int(data, "timestamp"),
            response_quality=quality,
            old_interval=_as_int(data, "oldInterval"),
            new_interval=_as_int(data, "newInterval"),
            old_ease=_as_float(data, "oldEase"),
            new_ease=_as_float(data, "newEase"),
        )


@dataclass
class Stats:
    """Aggregate learning statistics, derived on demand."""

    total_cards: int = 0
    new_cards: int = 0
    learning_cards: int = 0
    review_cards: int = 0
    mastered_cards: int = 0
    average_ease: float = 0.0
    retention_rate: float = 0.0
    cards_per_day: list[int] = field(default_factory=lambda: [0] * 7)
    response_distribution: list[int] = field(default_factory=lambda: [0] * 4)

    @property
    def mastery_percentage(self) -> float:
        """Share of the deck that counts as mastered, in percent."""
        if self.total_cards == 0:
            return 0.0
        return self.mastered_cards / self.total_cards * 100

    @property
    def total_reviews(self) -> int:
        return sum(self.response_distribution)
