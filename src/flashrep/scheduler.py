"""SM-2 style scheduling: which card comes next, and what a grade does to it.

Everything here is a pure function of its arguments. The engine owns the
collections and the clock; this module only reads them.

Selection order among due cards::

    RELEARNING < LEARNING < NEW < REVIEW, then earliest ``due`` first

Grading table (interval in days)::

    state       AGAIN              HARD                GOOD                EASY
    NEW         0 -> LEARNING      1 -> LEARNING       3 -> LEARNING       7 -> REVIEW
    LEARNING/   0, unchanged       floor(i*1.2),       floor(i*1.5),       7 -> REVIEW
    RELEARNING                     REVIEW if i >= 3    REVIEW if i >= 1
    REVIEW      floor(i*0.5)       floor(i*1.2)        floor(i*ease)       floor(i*ease*1.3)
                -> RELEARNING

Every computed (non-constant) interval is at least 1. Ease only changes
when grading a REVIEW card.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import replace
from typing import NamedTuple, Protocol

from .clock import DAY_MS
from .models import MINIMUM_EASE, Card, CardState, ResponseQuality, ReviewLogEntry

NEW_CARDS_PER_DAY = 20

# Fixed intervals handed out when a card leaves NEW: HARD, GOOD, EASY
INITIAL_INTERVALS = (1, 3, 7)

EASE_MODIFIERS = {
    ResponseQuality.AGAIN: -0.15,
    ResponseQuality.HARD: -0.15,
    ResponseQuality.GOOD: 0.0,
    ResponseQuality.EASY: 0.15,
}

LAPSE_INTERVAL_CHANGE = 0.5
HARD_MULTIPLIER = 1.2
LEARNING_GOOD_MULTIPLIER = 1.5
EASY_BONUS = 1.3

STATE_PRIORITY = {
    CardState.RELEARNING: 0,
    CardState.LEARNING: 1,
    CardState.NEW: 2,
    CardState.REVIEW: 3,
}


class DailyCounter(Protocol):
    def count_today(self, now: int) -> int: ...


class GradeResult(NamedTuple):
    new_interval: int
    new_ease: float
    new_state: CardState


def _scaled(interval: int, factor: float) -> int:
    return max(1, math.floor(interval * factor))


def due_cards(
    cards: list[Card],
    log: DailyCounter,
    now: int,
    new_cards_per_day: int = NEW_CARDS_PER_DAY,
) -> list[Card]:
    """All presentable cards at ``now``, in presentation order.

    NEW cards are dropped once the log already holds ``new_cards_per_day``
    entries for today's calendar date. Other states are never throttled.
    """
    due = [card for card in cards if card.is_due(now)]
    # sort is stable, so equal keys keep collection order
    due.sort(key=lambda card: (STATE_PRIORITY[card.state], card.due))

    if log.count_today(now) >= new_cards_per_day:
        due = [card for card in due if card.state != CardState.NEW]
    return due


def select_next(
    cards: list[Card],
    log: DailyCounter,
    now: int,
    new_cards_per_day: int = NEW_CARDS_PER_DAY,
) -> Card | None:
    """The card to present next, or None when everything is caught up."""
    queue = due_cards(cards, log, now, new_cards_per_day)
    return queue[0] if queue else None


def next_ease(card: Card, quality: ResponseQuality) -> float:
    if card.state != CardState.REVIEW:
        return card.ease
    return max(MINIMUM_EASE, card.ease + EASE_MODIFIERS[quality])


def grade(card: Card, quality: ResponseQuality) -> GradeResult:
    """Compute the interval, ease and state that follow a grade.

    The card itself is not modified.
    """
    quality = ResponseQuality.parse(quality)
    interval = card.interval
    state = card.state
    new_ease = next_ease(card, quality)

    if state == CardState.NEW:
        if quality == ResponseQuality.AGAIN:
            return GradeResult(0, new_ease, CardState.LEARNING)
        if quality == ResponseQuality.HARD:
            return GradeResult(INITIAL_INTERVALS[0], new_ease, CardState.LEARNING)
        if quality == ResponseQuality.GOOD:
            return GradeResult(INITIAL_INTERVALS[1], new_ease, CardState.LEARNING)
        return GradeResult(INITIAL_INTERVALS[2], new_ease, CardState.REVIEW)

    if state in (CardState.LEARNING, CardState.RELEARNING):
        if quality == ResponseQuality.AGAIN:
            return GradeResult(0, new_ease, state)
        if quality == ResponseQuality.HARD:
            # HARD graduates only from the GOOD initial interval upwards
            graduates = interval >= INITIAL_INTERVALS[1]
            return GradeResult(
                _scaled(interval, HARD_MULTIPLIER),
                new_ease,
                CardState.REVIEW if graduates else state,
            )
        if quality == ResponseQuality.GOOD:
            graduates = interval >= INITIAL_INTERVALS[0]
            return GradeResult(
                _scaled(interval, LEARNING_GOOD_MULTIPLIER),
                new_ease,
                CardState.REVIEW if graduates else state,
            )
        return GradeResult(INITIAL_INTERVALS[2], new_ease, CardState.REVIEW)

    # REVIEW: multiply by the ease held before this grade
    if quality == ResponseQuality.AGAIN:
        return GradeResult(_scaled(interval, LAPSE_INTERVAL_CHANGE), new_ease, CardState.RELEARNING)
    if quality == ResponseQuality.HARD:
        return GradeResult(_scaled(interval, HARD_MULTIPLIER), new_ease, state)
    if quality == ResponseQuality.GOOD:
        return GradeResult(_scaled(interval, card.ease), new_ease, state)
    return GradeResult(_scaled(interval * card.ease, EASY_BONUS), new_ease, state)


def due_after(now: int, interval: int) -> int:
    """Instant a card becomes due again; interval 0 means immediately."""
    return now + interval * DAY_MS


def new_review_id() -> str:
    return f"review_{uuid.uuid4().hex}"


def apply_grade(card: Card, quality: ResponseQuality, now: int) -> tuple[Card, ReviewLogEntry]:
    """Grade ``card`` at ``now``.

    Returns:
        The updated card and the log entry describing the change.
    """
    quality = ResponseQuality.parse(quality)
    result = grade(card, quality)

    updated = replace(
        card,
        interval=result.new_interval,
        ease=result.new_ease,
        state=result.new_state,
        due=due_after(now, result.new_interval),
        reviews=card.reviews + 1,
        lapses=card.lapses + 1 if quality == ResponseQuality.AGAIN else card.lapses,
        last_review=now,
    )
    entry = ReviewLogEntry(
        id=new_review_id(),
        card_id=card.id,
        timestamp=now,
        response_quality=quality,
        old_interval=card.interval,
        new_interval=result.new_interval,
        old_ease=card.ease,
        new_ease=result.new_ease,
    )
    return updated, entry
