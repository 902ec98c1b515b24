"""Statistics aggregation over a card collection and its review log.

This is a pure computation module with no I/O.
"""

from __future__ import annotations

from datetime import timedelta

from .clock import local_date
from .models import Card, CardState, ResponseQuality, ReviewLogEntry, Stats

# Cards whose interval exceeds this many days count as mastered
MASTERED_INTERVAL_DAYS = 30

TRAILING_DAYS = 7


def compute_stats(
    cards: list[Card],
    entries: list[ReviewLogEntry],
    now: int,
    mastered_interval: int = MASTERED_INTERVAL_DAYS,
) -> Stats:
    """Derive a Stats snapshot.

    Empty collections produce zeroed metrics rather than dividing by zero.
    """
    total = len(cards)
    new = sum(1 for c in cards if c.state == CardState.NEW)
    learning = sum(1 for c in cards if c.state in (CardState.LEARNING, CardState.RELEARNING))
    review = sum(1 for c in cards if c.state == CardState.REVIEW)
    mastered = sum(1 for c in cards if c.interval > mastered_interval)

    average_ease = sum(c.ease for c in cards) / total if total else 0.0

    correct = sum(1 for e in entries if e.is_correct)
    retention_rate = correct / len(entries) * 100 if entries else 0.0

    distribution = [0] * len(ResponseQuality)
    for entry in entries:
        distribution[entry.response_quality] += 1

    return Stats(
        total_cards=total,
        new_cards=new,
        learning_cards=learning,
        review_cards=review,
        mastered_cards=mastered,
        average_ease=average_ease,
        retention_rate=retention_rate,
        cards_per_day=cards_per_day(entries, now),
        response_distribution=distribution,
    )


def cards_per_day(entries: list[ReviewLogEntry], now: int, days: int = TRAILING_DAYS) -> list[int]:
    """Reviews per local calendar day, oldest first, ending with today."""
    today = local_date(now)
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    counts = dict.fromkeys(window, 0)
    for entry in entries:
        day = local_date(entry.timestamp)
        if day in counts:
            counts[day] += 1
    return [counts[day] for day in window]


def format_stats_text(stats: Stats) -> str:
    """Format statistics as plain text."""
    if stats.total_cards == 0:
        return "No cards in the deck."

    lines = ["Learning Statistics", "=" * 40]
    lines.append(f"  Total cards:    {stats.total_cards}")
    lines.append(f"  New:            {stats.new_cards}")
    lines.append(f"  Learning:       {stats.learning_cards}")
    lines.append(f"  Review:         {stats.review_cards}")
    lines.append(f"  Mastered:       {stats.mastered_cards} ({stats.mastery_percentage:.0f}%)")
    lines.append(f"  Average ease:   {stats.average_ease:.2f}")
    lines.append(f"  Retention rate: {stats.retention_rate:.0f}%")
    lines.append("")
    lines.append("  Last 7 days: " + " ".join(str(n) for n in stats.cards_per_day))

    if stats.total_reviews:
        labels = [q.name.capitalize() for q in ResponseQuality]
        parts = [f"{label} {n}" for label, n in zip(labels, stats.response_distribution)]
        lines.append("  Responses:   " + ", ".join(parts))

    lines.append("=" * 40)
    return "\n".join(lines)
