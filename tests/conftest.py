"""Shared fixtures for flashrep tests."""

from datetime import datetime

import pytest

from flashrep.clock import FixedClock, to_ms
from flashrep.models import Card, CardState
from flashrep.storage import MemoryStore

# Mid-June keeps every trailing 7-day window clear of DST switches
NOW = to_ms(datetime(2025, 6, 18, 12, 0))


def make_card(card_id: str = "c1", **overrides) -> Card:
    """A fully-populated card, due at NOW unless overridden."""
    fields = {
        "id": card_id,
        "front": f"front {card_id}",
        "back": f"back {card_id}",
        "due": NOW,
    }
    fields.update(overrides)
    return Card(**fields)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def deck():
    return [
        {"id": "1", "front": "Hola", "back": "Hello"},
        {"id": "2", "front": "Adiós", "back": "Goodbye"},
        {"id": "3", "front": "Gracias", "back": "Thank you"},
    ]


@pytest.fixture
def review_card():
    return make_card("r1", state=CardState.REVIEW, interval=10, ease=2.5)
