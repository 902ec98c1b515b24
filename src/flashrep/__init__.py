"""flashrep - spaced-repetition flashcard scheduling."""

__version__ = "0.1.0"

from .engine import SpacedRepetitionEngine
from .models import Card, CardState, MalformedRecordError, ResponseQuality, ReviewLogEntry, Stats
from .storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "Card",
    "CardState",
    "JsonFileStore",
    "KeyValueStore",
    "MalformedRecordError",
    "MemoryStore",
    "ResponseQuality",
    "ReviewLogEntry",
    "SpacedRepetitionEngine",
    "Stats",
]
