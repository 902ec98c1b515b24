"""Deck definitions: the initial cards an engine is built from."""

import json
from pathlib import Path

from .models import MalformedRecordError
from .paths import SAMPLE_DECK_FILE


def load_deck(path: Path) -> list[dict]:
    """Load a deck definition from a JSON file.

    The file must hold a JSON array of objects, each with at least an
    ``id``. Scheduling fields are optional and filled in on load.

    Raises:
        MalformedRecordError: If the file is not valid JSON or has the
            wrong shape.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise MalformedRecordError(f"{path.name} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise MalformedRecordError(f"{path.name} must contain a JSON array of cards")

    seen = set()
    for i, item in enumerate(data):
        if not isinstance(item, dict) or not item.get("id"):
            raise MalformedRecordError(f"card #{i + 1} in {path.name} has no id")
        card_id = str(item["id"])
        if card_id in seen:
            raise MalformedRecordError(f"duplicate card id {card_id!r} in {path.name}")
        seen.add(card_id)
    return data


def sample_deck() -> list[dict]:
    """The bundled five-card Spanish starter deck."""
    return load_deck(SAMPLE_DECK_FILE)
