"""Centralized storage paths for flashrep."""

import json
import os
import tempfile
from pathlib import Path

# Base data directory for all persistent storage
DATA_DIR = Path.home() / ".flashrep"

# Configuration
CONFIG_FILENAME = "config.json"

# Persisted blobs (one file per store key)
CARDS_KEY = "flashcards"
REVIEW_HISTORY_KEY = "reviewHistory"

# Sample deck (bundled with package)
SAMPLE_DECK_FILE = Path(__file__).parent / "data" / "sample_deck.json"


def ensure_data_dir(data_dir: Path | None = None) -> Path:
    """Ensure the data directory exists and return it."""
    path = Path(data_dir) if data_dir is not None else DATA_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_json_write(path: Path, data, *, indent: int = 2, ensure_ascii: bool = False) -> None:
    """Write JSON data to a file atomically.

    Writes to a temporary file in the same directory, then renames it
    to the target path. This prevents data loss if a crash occurs mid-write.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
