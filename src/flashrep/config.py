"""Configuration management for flashrep."""

import json
import logging
import shutil
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from .paths import CONFIG_FILENAME, DATA_DIR, atomic_json_write, ensure_data_dir
from .scheduler import NEW_CARDS_PER_DAY
from .stats import MASTERED_INTERVAL_DAYS

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Scheduling configuration."""

    new_cards_per_day: int = NEW_CARDS_PER_DAY
    mastered_interval_days: int = MASTERED_INTERVAL_DAYS


def config_path(data_dir: Path | None = None) -> Path:
    return Path(data_dir if data_dir is not None else DATA_DIR) / CONFIG_FILENAME


def _config_from_dict(data: dict) -> Config:
    """Build a Config from parsed JSON, ignoring unknown keys.

    Raises:
        ValueError: If a known setting is not a non-negative integer.
    """
    values = {k: v for k, v in data.items() if k in Config.__dataclass_fields__}
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"{key} must be a non-negative integer, got {value!r}")
    return Config(**values)


def load_config(data_dir: Path | None = None) -> Config:
    """Load config from disk, creating defaults if needed."""
    path = config_path(data_dir)
    ensure_data_dir(path.parent)

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            return _config_from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            # Back up corrupted config before overwriting with defaults
            logger.warning("Corrupt config at %s (%s); using defaults", path, e)
            backup_path = path.with_suffix(".json.bak")
            try:
                shutil.copy2(path, backup_path)
            except OSError:
                pass

    # Return defaults and save them
    config = Config()
    save_config(config, data_dir)
    return config


def save_config(config: Config, data_dir: Path | None = None) -> None:
    """Save config to disk."""
    atomic_json_write(config_path(data_dir), asdict(config))


def set_config_value(config: Config, key: str, value: str, data_dir: Path | None = None) -> Config:
    """Set one config field from its string form and save.

    Raises:
        KeyError: If ``key`` is not a config field.
        ValueError: If ``value`` is not a non-negative integer.
    """
    key = key.replace("-", "_")
    if key not in Config.__dataclass_fields__:
        raise KeyError(key)
    number = int(value)
    if number < 0:
        raise ValueError(f"{key} must not be negative")
    setattr(config, key, number)
    save_config(config, data_dir)
    return config


def format_config_display(config: Config) -> str:
    """Format config for display."""
    lines = ["Configuration", "=" * 40]
    for f in fields(config):
        lines.append(f"  {f.name.replace('_', '-')}: {getattr(config, f.name)}")
    lines.append("=" * 40)
    return "\n".join(lines)
