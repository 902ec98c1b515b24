"""Tests for config module."""

import json

import pytest

from flashrep.config import (
    Config,
    config_path,
    format_config_display,
    load_config,
    save_config,
    set_config_value,
)


class TestConfig:
    """Tests for the Config dataclass."""

    def test_default_values(self):
        config = Config()
        assert config.new_cards_per_day == 20
        assert config.mastered_interval_days == 30

    def test_custom_values(self):
        config = Config(new_cards_per_day=5, mastered_interval_days=60)
        assert config.new_cards_per_day == 5
        assert config.mastered_interval_days == 60


class TestLoadSave:
    """Tests for load_config / save_config."""

    def test_creates_defaults(self, tmp_path):
        config = load_config(tmp_path)
        assert config == Config()
        assert config_path(tmp_path).exists()

    def test_roundtrip(self, tmp_path):
        save_config(Config(new_cards_per_day=7), tmp_path)
        assert load_config(tmp_path).new_cards_per_day == 7

    def test_unknown_keys_ignored(self, tmp_path):
        config_path(tmp_path).write_text(json.dumps({"new_cards_per_day": 3, "theme": "dark"}))
        config = load_config(tmp_path)
        assert config.new_cards_per_day == 3
        assert not hasattr(config, "theme")

    def test_corrupt_config_backed_up(self, tmp_path):
        config_path(tmp_path).write_text("{broken")
        config = load_config(tmp_path)
        assert config == Config()
        backup = tmp_path / "config.json.bak"
        assert backup.read_text() == "{broken"
        with open(config_path(tmp_path)) as f:
            assert json.load(f)["new_cards_per_day"] == 20

    def test_non_object_config_uses_defaults(self, tmp_path):
        config_path(tmp_path).write_text("[1, 2]")
        assert load_config(tmp_path) == Config()

    @pytest.mark.parametrize("value", ["20", 2.5, True, -1, None])
    def test_wrongly_typed_value_backed_up(self, tmp_path, value):
        raw = json.dumps({"new_cards_per_day": value})
        config_path(tmp_path).write_text(raw)
        config = load_config(tmp_path)
        assert config == Config()
        assert (tmp_path / "config.json.bak").read_text() == raw


class TestSetConfigValue:
    def test_sets_and_saves(self, tmp_path):
        config = Config()
        set_config_value(config, "new-cards-per-day", "12", tmp_path)
        assert config.new_cards_per_day == 12
        assert load_config(tmp_path).new_cards_per_day == 12

    def test_unknown_key(self, tmp_path):
        with pytest.raises(KeyError):
            set_config_value(Config(), "colour", "1", tmp_path)

    def test_not_a_number(self, tmp_path):
        with pytest.raises(ValueError):
            set_config_value(Config(), "new_cards_per_day", "lots", tmp_path)

    def test_negative(self, tmp_path):
        with pytest.raises(ValueError):
            set_config_value(Config(), "new_cards_per_day", "-1", tmp_path)


class TestFormatConfigDisplay:
    def test_lists_fields(self):
        text = format_config_display(Config(new_cards_per_day=9))
        assert "new-cards-per-day: 9" in text
        assert "mastered-interval-days: 30" in text
