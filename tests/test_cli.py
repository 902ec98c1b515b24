"""Tests for cli module - Click command registration and basic behavior."""

import json

import pytest
from click.testing import CliRunner

from flashrep.cli import ANSWER_KEYS, cli
from flashrep.clock import FixedClock
from flashrep.models import ResponseQuality

from conftest import NOW


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    """Run a command against a throwaway data dir at a fixed time."""
    clock = FixedClock(NOW)

    def _invoke(*args, input=None):
        return runner.invoke(
            cli,
            ["--data-dir", str(tmp_path), *args],
            input=input,
            obj={"clock": clock},
        )

    return _invoke


def _history(tmp_path) -> list:
    with open(tmp_path / "reviewHistory.json") as f:
        return json.load(f)


class TestCLIGroup:
    """Tests for the top-level CLI group."""

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Spaced-repetition flashcards" in result.output

    def test_cli_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestCLICommands:
    """Tests that all expected commands are registered."""

    @pytest.mark.parametrize("name", [
        "review", "next", "queue", "cards", "stats", "history", "reset", "config",
    ])
    def test_command_registered(self, name):
        assert name in cli.commands


class TestAnswerKeys:
    def test_digits_and_names(self):
        assert ANSWER_KEYS["1"] == ResponseQuality.AGAIN
        assert ANSWER_KEYS["4"] == ResponseQuality.EASY
        assert ANSWER_KEYS["good"] == ResponseQuality.GOOD
        assert ANSWER_KEYS["h"] == ResponseQuality.HARD


class TestReview:
    """Tests for the interactive review command."""

    def test_answers_until_caught_up(self, invoke, tmp_path):
        # five sample cards, each: reveal, then EASY
        result = invoke("review", input="\n4\n" * 5)
        assert result.exit_code == 0, result.output
        assert "Hola" in result.output
        assert "Hello" in result.output
        assert "All caught up!" in result.output
        assert "Answered 5 card(s)" in result.output
        assert len(_history(tmp_path)) == 5

    def test_quit_at_reveal(self, invoke, tmp_path):
        result = invoke("review", input="q\n")
        assert result.exit_code == 0
        assert "Answered 0 card(s)" in result.output
        assert not (tmp_path / "reviewHistory.json").exists()

    def test_quit_at_answer(self, invoke):
        result = invoke("review", input="\nq\n")
        assert result.exit_code == 0
        assert "Answered 0 card(s)" in result.output

    def test_limit(self, invoke, tmp_path):
        result = invoke("review", "--limit", "2", input="\ngood\n" * 2)
        assert result.exit_code == 0
        assert "Answered 2 card(s)" in result.output
        assert "Next review in 3 day(s)" in result.output
        assert [e["responseQuality"] for e in _history(tmp_path)] == [2, 2]

    def test_again_shows_same_day(self, invoke):
        result = invoke("review", "--limit", "1", input="\n1\n")
        assert "Again today" in result.output

    def test_progress_persists_between_runs(self, invoke):
        invoke("review", input="\n4\n" * 5)
        result = invoke("next")
        assert "All caught up" in result.output


class TestReadCommands:
    def test_next(self, invoke):
        result = invoke("next")
        assert result.exit_code == 0
        assert "Hola" in result.output

    def test_queue(self, invoke):
        result = invoke("queue")
        assert result.exit_code == 0
        assert "Hola" in result.output
        assert "Lo siento" in result.output

    def test_cards(self, invoke):
        result = invoke("cards")
        assert result.exit_code == 0
        assert "5 card(s)" in result.output
        assert "2.50" in result.output

    def test_stats_empty_history(self, invoke):
        result = invoke("stats")
        assert result.exit_code == 0
        assert "Total cards" in result.output
        assert "Retention rate" in result.output
        assert "Responses" not in result.output

    def test_stats_after_review(self, invoke):
        invoke("review", "--limit", "2", input="\n1\n\n3\n")
        result = invoke("stats")
        assert "Responses" in result.output
        assert "50%" in result.output

    def test_history_empty(self, invoke):
        result = invoke("history")
        assert "No reviews yet" in result.output

    def test_history_after_review(self, invoke):
        invoke("review", "--limit", "1", input="\n3\n")
        result = invoke("history")
        assert result.exit_code == 0
        assert "Good" in result.output
        assert "Hola" in result.output


class TestReset:
    def test_reset_with_yes(self, invoke, tmp_path):
        invoke("review", input="\n4\n" * 5)
        result = invoke("reset", "--yes")
        assert result.exit_code == 0
        assert "Reset 5 card(s)" in result.output
        assert _history(tmp_path) == []
        assert "Hola" in invoke("next").output

    def test_reset_cancelled(self, invoke, tmp_path):
        invoke("review", "--limit", "1", input="\n4\n")
        result = invoke("reset", input="n\n")
        assert "Cancelled" in result.output
        assert len(_history(tmp_path)) == 1

    def test_reset_confirmed(self, invoke, tmp_path):
        invoke("review", "--limit", "1", input="\n4\n")
        result = invoke("reset", input="y\n")
        assert "Reset 5 card(s)" in result.output
        assert _history(tmp_path) == []


class TestDeckOption:
    def test_custom_deck(self, runner, tmp_path):
        deck = tmp_path / "deck.json"
        deck.write_text(json.dumps([{"id": "x", "front": "Bonjour", "back": "Hello"}]))
        result = runner.invoke(
            cli,
            ["--data-dir", str(tmp_path / "data"), "--deck", str(deck), "next"],
            obj={"clock": FixedClock(NOW)},
        )
        assert result.exit_code == 0
        assert "Bonjour" in result.output

    def test_bad_deck_exits(self, runner, tmp_path):
        deck = tmp_path / "deck.json"
        deck.write_text("not json")
        result = runner.invoke(cli, ["--data-dir", str(tmp_path / "data"), "--deck", str(deck), "next"])
        assert result.exit_code == 1
        assert "Cannot load deck" in result.output

    def test_data_dir_from_env(self, runner, tmp_path):
        result = runner.invoke(
            cli, ["next"], env={"FLASHREP_DATA_DIR": str(tmp_path / "envdata")},
            obj={"clock": FixedClock(NOW)},
        )
        assert result.exit_code == 0
        assert (tmp_path / "envdata" / "config.json").exists()


class TestConfigCommand:
    def test_show(self, invoke):
        result = invoke("config")
        assert result.exit_code == 0
        assert "new-cards-per-day: 20" in result.output

    def test_show_one(self, invoke):
        result = invoke("config", "mastered-interval-days")
        assert "mastered-interval-days: 30" in result.output

    def test_set(self, invoke, tmp_path):
        result = invoke("config", "new-cards-per-day", "2")
        assert result.exit_code == 0
        with open(tmp_path / "config.json") as f:
            assert json.load(f)["new_cards_per_day"] == 2

    def test_set_limits_review(self, invoke):
        invoke("config", "new-cards-per-day", "2")
        result = invoke("review", input="\n4\n" * 5)
        assert "Answered 2 card(s)" in result.output

    def test_unknown_key(self, invoke):
        result = invoke("config", "theme", "dark")
        assert result.exit_code == 1
        assert "Unknown setting" in result.output

    def test_invalid_value(self, invoke):
        result = invoke("config", "new-cards-per-day", "many")
        assert result.exit_code == 1
        assert "Invalid value" in result.output

    def test_string_setting_in_file_falls_back(self, invoke, tmp_path):
        (tmp_path / "config.json").write_text('{"new_cards_per_day": "20"}')
        result = invoke("next")
        assert result.exit_code == 0, result.output
        assert "Hola" in result.output
        assert (tmp_path / "config.json.bak").exists()
