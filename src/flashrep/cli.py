"""CLI commands for flashrep."""

import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from . import __version__
from .clock import local_date, system_now
from .config import Config, format_config_display, load_config, set_config_value
from .deck import load_deck, sample_deck
from .engine import SpacedRepetitionEngine
from .models import CardState, MalformedRecordError, ResponseQuality
from .paths import DATA_DIR
from .storage import JsonFileStore

load_dotenv()

console = Console()

STATE_STYLES = {
    CardState.NEW: "blue",
    CardState.LEARNING: "yellow",
    CardState.RELEARNING: "red",
    CardState.REVIEW: "green",
}

ANSWER_KEYS = {
    "1": ResponseQuality.AGAIN,
    "2": ResponseQuality.HARD,
    "3": ResponseQuality.GOOD,
    "4": ResponseQuality.EASY,
    "a": ResponseQuality.AGAIN,
    "h": ResponseQuality.HARD,
    "g": ResponseQuality.GOOD,
    "e": ResponseQuality.EASY,
}
for _quality in ResponseQuality:
    ANSWER_KEYS[_quality.name.lower()] = _quality


def _format_time(ms: int | None) -> str:
    if ms is None:
        return "never"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def _state_label(state: CardState) -> str:
    return f"[{STATE_STYLES[state]}]{state.value}[/{STATE_STYLES[state]}]"


def setup_logging(verbose: bool = False) -> None:
    """Route flashrep log records to stderr through rich."""
    pkg_logger = logging.getLogger("flashrep")
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in pkg_logger.handlers):
        pkg_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def get_engine(ctx: click.Context) -> SpacedRepetitionEngine:
    """Build the session engine from the group options, once per invocation."""
    obj = ctx.ensure_object(dict)
    if "engine" in obj:
        return obj["engine"]

    data_dir = obj.get("data_dir") or DATA_DIR
    deck_path = obj.get("deck")
    try:
        initial = load_deck(deck_path) if deck_path else sample_deck()
    except (MalformedRecordError, OSError) as e:
        console.print(f"[red]✗ Cannot load deck: {e}[/red]")
        sys.exit(1)

    config = obj.get("config") or load_config(data_dir)
    engine = SpacedRepetitionEngine(
        initial,
        JsonFileStore(data_dir),
        clock=obj.get("clock", system_now),
        config=config,
    )
    obj["engine"] = engine
    return engine


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="FLASHREP_DATA_DIR",
    help="Where progress is stored (default: ~/.flashrep).",
)
@click.option(
    "--deck",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="FLASHREP_DECK",
    help="JSON file with the initial cards (default: bundled sample deck).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, deck: Path | None, verbose: bool) -> None:
    """flashrep - Spaced-repetition flashcards in the terminal.

    Cards are scheduled with an SM-2 style algorithm and progress is
    saved after every answer.
    """
    setup_logging(verbose)
    obj = ctx.ensure_object(dict)
    obj.setdefault("data_dir", data_dir)
    obj.setdefault("deck", deck)


@cli.command()
@click.option("-l", "--limit", default=0, help="Stop after this many answers (0 = no limit)")
@click.pass_context
def review(ctx: click.Context, limit: int) -> None:
    """Study due cards interactively.

    Answer with again/hard/good/easy (or 1-4). Enter q to stop.
    """
    engine = get_engine(ctx)

    answered = 0
    while engine.current_card is not None:
        if limit and answered >= limit:
            break

        card = engine.current_card
        remaining = len(engine.due_queue())
        console.print()
        console.print(Panel(str(card.front), title=f"{_state_label(card.state)}  ({remaining} due)"))
        reveal = Prompt.ask("[dim]Enter to reveal, q to quit[/dim]", default="", show_default=False)
        if reveal.strip().lower() == "q":
            break

        console.print(Panel(str(card.back), style="cyan"))
        answer = Prompt.ask(
            "again(1) hard(2) good(3) easy(4)",
            choices=list(ANSWER_KEYS) + ["q"],
            show_choices=False,
        )
        if answer == "q":
            break

        updated = engine.record_response(ANSWER_KEYS[answer])
        answered += 1
        if updated.interval:
            console.print(f"[dim]Next review in {updated.interval} day(s)[/dim]")
        else:
            console.print("[dim]Again today[/dim]")

    if engine.current_card is None:
        console.print("\n[bold green]All caught up![/bold green]")
    console.print(f"[dim]Answered {answered} card(s)[/dim]")


@cli.command(name="next")
@click.pass_context
def next_card(ctx: click.Context) -> None:
    """Show the next card due, without answering it."""
    engine = get_engine(ctx)
    card = engine.current_card
    if card is None:
        console.print("[green]No cards due. All caught up![/green]")
        return

    console.print(Panel(str(card.front), title=_state_label(card.state)))
    console.print(f"[dim]Due since {_format_time(card.due)} · {card.reviews} review(s)[/dim]")


@cli.command()
@click.pass_context
def queue(ctx: click.Context) -> None:
    """List due cards in the order they will be shown."""
    engine = get_engine(ctx)
    due = engine.due_queue()
    if not due:
        console.print("[green]No cards due[/green]")
        return

    table = Table(title="Due Cards")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Front", style="cyan", max_width=40)
    table.add_column("State")
    table.add_column("Due", style="dim")

    for i, card in enumerate(due, 1):
        table.add_row(str(i), str(card.front), _state_label(card.state), _format_time(card.due))

    console.print(table)


@cli.command()
@click.pass_context
def cards(ctx: click.Context) -> None:
    """List every card with its scheduling data."""
    engine = get_engine(ctx)
    card_list = engine.cards
    if not card_list:
        console.print("[yellow]No cards in the deck[/yellow]")
        return

    table = Table(title="Cards")
    table.add_column("Front", style="cyan", max_width=30)
    table.add_column("Back", style="green", max_width=30)
    table.add_column("State")
    table.add_column("Interval", justify="right")
    table.add_column("Ease", justify="right")
    table.add_column("Due", style="dim")
    table.add_column("Lapses", justify="right")

    for card in card_list:
        table.add_row(
            str(card.front),
            str(card.back),
            _state_label(card.state),
            f"{card.interval}d",
            f"{card.ease:.2f}",
            _format_time(card.due),
            str(card.lapses),
        )

    console.print(table)
    console.print(f"\n[dim]{len(card_list)} card(s)[/dim]")


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show learning statistics."""
    engine = get_engine(ctx)
    s = engine.get_stats()

    table = Table(title="Learning Statistics", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total cards", str(s.total_cards))
    table.add_row("New", f"[blue]{s.new_cards}[/blue]")
    table.add_row("Learning", f"[yellow]{s.learning_cards}[/yellow]")
    table.add_row("Review", f"[green]{s.review_cards}[/green]")
    table.add_row("Mastered", f"{s.mastered_cards} ({s.mastery_percentage:.0f}%)")
    table.add_row("Average ease", f"{s.average_ease:.2f}")
    table.add_row("Retention rate", f"{s.retention_rate:.0f}%")
    console.print(table)

    today = local_date(engine.clock())
    week = Table(title="Cards Reviewed Per Day")
    for offset in range(6, -1, -1):
        week.add_column((today - timedelta(days=offset)).strftime("%a"), justify="right")
    week.add_row(*(str(n) for n in s.cards_per_day))
    console.print(week)

    if s.total_reviews:
        responses = Table(title="Responses")
        for quality in ResponseQuality:
            responses.add_column(quality.name.capitalize(), justify="right")
        responses.add_row(*(str(n) for n in s.response_distribution))
        console.print(responses)


@cli.command()
@click.option("-n", "--count", default=10, help="Number of entries to show")
@click.pass_context
def history(ctx: click.Context, count: int) -> None:
    """Show the most recent answers."""
    engine = get_engine(ctx)
    entries = engine.log.recent(count)
    if not entries:
        console.print("[yellow]No reviews yet[/yellow]")
        return

    fronts = {card.id: str(card.front) for card in engine.cards}

    table = Table(title="Review History")
    table.add_column("When", style="dim")
    table.add_column("Card", style="cyan", max_width=30)
    table.add_column("Answer")
    table.add_column("Interval", justify="right")
    table.add_column("Ease", justify="right")

    for entry in entries:
        table.add_row(
            _format_time(entry.timestamp),
            fronts.get(entry.card_id, entry.card_id),
            entry.response_quality.name.capitalize(),
            f"{entry.old_interval} → {entry.new_interval}",
            f"{entry.old_ease:.2f} → {entry.new_ease:.2f}",
        )

    console.print(table)


@cli.command()
@click.option("-y", "--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def reset(ctx: click.Context, yes: bool) -> None:
    """Reset all cards and clear the review history."""
    if not yes and not Confirm.ask(
        "[yellow]This discards all learning progress. Continue?[/yellow]", default=False
    ):
        console.print("[dim]Cancelled[/dim]")
        return

    engine = get_engine(ctx)
    engine.reset_all()
    console.print(f"[green]✓ Reset {len(engine.cards)} card(s)[/green]")


@cli.command(name="config")
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.pass_context
def config_cmd(ctx: click.Context, key: str | None, value: str | None) -> None:
    """Show or change configuration.

    Without arguments, shows all settings. With KEY VALUE, changes one,
    e.g. 'flashrep config new-cards-per-day 10'.
    """
    data_dir = ctx.obj.get("data_dir") or DATA_DIR
    config: Config = load_config(data_dir)

    if key is None:
        console.print(format_config_display(config))
        return

    if value is None:
        field_name = key.replace("-", "_")
        if field_name not in Config.__dataclass_fields__:
            console.print(f"[red]Unknown setting '{key}'.[/red]")
            sys.exit(1)
        console.print(f"{key}: {getattr(config, field_name)}")
        return

    try:
        set_config_value(config, key, value, data_dir)
    except KeyError:
        console.print(f"[red]Unknown setting '{key}'.[/red]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]✗ Invalid value: {e}[/red]")
        sys.exit(1)
    console.print(f"[green]✓ {key} set to {value}[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
