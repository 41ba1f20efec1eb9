"""
Typer CLI for the wordledger progress core.

Commands:
    wordledger init                 - Initialize database tables
    wordledger seed PATH            - Seed levels and items from a corpus JSON file
    wordledger review ID OUTCOME    - Record a review (again / later / known)
    wordledger quiz ID              - Show 4-choice options for an item
    wordledger queue                - Show the review queue
    wordledger stats                - Show streak and today's counters
    wordledger levels               - Show per-level progress and unlock state
    wordledger unlock LEVEL_ID      - Unlock a level (timed or permanent)
    wordledger quota                - Show or consume the free-tier daily quota
    wordledger now                  - Show trusted time

Usage:
    wordledger --help
    wordledger seed corpus.json
    wordledger review 12 known
    wordledger unlock 3 --hours 3
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import Settings, get_settings
from wordledger import __version__
from wordledger.core.exceptions import CorpusError, UnknownLevel, WordLedgerError
from wordledger.core.mastery import MAX_LEVEL, mastery_label
from wordledger.core.outcome import ReviewOutcome
from wordledger.study.service import WordLedgerService, build_service

app = typer.Typer(
    help="wordledger: vocabulary progress ledger with a tamper-resistant clock",
    no_args_is_help=True,
)

console = Console()


def configure_logging(settings: Settings) -> None:
    """Route loguru to stderr (and an optional rotating file)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB", retention=5)


class CLIContext:
    """Lazily builds the service so ``--help`` never touches the database."""

    def __init__(self):
        self.settings = get_settings()
        self._service: WordLedgerService | None = None

    @property
    def service(self) -> WordLedgerService:
        if self._service is None:
            self._service = build_service(self.settings)
        return self._service


def _ctx(ctx: typer.Context) -> CLIContext:
    if ctx.obj is None:
        ctx.obj = CLIContext()
    return ctx.obj


def _format_millis(millis: int) -> str:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def _mastery_bar(level: int) -> str:
    return "█" * level + "░" * (MAX_LEVEL - level)


@app.callback()
def main_callback(ctx: typer.Context) -> None:
    """Vocabulary progress ledger."""
    configure_logging(_ctx(ctx).settings)


@app.command("init")
def init(ctx: typer.Context) -> None:
    """
    Initialize database tables.

    Safe to run multiple times (idempotent).
    """
    _ctx(ctx).service  # building the service creates the schema
    rprint("[green]✓[/green] Database initialized!")


@app.command("seed")
def seed(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Corpus JSON file"),
) -> None:
    """Seed levels and items once; a non-empty corpus is left untouched."""
    try:
        created = _ctx(ctx).service.seed_corpus(path)
    except CorpusError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if created:
        rprint(f"[green]✓[/green] Seeded {created} items")
    else:
        rprint("[yellow]⚠[/yellow] Corpus already present, nothing seeded")


@app.command("review")
def review(
    ctx: typer.Context,
    item_id: int = typer.Argument(..., help="Item id"),
    outcome: str = typer.Argument(..., help="again, later or known"),
) -> None:
    """Record a review outcome for an item."""
    try:
        parsed = ReviewOutcome.parse(outcome)
    except ValueError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=2)

    service = _ctx(ctx).service
    try:
        recorded = service.record_result(item_id, parsed)
    except WordLedgerError as e:
        rprint(f"[red]✗[/red] Review not saved: {e}")
        raise typer.Exit(code=1)

    if not recorded:
        rprint(f"[red]✗[/red] Item {item_id} not found")
        raise typer.Exit(code=1)

    item = service.get_item(item_id)
    stats = service.user_stats()
    rprint(
        f"[green]✓[/green] {item.prompt}: {_mastery_bar(item.mastery_level)} "
        f"{mastery_label(item.mastery_level)} · streak {stats.streak_days}d"
    )


@app.command("quiz")
def quiz(
    ctx: typer.Context,
    item_id: int = typer.Argument(..., help="Item id"),
    reverse: bool = typer.Option(False, "--reverse", help="Quiz the prompt instead of the answer"),
) -> None:
    """Show 4-choice options for an item."""
    service = _ctx(ctx).service
    item = service.get_item(item_id)
    if item is None:
        rprint(f"[red]✗[/red] Item {item_id} not found")
        raise typer.Exit(code=1)

    options = service.get_quiz_options(item, reverse=reverse)
    rprint(f"[bold cyan]{item.answer if reverse else item.prompt}[/bold cyan]")
    for index, option in enumerate(options.options, 1):
        rprint(f"  [bold]{index}[/bold]) {option}")
    rprint(f"[dim]answer: {options.correct_index + 1}[/dim]")


@app.command("queue")
def queue(
    ctx: typer.Context,
    level: Optional[int] = typer.Option(None, "--level", "-l", help="Restrict to one level"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum items"),
) -> None:
    """Show items still below the top mastery rung."""
    items = _ctx(ctx).service.review_queue(level_id=level, limit=limit)
    if not items:
        rprint("[green]✓[/green] Nothing left to review")
        return

    table = Table(title="Review queue")
    table.add_column("ID", justify="right")
    table.add_column("Prompt")
    table.add_column("Answer")
    table.add_column("Mastery")
    for item in items:
        table.add_row(str(item.id), item.prompt, item.answer, _mastery_bar(item.mastery_level))
    console.print(table)


@app.command("stats")
def stats(ctx: typer.Context) -> None:
    """Show streak and today's counters."""
    service = _ctx(ctx).service
    current = service.user_stats()
    table = Table(title="Study stats", show_header=False)
    table.add_row("Streak", f"{current.streak_days} days")
    table.add_row("Best streak", f"{current.max_streak} days")
    table.add_row("Last study day", current.last_study_date or "-")
    table.add_row("Studied today", str(current.today_studied_count))
    table.add_row("Reviews today", str(current.today_review_count))
    table.add_row("Total reviews", str(service.total_reviews()))
    console.print(table)


@app.command("levels")
def levels(
    ctx: typer.Context,
    premium: bool = typer.Option(False, "--premium", help="Evaluate unlocks as a premium user"),
) -> None:
    """Show per-level progress and unlock state."""
    service = _ctx(ctx).service
    table = Table(title="Levels")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Mastered", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Access")
    for progress in service.level_progress():
        unlocked = service.is_level_unlocked(progress.level.id, is_premium=premium)
        table.add_row(
            str(progress.level.id),
            progress.level.name if progress.level.is_parent else f"  {progress.level.name}",
            f"{progress.mastered_items}/{progress.total_items}",
            f"{progress.progress_percent:.1f}%",
            "[green]open[/green]" if unlocked else "[red]locked[/red]",
        )
    console.print(table)


@app.command("unlock")
def unlock(
    ctx: typer.Context,
    level_id: int = typer.Argument(..., help="Level id"),
    hours: Optional[int] = typer.Option(None, "--hours", help="Unlock duration (default from settings)"),
    permanent: bool = typer.Option(False, "--permanent", help="Unlock for good"),
) -> None:
    """Unlock a level until trusted now + duration, or permanently."""
    try:
        state = _ctx(ctx).service.unlock_level(level_id, duration_hours=hours, permanent=permanent)
    except UnknownLevel as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if state.expiry_millis is None:
        rprint(f"[green]✓[/green] Level {level_id} unlocked permanently")
    else:
        rprint(f"[green]✓[/green] Level {level_id} unlocked until {_format_millis(state.expiry_millis)}")


@app.command("quota")
def quota(
    ctx: typer.Context,
    premium: bool = typer.Option(False, "--premium", help="Act as a premium user"),
    consume: bool = typer.Option(False, "--consume", help="Consume one unit"),
) -> None:
    """Show (or consume) today's free-tier review quota."""
    service = _ctx(ctx).service
    if consume:
        if service.consume_daily_quota(premium):
            rprint("[green]✓[/green] Quota consumed")
        else:
            rprint("[red]✗[/red] Daily limit reached")
            raise typer.Exit(code=1)

    remaining = service.remaining_daily_quota(premium)
    rprint(f"Remaining today: {'unlimited' if remaining is None else remaining}")


@app.command("now")
def now(ctx: typer.Context) -> None:
    """Show trusted time (never earlier than any previous reading)."""
    millis = _ctx(ctx).service.effective_now()
    rprint(f"{millis} ({_format_millis(millis)})")


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint(f"[bold]wordledger[/bold] v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
