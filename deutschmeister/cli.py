"""
DeutschMeister: terminal CLI for German/Spanish vocabulary.

A Rich terminal interface for spaced repetition study over an
active learning pool.

Commands:
- deutschmeister study     - Start a study session
- deutschmeister queue     - Preview the next session
- deutschmeister grade     - Grade one word without a session
- deutschmeister stats     - Show pool and mastery counts
- deutschmeister mastered  - List mastered words
- deutschmeister reset     - Clear all progress
"""
from __future__ import annotations

import random
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .config import get_settings
from .errors import DeutschMeisterError
from .progress import ProgressMap, ProgressRecord, merge_record
from .progress_store import ProgressStore
from .scheduler import Grade, ReviewScheduler, SchedulerConfig, parse_grade
from .vocabulary import StudyMode, VocabularyDeck, Word

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="deutschmeister",
    help="DeutschMeister: spaced repetition for German vocabulary",
    no_args_is_help=True,
)
console = Console()

ProgressOption = typer.Option(None, "--progress", "-p", help="Progress JSON file")
VocabOption = typer.Option(None, "--vocab", "-v", help="Vocabulary JSON file")


# =============================================================================
# Styling
# =============================================================================

GRADE_STYLES = {
    Grade.FORGOT: "bold red",
    Grade.HARD: "bold yellow",
    Grade.GOOD: "bold cyan",
    Grade.EASY: "bold green",
}

GROUP_STYLES = {
    "due": "[yellow]due[/yellow]",
    "mastered": "[magenta]mastered[/magenta]",
    "new": "[green]new[/green]",
}


# =============================================================================
# Context
# =============================================================================


@dataclass
class StudyContext:
    """Everything a command needs, loaded once."""

    deck: VocabularyDeck
    store: ProgressStore
    scheduler: ReviewScheduler
    progress: ProgressMap

    def grade(self, word_id: str, grade: Grade) -> ProgressRecord:
        """Advance one word and persist the whole map."""
        record = self.scheduler.advance(self.progress.get(word_id), grade, word_id)
        self.progress = merge_record(self.progress, record)
        self.store.save(self.progress)
        return record


def _load_context(progress_path: Path | None, vocab_path: Path | None) -> StudyContext:
    settings = get_settings()
    deck = VocabularyDeck.load(vocab_path or settings.vocabulary_path)
    store = ProgressStore(progress_path or settings.progress_path)
    scheduler = ReviewScheduler(SchedulerConfig.from_settings(settings))
    return StudyContext(deck=deck, store=store, scheduler=scheduler, progress=store.load())


def _fail(exc: DeutschMeisterError) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(1)


# =============================================================================
# Display Helpers
# =============================================================================


def display_prompt(word: Word, mode: StudyMode, index: int, total: int) -> None:
    """Display the prompt side of a card."""
    header = f"Card {index}/{total}  |  {word.word_type.value}"
    content = f"[bold]{word.prompt(mode)}[/bold]"

    example = word.example(mode)
    if example:
        content += f"\n\n[dim]{example[0]}[/dim]"

    console.print(Panel(content, title=header, title_align="left", border_style="cyan", padding=(1, 2)))


def display_answer(word: Word, mode: StudyMode) -> None:
    """Display the answer side of a card."""
    content = f"[bold]{word.answer(mode)}[/bold]"

    example = word.example(mode)
    if example:
        content += f"\n\n[dim]{example[1]}[/dim]"

    console.print(Panel(content, border_style="green", padding=(1, 2)))


def _ask_grade() -> Grade:
    """Ask for a recall grade until a valid one is given."""
    console.print("\n[dim]Rate your recall:[/dim]")
    console.print("  0 / forgot  - Complete blackout      (back in 1 min)")
    console.print("  3 / hard    - Recalled with difficulty (5 min)")
    console.print("  4 / good    - Recalled after hesitation (20 min)")
    console.print("  5 / easy    - Perfect recall         (days)")

    while True:
        answer = Prompt.ask("Grade", default="easy")
        try:
            return parse_grade(answer)
        except DeutschMeisterError as exc:
            console.print(f"[red]{escape(str(exc))}[/red]")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def study(
    mode: StudyMode = typer.Option(StudyMode.DE_ES, "--mode", "-m", help="Which side to show first"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Stop after this many cards"),
    progress_path: Optional[Path] = ProgressOption,
    vocab_path: Optional[Path] = VocabOption,
) -> None:
    """Start an interactive study session."""
    try:
        ctx = _load_context(progress_path, vocab_path)
    except DeutschMeisterError as exc:
        _fail(exc)

    queue = ctx.deck.get_by_ids(ctx.scheduler.select_session(ctx.deck.ids(), ctx.progress))
    random.shuffle(queue)
    if limit is not None:
        queue = queue[:limit]

    if not queue:
        console.print("[green]Nothing to study right now. Come back later![/green]")
        return

    counts = {grade: 0 for grade in Grade}
    for index, word in enumerate(queue, start=1):
        display_prompt(word, mode, index, len(queue))
        Prompt.ask("[dim]Press Enter to reveal[/dim]", default="", show_default=False)
        display_answer(word, mode)

        grade = _ask_grade()
        try:
            record = ctx.grade(word.id, grade)
        except DeutschMeisterError as exc:
            _fail(exc)
        counts[grade] += 1

        style = GRADE_STYLES[grade]
        console.print(
            f"[{style}]{grade.label}[/{style}]  "
            f"[dim]mastery {record.mastery_count}/{ctx.scheduler.config.mastery_threshold}, "
            f"status {record.status.value}[/dim]\n"
        )

    summary = "  ".join(f"{grade.label}: {count}" for grade, count in counts.items())
    console.print(Panel(
        f"[bold]Session Complete![/bold]\n\nCards reviewed: {len(queue)}\n{summary}",
        title="Summary",
        border_style="green",
    ))


@app.command()
def queue(
    limit: int = typer.Option(20, "--limit", "-l", help="Number of words to preview"),
    progress_path: Optional[Path] = ProgressOption,
    vocab_path: Optional[Path] = VocabOption,
) -> None:
    """Preview the words in the next session."""
    try:
        ctx = _load_context(progress_path, vocab_path)
    except DeutschMeisterError as exc:
        _fail(exc)

    plan = ctx.scheduler.plan_session(ctx.deck.ids(), ctx.progress)

    console.print(
        f"\n[bold]Next Session[/bold]  "
        f"{len(plan.due_active)} due, {len(plan.due_mastered)} mastered, {len(plan.new)} new\n"
    )

    table = Table()
    table.add_column("ID")
    table.add_column("German")
    table.add_column("Spanish")
    table.add_column("Group")

    for item_id in plan.queue[:limit]:
        word = ctx.deck.get(item_id)
        table.add_row(
            item_id,
            word.german_display if word else "?",
            word.spanish if word else "?",
            GROUP_STYLES[plan.group_of(item_id)],
        )

    console.print(table)


@app.command()
def grade(
    word_id: str = typer.Argument(..., help="Word id"),
    value: str = typer.Argument(..., help="forgot|hard|good|easy or 0|3|4|5"),
    progress_path: Optional[Path] = ProgressOption,
    vocab_path: Optional[Path] = VocabOption,
) -> None:
    """Grade a single word without starting a session."""
    try:
        parsed = parse_grade(value)
        ctx = _load_context(progress_path, vocab_path)
        if word_id not in ctx.deck:
            logger.warning(f"Grading {word_id!r}, which is not in the vocabulary")
        record = ctx.grade(word_id, parsed)
    except DeutschMeisterError as exc:
        _fail(exc)

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value", style="bold")
    table.add_row("Word", word_id)
    table.add_row("Grade", f"{int(parsed)} ({parsed.label})")
    table.add_row("Interval", f"{record.interval} d")
    table.add_row("Repetition", str(record.repetition))
    table.add_row("Easiness", f"{record.easiness_factor:.2f}")
    table.add_row("Mastery", str(record.mastery_count))
    table.add_row("Status", record.status.value)
    table.add_row("Due at", str(record.due_at))
    console.print(table)


@app.command()
def stats(
    progress_path: Optional[Path] = ProgressOption,
    vocab_path: Optional[Path] = VocabOption,
) -> None:
    """Show pool and mastery statistics."""
    try:
        ctx = _load_context(progress_path, vocab_path)
    except DeutschMeisterError as exc:
        _fail(exc)

    summary = ctx.scheduler.summarize(ctx.progress)
    plan = ctx.scheduler.plan_session(ctx.deck.ids(), ctx.progress)

    console.print("\n[bold cyan]Learning Statistics[/bold cyan]")
    console.print("=" * 40)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Words in vocabulary", str(len(ctx.deck)))
    table.add_row("Words seen", str(summary.total_seen))
    table.add_row("Active (learning pool)", str(summary.active))
    table.add_row("Mastered", str(summary.mastered))
    table.add_row("Due reviews", str(summary.due))
    table.add_row("Next session (due + new)", str(plan.total))
    table.add_row("Pool limit", "none" if summary.pool_limit is None else str(summary.pool_limit))
    if summary.available_slots is not None:
        table.add_row("Free pool slots", str(summary.available_slots))

    console.print(table)


@app.command()
def mastered(
    progress_path: Optional[Path] = ProgressOption,
    vocab_path: Optional[Path] = VocabOption,
) -> None:
    """List words that have reached mastery."""
    try:
        ctx = _load_context(progress_path, vocab_path)
    except DeutschMeisterError as exc:
        _fail(exc)

    ids = ctx.scheduler.mastered_ids(ctx.progress)
    if not ids:
        threshold = ctx.scheduler.config.mastery_threshold
        console.print(f"[dim]No mastered words yet. Grade a word 'easy' {threshold} times to master it.[/dim]")
        return

    table = Table(title=f"Mastered Words ({len(ids)})")
    table.add_column("ID")
    table.add_column("German")
    table.add_column("Spanish")
    table.add_column("Type")

    for item_id in ids:
        word = ctx.deck.get(item_id)
        if word is None:
            table.add_row(item_id, "?", "?", "")
            continue
        table.add_row(item_id, word.german_display, word.spanish, word.word_type.value)

    console.print(table)


@app.command()
def reset(
    progress_path: Optional[Path] = ProgressOption,
    confirm: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation",
    ),
) -> None:
    """Clear all progress for a fresh start."""
    if not confirm and not Confirm.ask("Reset ALL progress? This cannot be undone!", default=False):
        raise typer.Exit(0)

    store = ProgressStore(progress_path or get_settings().progress_path)
    try:
        count = store.reset()
    except DeutschMeisterError as exc:
        _fail(exc)
    console.print(f"[green]Cleared {count} progress records.[/green]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{level: <8}</level> {message}",
    )

    app()


if __name__ == "__main__":
    main()
