"""
Lumi: Developer CLI for the personalization engine.

A Rich terminal interface over LearnerService for poking at learner
state without the web platform.

Commands:
- lumi answer      - Record an answer and show the new schedule
- lumi due         - List exercises due for review
- lumi practice    - Rank exercises for free practice
- lumi progress    - Show XP level and streak
- lumi leaderboard - Rank learners by total XP
- lumi freeze      - Use or earn a streak freeze
- lumi mood        - Classify session signals
- lumi present     - Pick a presentation for a skill
"""
from __future__ import annotations

import random
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from loguru import logger

from lumi.config import get_settings
from lumi.core.errors import LumiError
from lumi.delivery.learner_service import LearnerService
from lumi.delivery.rule_tables import load_emotion_rules, load_presentations
from lumi.delivery.state_store import StateStore
from lumi.emotion.engine import Emotion, LearnerSignals
from lumi.emotion.messages import encouragement
from lumi.presentation.selector import LearnerContext


# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="lumi",
    help="Lumi: adaptive learning engine CLI",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
    "emotion": {
        Emotion.ENGAGED: "green",
        Emotion.CONFIDENT: "bright_green",
        Emotion.BORED: "yellow",
        Emotion.TIRED: "blue",
        Emotion.STRUGGLING: "magenta",
        Emotion.FRUSTRATED: "red",
    },
}


def style_emotion(emotion: Emotion) -> str:
    """Get styled emotion string."""
    color = STYLES["emotion"].get(emotion, "white")
    return f"[{color}]{emotion.value}[/{color}]"


def _service() -> LearnerService:
    """Build a service from settings, loading any configured rule tables."""
    settings = get_settings()
    rules = load_emotion_rules(settings.emotion_rules_path) if settings.emotion_rules_path else []
    presentations = load_presentations(settings.presentations_path) if settings.presentations_path else {}
    store = StateStore(settings.state_db_path)
    return LearnerService(store, settings, emotion_rules=rules, presentations=presentations)


def _fail(error: LumiError) -> None:
    console.print(f"[{STYLES['incorrect']}]Error:[/] {error}")
    raise typer.Exit(1)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def answer(
    learner: str = typer.Argument(..., help="Learner id"),
    exercise: str = typer.Argument(..., help="Exercise id"),
    correct: bool = typer.Option(True, "--correct/--wrong", help="Whether the answer was right"),
    time_ms: int = typer.Option(5000, "--time-ms", "-t", help="Time spent answering (ms)"),
    hints: int = typer.Option(0, "--hints", help="Hints used"),
) -> None:
    """Record an answer and show the updated schedule."""
    service = _service()
    try:
        outcome = service.record_answer(learner, exercise, correct, time_ms, hints)
    except LumiError as e:
        _fail(e)
        return
    finally:
        service.store.close()

    style = STYLES["correct"] if correct else STYLES["incorrect"]
    state = outcome.review_state
    lines = [
        f"[{style}]Quality {int(outcome.quality)}[/] ({outcome.quality.name.lower()})",
        f"Next review: {state.next_review_date} (in {state.interval}d, EF {state.ease_factor:.2f})",
        f"Mastery: {outcome.mastery_level:.0f}%",
        f"Streak: {outcome.streak.state.current_streak} day(s)",
    ]
    if outcome.xp is not None:
        xp_state = outcome.xp.state
        lines.append(f"XP: {xp_state.total_xp} (level {xp_state.current_level})")
        if outcome.xp.level_up:
            lines.append(f"[{STYLES['warning']}]Level up! {outcome.xp.previous_level} -> {xp_state.current_level}[/]")

    mascot = encouragement(correct, outcome.streak.state.current_streak, random.Random())
    lines.append(f"\n[{STYLES['dim']}]Lumi: {mascot.message}[/]")

    console.print(Panel("\n".join(lines), title=f"{learner} / {exercise}", border_style="cyan"))


@app.command()
def due(
    learner: str = typer.Argument(..., help="Learner id"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum exercises"),
) -> None:
    """List exercises due for spaced review."""
    service = _service()
    try:
        ids = service.due_reviews(learner, limit=limit)
    finally:
        service.store.close()

    if not ids:
        console.print("[green]Nothing due. Come back tomorrow![/green]")
        return

    table = Table(title="Due for review")
    table.add_column("#", style="dim")
    table.add_column("Exercise")
    for i, exercise_id in enumerate(ids, 1):
        table.add_row(str(i), exercise_id)
    console.print(table)


@app.command()
def practice(
    learner: str = typer.Argument(..., help="Learner id"),
    exercises: Optional[List[str]] = typer.Argument(None, help="Exercise pool (defaults to attempted exercises)"),
) -> None:
    """Rank exercises for free-choice practice."""
    service = _service()
    try:
        ranked = service.practice_queue(learner, exercises or None)
    finally:
        service.store.close()

    if not ranked:
        console.print("[yellow]No exercises to rank.[/yellow]")
        return

    table = Table(title="Practice queue")
    table.add_column("#", style="dim")
    table.add_column("Exercise")
    for i, exercise_id in enumerate(ranked, 1):
        table.add_row(str(i), exercise_id)
    console.print(table)


@app.command()
def progress(
    learner: str = typer.Argument(..., help="Learner id"),
) -> None:
    """Show XP level and streak."""
    service = _service()
    try:
        summary = service.progress(learner)
    finally:
        service.store.close()

    xp = summary.xp
    streak = summary.streak

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Level", str(xp.current_level))
    table.add_row("Total XP", str(xp.total_xp))
    table.add_row("XP to next level", str(xp.xp_to_next_level))
    table.add_row("Level progress", f"{xp.progress_percent}%")
    table.add_row("XP today", str(xp.xp_earned_today))
    table.add_row("Current streak", str(streak.current_streak))
    table.add_row("Longest streak", str(streak.longest_streak))
    table.add_row("Active today", "yes" if streak.is_active_today else "no")
    table.add_row("Freeze available", "yes" if streak.freeze_available else "no")
    if streak.days_until_streak_loss is not None:
        table.add_row("Days until streak loss", str(streak.days_until_streak_loss))

    console.print(f"\n[{STYLES['info']}]Progress for {learner}[/]")
    console.print(table)


@app.command()
def leaderboard(
    limit: int = typer.Option(10, "--limit", "-l", help="Number of learners to show"),
) -> None:
    """Rank learners by total XP."""
    service = _service()
    try:
        entries = service.leaderboard(limit)
    finally:
        service.store.close()

    if not entries:
        console.print("[yellow]No XP earned yet.[/yellow]")
        return

    table = Table(title="Leaderboard")
    table.add_column("#", style="dim")
    table.add_column("Learner")
    table.add_column("Level", justify="right")
    table.add_column("XP", justify="right", style="bold")
    for entry in entries:
        table.add_row(str(entry.rank), entry.learner_id, str(entry.level), str(entry.total_xp))
    console.print(table)


@app.command()
def freeze(
    learner: str = typer.Argument(..., help="Learner id"),
    earn: bool = typer.Option(False, "--earn/--use", help="Earn a freeze instead of using one"),
) -> None:
    """Use or earn a streak freeze."""
    service = _service()
    try:
        result = service.earn_streak_freeze(learner) if earn else service.use_streak_freeze(learner)
    finally:
        service.store.close()

    style = STYLES["correct"] if result.success else STYLES["warning"]
    console.print(f"[{style}]{result.message}[/]")
    if not result.success:
        raise typer.Exit(1)


@app.command()
def mood(
    learner: str = typer.Argument(..., help="Learner id"),
    errors: int = typer.Option(0, "--errors", help="Consecutive errors"),
    correct_streak: int = typer.Option(0, "--correct", help="Consecutive correct answers"),
    ratio: float = typer.Option(1.0, "--ratio", help="Response time ratio (observed / expected)"),
    minutes: float = typer.Option(0.0, "--minutes", help="Session duration in minutes"),
    hints: int = typer.Option(0, "--hints", help="Hint requests"),
    success_rate: float = typer.Option(0.0, "--success-rate", help="Success rate 0-1"),
    click_variance: Optional[str] = typer.Option(None, "--click-variance", help="low, normal or high"),
    session: Optional[str] = typer.Option(None, "--session", help="Session id for the log"),
) -> None:
    """Classify session signals into an emotional state."""
    signals = LearnerSignals(
        response_time_ratio=ratio,
        consecutive_errors=errors,
        consecutive_correct=correct_streak,
        session_duration_minutes=minutes,
        hint_requests=hints,
        success_rate=success_rate,
        click_variance=click_variance,
    )
    service = _service()
    try:
        detected = service.detect_and_log_emotion(learner, signals, session)
    finally:
        service.store.close()

    console.print(Panel(
        f"Emotion: {style_emotion(detected.emotion)} (confidence {detected.confidence:.2f})\n"
        f"Action: {detected.suggested_action}\n\n"
        f"{detected.message}",
        title="Mood",
        border_style="magenta",
    ))


@app.command()
def present(
    learner: str = typer.Argument(..., help="Learner id"),
    skill: str = typer.Argument(..., help="Skill id"),
    age: int = typer.Option(..., "--age", help="Learner age"),
    style: Optional[str] = typer.Option(None, "--style", help="Learning style"),
    interest: Optional[List[str]] = typer.Option(None, "--interest", "-i", help="Interest tag (repeatable)"),
    method: Optional[str] = typer.Option(None, "--method", help="Preferred pedagogical approach"),
    energy: Optional[str] = typer.Option(None, "--energy", help="low, medium or high"),
    minutes: Optional[float] = typer.Option(None, "--minutes", help="Time available"),
) -> None:
    """Pick the best presentation of a skill for a learner."""
    context = LearnerContext(
        age=age,
        learning_style=style,
        interests=frozenset(interest or []),
        preferred_method=method,
        energy_level=energy,
        time_available_minutes=minutes,
    )
    service = _service()
    try:
        choice = service.choose_presentation(learner, skill, context)
    finally:
        service.store.close()

    if choice is None:
        console.print(f"[{STYLES['warning']}]No presentation available for {skill}[/]")
        raise typer.Exit(1)

    reasons = ", ".join(choice.reasons) or "none"
    console.print(Panel(
        f"[bold]{choice.candidate.id}[/bold] ({choice.candidate.presentation_type.value})\n"
        f"Score: {choice.score:.1f}\n"
        f"[{STYLES['dim']}]Reasons: {reasons}[/]",
        title=f"Presentation for {skill}",
        border_style="green",
    ))


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB", retention=3)

    try:
        app()
    except LumiError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
