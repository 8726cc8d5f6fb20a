"""
Exam Grader CLI Application.

Provides a command-line interface for grading attempt files, validating
their question data, and previewing seeded shuffles.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from exam_grader.attempt import (
    AttemptLoader,
    AttemptParseError,
    AttemptValidationError,
    AttemptValidator,
)
from exam_grader.config import get_settings
from exam_grader.grading import create_audit, grade_attempt
from exam_grader.models import AttemptGradingResult, GradedAnswer
from exam_grader.output import AuditTrail, ReportFormat, ReportGenerator
from exam_grader.shuffling import shuffle as shuffle_items

# Create Typer app
app = typer.Typer(
    name="exam-grader",
    help="Deterministic grading and scoring of exam attempts",
    add_completion=False,
)

console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def grade(
    attempt_file: Annotated[Path, typer.Argument(help="Path to the attempt JSON file")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file path for the report"),
    ] = None,
    format: Annotated[
        ReportFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = ReportFormat.JSON,
    passing_score: Annotated[
        Optional[float],
        typer.Option("--passing-score", "-p", help="Pass threshold in percent"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Refuse to grade attempts that fail validation"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show per-answer results"),
    ] = False,
) -> None:
    """
    Grade an attempt file.

    Every answer is graded deterministically; essay and canvas answers are
    left for manual grading. The report is printed or written to --output.
    """
    try:
        settings = get_settings()
        _configure_logging(settings.log_level)

        if not attempt_file.exists():
            console.print(f"[red]Error:[/red] Attempt file not found: {attempt_file}")
            raise typer.Exit(1)

        submission = AttemptLoader().load(attempt_file)

        validator = AttemptValidator()
        if strict:
            validator.validate_or_raise(submission)
        elif verbose:
            _, issues = validator.validate(submission)
            for issue in issues:
                console.print(f"[yellow]Warning:[/yellow] {issue}")

        result = grade_attempt(submission.answers)
        audit = create_audit(submission.answers, result, submission.attempt_id)

        threshold = passing_score
        if threshold is None:
            threshold = submission.passing_score
        if threshold is None:
            threshold = settings.passing_score_percent

        _display_results(result, threshold, verbose)

        generator = ReportGenerator()
        if output:
            saved_path = generator.save(result, output, audit, format, threshold)
            console.print(f"\n[green]Report saved to:[/green] {saved_path}")
        else:
            report = generator.generate(result, audit, format, threshold)
            console.print("\n" + report, markup=False, highlight=False, soft_wrap=True)

        if settings.audit_enabled:
            audit_path = AuditTrail(settings.output_directory / "audits").save(audit)
            if verbose:
                console.print(f"[dim]Audit saved to: {audit_path}[/dim]")

    except AttemptParseError as e:
        console.print(f"[red]Attempt Parse Error:[/red] {e}")
        raise typer.Exit(1)
    except AttemptValidationError as e:
        console.print(f"[red]Attempt Validation Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def validate(
    attempt_file: Annotated[Path, typer.Argument(help="Path to the attempt JSON file")],
) -> None:
    """
    Validate an attempt file without grading it.

    Checks question types, point values, tolerances and answer keys.
    """
    try:
        if not attempt_file.exists():
            console.print(f"[red]Error:[/red] File not found: {attempt_file}")
            raise typer.Exit(1)

        submission = AttemptLoader().load(attempt_file)
        is_valid, issues = AttemptValidator().validate(submission)

        table = Table(title=f"Attempt {submission.attempt_id or attempt_file.name}")
        table.add_column("Question", style="cyan")
        table.add_column("Type")
        table.add_column("Points", justify="right")

        for answer in submission.answers:
            table.add_row(answer.question_id, answer.question_type, str(answer.points))

        console.print(table)

        if is_valid:
            console.print("\n[green]✓ Attempt is valid[/green]")
        else:
            console.print("\n[yellow]⚠ Validation issues found:[/yellow]")
            for issue in issues:
                console.print(f"  • {issue}")
            raise typer.Exit(1)

    except AttemptParseError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def shuffle(
    items: Annotated[list[str], typer.Argument(help="Items to shuffle")],
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", "-s", help="Seed for a reproducible order"),
    ] = None,
) -> None:
    """Print the items in shuffled order, one per line."""
    for item in shuffle_items(items, seed=seed):
        console.print(item, markup=False, highlight=False)


def _display_results(
    result: AttemptGradingResult, passing_score: float | None, verbose: bool = False
) -> None:
    """Display grading results in a formatted panel and table."""

    score_color = (
        "green" if result.percentage_score >= 70 else "yellow" if result.percentage_score >= 50 else "red"
    )
    console.print(
        Panel(
            f"[{score_color}][bold]{result.total_score} / {result.max_score}[/bold] "
            f"({result.percentage_score:.1f}%)[/{score_color}]",
            title="Final Score",
        )
    )

    passed = result.passed(passing_score)
    if passed is not None:
        verdict = "[green]PASSED[/green]" if passed else "[red]NOT PASSED[/red]"
        console.print(f"{verdict} (passing: {passing_score}%)")

    if result.has_manual_grading:
        console.print("[yellow]⚠ Some answers need manual grading before the score is final[/yellow]")

    if verbose:
        table = Table(title="Answers")
        table.add_column("Question", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Status")

        for answer in result.graded_answers:
            table.add_row(
                answer.question_id,
                f"{answer.points_awarded}/{answer.points}",
                _status_icon(answer),
            )

        console.print(table)


def _status_icon(answer: GradedAnswer) -> str:
    if answer.needs_manual_grading:
        return "📝"
    return "✅" if answer.is_correct else "❌"


if __name__ == "__main__":
    app()
