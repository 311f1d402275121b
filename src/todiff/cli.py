"""Command-line interface for todiff."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.text import Text

from todiff.engine import SemanticDiffer, ThreeWayMerger
from todiff.extraction import TodoHistory
from todiff.logging_config import configure_logging
from todiff.models import DiffOptions
from todiff.parsing import parse_lines
from todiff.report import ReportRenderer, build_report, make_console

diff_app = typer.Typer(
    name="todiff",
    help="Semantic diff of two todo.txt files",
    add_completion=False,
)
merge_app = typer.Typer(
    name="todiff-merge",
    help="Three-way merge of todo.txt files",
    add_completion=False,
)
history_app = typer.Typer(
    name="todiff-history",
    help="Semantic diffs of a todo.txt file across Git history",
    add_completion=False,
)
error_console = Console(stderr=True, highlight=False)


def read_snapshot(path: Path) -> List[str]:
    """Read a todo.txt file as decoded lines; undecodable bytes become U+FFFD."""
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        raise ValueError(f"Cannot read {path}: {e.strerror or e}") from e


@diff_app.command()
def diff(
    before: Path = typer.Argument(..., help="Older version of the todo.txt file"),
    after: Path = typer.Argument(..., help="Newer version of the todo.txt file"),
    similarity: int = typer.Option(
        75, "--similarity", "-s", help="Minimum description similarity (%) to match edited tasks; 100 disables"
    ),
    removed: bool = typer.Option(True, "--removed/--no-removed", help="Report removed tasks"),
    color: str = typer.Option("auto", "--color", help="Colorize output: auto, always or never"),
    workers: int = typer.Option(1, "--workers", "-w", help="Threads used to parse lines"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log matching decisions to stderr"),
) -> None:
    """Show what changed between two todo.txt files, task by task."""
    try:
        configure_logging(verbose)
        options = DiffOptions(similarity=similarity, show_removed=removed, color=color, workers=workers)
        console = make_console(options.color)

        result = SemanticDiffer(options).diff_lines(read_snapshot(before), read_snapshot(after))
        report = build_report(result, show_removed=options.show_removed)

        if as_json:
            console.out(report.model_dump_json(indent=2))
        else:
            ReportRenderer(console).render(report)

    except Exception as e:
        error_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@merge_app.command()
def merge(
    ancestor: Path = typer.Argument(..., help="Common ancestor version"),
    current: Path = typer.Argument(..., help="Our version"),
    other: Path = typer.Argument(..., help="Their version"),
    similarity: int = typer.Option(
        75, "--similarity", "-s", help="Minimum description similarity (%) to match edited tasks; 100 disables"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the merged file here"),
    workers: int = typer.Option(1, "--workers", "-w", help="Threads used to parse lines"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log matching decisions to stderr"),
) -> None:
    """Merge two todo.txt files that share an ancestor. Exits with 1 on conflicts."""
    try:
        configure_logging(verbose)
        options = DiffOptions(similarity=similarity, workers=workers)

        result = ThreeWayMerger(options).merge(
            parse_lines(read_snapshot(ancestor), options.workers),
            parse_lines(read_snapshot(current), options.workers),
            parse_lines(read_snapshot(other), options.workers),
        )
        text = result.to_text()
        if text:
            text += "\n"

        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(text, encoding="utf-8")
        else:
            typer.echo(text, nl=False)

    except Exception as e:
        error_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if result.has_conflicts:
        error_console.print("[bold yellow]Merge has conflicts[/bold yellow]")
        raise typer.Exit(1)


@history_app.command()
def history(
    repo_path: Path = typer.Argument(..., help="Path to Git repository"),
    file_path: str = typer.Argument(..., help="Path of the todo.txt file inside the repository"),
    branch: str = typer.Option("HEAD", "--branch", "-b", help="Branch to walk"),
    max_count: Optional[int] = typer.Option(None, "--max-count", "-n", help="Maximum commits to show"),
    similarity: int = typer.Option(
        75, "--similarity", "-s", help="Minimum description similarity (%) to match edited tasks; 100 disables"
    ),
    removed: bool = typer.Option(False, "--removed/--no-removed", help="Report removed tasks"),
    color: str = typer.Option("auto", "--color", help="Colorize output: auto, always or never"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log matching decisions to stderr"),
) -> None:
    """Show the semantic diff introduced by each commit touching a todo.txt file."""
    try:
        configure_logging(verbose)
        options = DiffOptions(similarity=similarity, show_removed=removed, color=color)
        console = make_console(options.color)
        differ = SemanticDiffer(options)
        renderer = ReportRenderer(console)

        for number, revision in enumerate(TodoHistory(repo_path).iter_revisions(file_path, branch, max_count)):
            if number:
                console.print()
            console.print(
                Text(revision.short_hash, style="cyan")
                + Text(f" {revision.summary} ")
                + Text(f"({revision.author_name}, {revision.timestamp:%Y-%m-%d})", style="dim")
            )
            console.print()
            result = differ.diff_lines(revision.before_lines, revision.after_lines)
            renderer.render(build_report(result, show_removed=options.show_removed))

    except Exception as e:
        error_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def run_diff() -> None:
    diff_app()


def run_merge() -> None:
    merge_app()


def run_history() -> None:
    history_app()
